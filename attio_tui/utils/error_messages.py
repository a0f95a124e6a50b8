"""Turn exceptions into short messages for the status bar and request log."""

import traceback

import httpx

from ..exceptions import ApiError, AttioTuiError, NetworkError

STATUS_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def format_status_description(status: int) -> str:
    return STATUS_DESCRIPTIONS.get(status, f"HTTP {status}")


def error_to_debug_string(error: BaseException) -> str:
    """Full traceback text, for the log file."""
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def get_root_cause(error: BaseException) -> BaseException:
    """Follow ``__cause__`` to the deepest exception."""
    current = error
    seen: set[int] = set()
    while current.__cause__ is not None and id(current) not in seen:
        seen.add(id(current))
        current = current.__cause__
    return current


def _message_of(error: BaseException) -> str:
    if isinstance(error, AttioTuiError):
        return error.message
    return str(error)


def extract_error_message(error: BaseException) -> str:
    """
    A display message for any error.

    API errors are prefixed with their HTTP status description and
    transport failures with "Network error"; the root cause's text is
    appended when it adds something.
    """
    message = _message_of(error) or type(error).__name__

    status = None
    if isinstance(error, ApiError):
        status = error.status
    elif isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code

    if status is not None:
        if status == 429:
            prefix = "Rate limited by Attio API"
        else:
            prefix = format_status_description(status)
        if str(status) not in message and prefix not in message:
            message = f"{prefix}: {message}"
        return message

    root = get_root_cause(error)
    if isinstance(error, NetworkError) or isinstance(root, httpx.TransportError):
        root_message = _message_of(root) if root is not error else ""
        if root_message and root_message not in message:
            message = f"{message}: {root_message}"
        if not message.lower().startswith("network error"):
            message = f"Network error: {message}"
        return message

    return message or "Unknown error"
