"""Custom exception hierarchy for attio-tui.

Exception Hierarchy:
    AttioTuiError (base)
    ├── ValidationError - bad API keys, URLs and other user input
    ├── NetworkError - fetch or schema probe failures (retryable)
    │   └── ApiError - non-2xx HTTP response, carries the status code
    ├── ConfigurationError - malformed persisted config or column settings
    └── PlatformError - OS integration
        ├── UnsupportedPlatformError
        └── CommandError - a helper process exited non-zero

Usage:
    from attio_tui.exceptions import ApiError, NetworkError

    try:
        response = await client.get("/v2/objects")
    except httpx.TransportError as e:
        raise NetworkError("Request failed", path="/v2/objects") from e
"""

from typing import Any, Optional


class AttioTuiError(Exception):
    """Base exception for all attio-tui errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., IDs, paths)
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ValidationError(AttioTuiError):
    """User supplied value failed validation."""

    pass


# =============================================================================
# Network Errors
# =============================================================================


class NetworkError(AttioTuiError):
    """A request to the Attio API could not be completed."""

    def __init__(self, message: str = "Network request failed", **context: Any) -> None:
        context.setdefault("retryable", True)
        super().__init__(message, **context)


class ApiError(NetworkError):
    """The Attio API answered with a non-success status."""

    def __init__(
        self,
        message: str = "API request failed",
        *,
        status: Optional[int] = None,
        **context: Any,
    ) -> None:
        self.status = status
        if status is not None:
            context["status"] = status
        # Only throttling and upstream failures are worth retrying
        context["retryable"] = status is not None and (status == 429 or status >= 500)
        super().__init__(message, **context)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(AttioTuiError):
    """Configuration or settings issue."""

    def __init__(
        self,
        message: str = "Configuration error",
        *,
        path: Optional[str] = None,
        **context: Any,
    ) -> None:
        if path:
            context["path"] = path
        super().__init__(message, **context)


# =============================================================================
# Platform Errors
# =============================================================================


class PlatformError(AttioTuiError):
    """Base exception for clipboard and browser integration."""

    pass


class UnsupportedPlatformError(PlatformError):
    """No helper is available for this platform."""

    def __init__(self, message: str = "Unsupported platform", **context: Any) -> None:
        super().__init__(message, **context)


class CommandError(PlatformError):
    """A helper subprocess failed."""

    def __init__(
        self,
        message: str = "Command failed",
        *,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        **context: Any,
    ) -> None:
        if command:
            context["command"] = command
        if exit_code is not None:
            context["exit_code"] = exit_code
        super().__init__(message, **context)
