"""
Clipboard and browser integration.

Both shell out to the platform helper (pbcopy/xclip/clip, open/xdg-open)
and raise PlatformError subclasses instead of returning status flags, so
the controller can turn failures into a status message.
"""

import logging
import subprocess
import sys

from ..exceptions import CommandError, UnsupportedPlatformError

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 5


def get_clipboard_command(platform: str) -> list[str] | None:
    if platform == "darwin":
        return ["pbcopy"]
    if platform.startswith("linux"):
        return ["xclip", "-selection", "clipboard"]
    if platform == "win32":
        return ["clip"]
    return None


def get_open_command(platform: str, url: str) -> list[str]:
    if platform == "darwin":
        return ["open", url]
    if platform == "win32":
        return ["cmd", "/c", "start", "", url]
    return ["xdg-open", url]


def _run(command: list[str], *, input_bytes: bytes | None = None) -> None:
    try:
        subprocess.run(
            command,
            input=input_bytes,
            check=True,
            timeout=_TIMEOUT_SECONDS,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise CommandError(f"{command[0]} is not installed", command=command[0]) from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
        message = stderr or f"{command[0]} exited with code {e.returncode}"
        raise CommandError(message, command=command[0], exit_code=e.returncode) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"{command[0]} timed out", command=command[0]) from e


def write_to_clipboard(text: str, platform: str | None = None) -> None:
    """Copy ``text`` to the system clipboard."""
    platform = platform or sys.platform
    command = get_clipboard_command(platform)
    if command is None:
        raise UnsupportedPlatformError(f"Clipboard not supported on {platform}", platform=platform)
    _run(command, input_bytes=text.encode("utf-8"))
    logger.debug("Copied %d characters with %s", len(text), command[0])


def open_browser(url: str, platform: str | None = None) -> None:
    """Open ``url`` with the platform's default handler."""
    platform = platform or sys.platform
    _run(get_open_command(platform, url))
    logger.debug("Opened %s", url)
