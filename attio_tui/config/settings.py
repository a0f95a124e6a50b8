"""
attio-tui application configuration.

Handles persistence of the API key, base URL and debug flag.
Config is stored in ~/.attio-tui/config.json
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from ..exceptions import ConfigurationError, ValidationError
from .constants import CONFIG_FILE_NAME, DEFAULT_BASE_URL, MIN_API_KEY_LENGTH, get_config_dir

logger = logging.getLogger(__name__)

_API_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class AppConfig:
    """Persisted application settings."""

    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    debug_enabled: bool = False

    def with_api_key(self, api_key: str) -> AppConfig:
        return AppConfig(api_key=api_key, base_url=self.base_url, debug_enabled=self.debug_enabled)


def get_config_path() -> Path:
    """
    Get path to the config file.

    Returns:
        Path to ~/.attio-tui/config.json
    """
    return get_config_dir() / CONFIG_FILE_NAME


def is_valid_api_key(value: str) -> bool:
    """Check an API key typed by the user before it is persisted."""
    candidate = value.strip()
    return len(candidate) >= MIN_API_KEY_LENGTH and bool(_API_KEY_PATTERN.match(candidate))


def is_valid_base_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_api_key(value: str) -> str:
    """Return the trimmed key, or raise ValidationError."""
    candidate = value.strip()
    if not candidate:
        raise ValidationError("API key is required")
    if len(candidate) < MIN_API_KEY_LENGTH:
        raise ValidationError(
            f"API key must be at least {MIN_API_KEY_LENGTH} characters",
            length=len(candidate),
        )
    if not _API_KEY_PATTERN.match(candidate):
        raise ValidationError("API key may only contain letters, digits, '-' and '_'")
    return candidate


def parse_config(raw: Any) -> AppConfig:
    """
    Build an AppConfig from decoded JSON.

    Anything that is not a mapping yields defaults; individual fields with
    the wrong shape fall back to their default value.
    """
    if not isinstance(raw, dict):
        return AppConfig()

    api_key = raw.get("apiKey")
    if not isinstance(api_key, str) or not api_key.strip():
        api_key = None

    base_url = raw.get("baseUrl")
    if not isinstance(base_url, str) or not is_valid_base_url(base_url):
        base_url = DEFAULT_BASE_URL

    debug_enabled = raw.get("debugEnabled")
    if not isinstance(debug_enabled, bool):
        debug_enabled = False

    return AppConfig(api_key=api_key, base_url=base_url.rstrip("/"), debug_enabled=debug_enabled)


def read_json_file(path: Path) -> Any:
    """Decode a JSON settings file, raising ConfigurationError if it can't be read."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path.name}: {e}", path=str(path)) from e
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise ConfigurationError(f"Invalid JSON in {path.name}: {e}", path=str(path)) from e


def load_config(path: Path | None = None) -> AppConfig:
    """
    Load configuration from file.

    Returns:
        AppConfig, or defaults if the file doesn't exist or is invalid
    """
    path = path or get_config_path()
    if not path.exists():
        return AppConfig()
    try:
        return parse_config(read_json_file(path))
    except ConfigurationError as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return AppConfig()


def config_to_dict(config: AppConfig) -> dict[str, Any]:
    data = asdict(config)
    result: dict[str, Any] = {
        "baseUrl": data["base_url"],
        "debugEnabled": data["debug_enabled"],
    }
    if data["api_key"]:
        result["apiKey"] = data["api_key"]
    return result


def save_config(config: AppConfig, path: Path | None = None) -> Path:
    """
    Save configuration to file.

    Args:
        config: Configuration to save
    """
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_to_dict(config), indent=2) + "\n")
    return path
