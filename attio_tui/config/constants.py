"""
Centralized constants for attio-tui.

Tunables for pagination, telemetry and UI timing live here so the state
engine and the Textual shell agree on them.
"""

import os
from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

CONFIG_DIR = Path.home() / ".attio-tui"
CONFIG_DIR_ENV_VAR = "ATTIO_TUI_CONFIG_DIR"
DEBUG_DIR = CONFIG_DIR / "debug"

CONFIG_FILE_NAME = "config.json"
COLUMNS_FILE_NAME = "columns.json"
LOG_FILE_NAME = "attio-tui.log"


def get_config_dir() -> Path:
    """Get the config directory, respecting ATTIO_TUI_CONFIG_DIR.

    Tests point the variable at a temp dir so they never touch the
    user's real config.
    """
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override)
    return CONFIG_DIR


def get_debug_dir() -> Path:
    return get_config_dir() / "debug"


# =============================================================================
# API
# =============================================================================

DEFAULT_BASE_URL = "https://api.attio.com"
APP_BASE_URL = "https://app.attio.com"
REQUEST_TIMEOUT_SECONDS = 30.0
MIN_API_KEY_LENGTH = 20

# =============================================================================
# PAGINATION
# =============================================================================

DEFAULT_PAGE_LIMIT = 25  # Items per page for every resource kind
PREFETCH_THRESHOLD = 5  # Rows from the bottom before "load more" fires
LOAD_MORE_COOLDOWN_SECONDS = 1.5  # Min gap between two "load more" requests

# =============================================================================
# TELEMETRY
# =============================================================================

REQUEST_LOG_CAPACITY = 200  # Ring buffer size for the request log
DEBUG_EXPORT_REQUEST_COUNT = 20  # Most recent requests included in exports
ACTION_LOG_CAPACITY = 100  # Dispatched events kept for bug reports
DEBUG_PANEL_REQUEST_COUNT = 8  # Requests shown in the debug panel

# =============================================================================
# UI
# =============================================================================

COMMAND_PALETTE_MAX_VISIBLE = 10
STATUS_MESSAGE_TIMEOUT_SECONDS = 3.0
