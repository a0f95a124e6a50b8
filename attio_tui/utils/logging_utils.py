"""Logging setup for the TUI.

Modules use the standard pattern:

    import logging
    logger = logging.getLogger(__name__)

The TUI owns the terminal, so nothing may log to stderr while it runs.
``setup_tui_logging`` sends everything to a rotating file in the config
directory instead.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ..config.constants import LOG_FILE_NAME, get_config_dir

# Max log file size: 5MB, keep 2 backups
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 2

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_log_path(config_dir: Optional[Path] = None) -> Path:
    return (config_dir or get_config_dir()) / LOG_FILE_NAME


def setup_tui_logging(debug: bool = False, config_dir: Optional[Path] = None) -> logging.Logger:
    """
    Route logging to ``attio-tui.log`` and return the package logger.

    The root logger stays at WARNING to keep third-party libraries quiet;
    ``attio_tui.*`` loggers run at INFO, or DEBUG when ``debug`` is set.
    """
    package_logger = logging.getLogger("attio_tui")
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    try:
        log_file = get_log_path(config_dir)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        root = logging.getLogger()
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            handler = RotatingFileHandler(log_file, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT)
            handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            root.addHandler(handler)
        root.setLevel(logging.WARNING)
    except OSError as e:
        # Logging is what failed, so report it the only way left
        print(f"Warning: TUI logging setup failed: {e}", file=sys.stderr)

    return package_logger
