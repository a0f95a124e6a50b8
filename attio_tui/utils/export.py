"""
File exports: results as JSON, state snapshots and bug reports.

Every writer creates missing parent directories. Snapshot and bug report
files are named after the export time with ':' and '.' replaced so the
name is valid on every platform.
"""

import json
import logging
import os
import platform
import re
import sys
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..config.constants import DEBUG_EXPORT_REQUEST_COUNT, get_debug_dir
from ..models.navigation import AppState
from ..services.request_log import DebugRequestLogEntry
from ..state.describe import describe_ui_state
from ..state.store import serialize_state
from .action_logger import ActionLogEntry

logger = logging.getLogger(__name__)

# CSI, OSC (including hyperlinks), charset selection and two-byte escapes
_ANSI_PATTERN = re.compile(
    r"[\x1b\x9b](?:\[\??[\d;]*[A-Za-z]|\][\d;]*(?:;[^\x07\x1b]*)*(?:\x07|\x1b\\)|[()#][A-Za-z0-9]|[A-Za-z])"
)


def strip_ansi(text: str) -> str:
    return _ANSI_PATTERN.sub("", text)


def _default(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return str(value)


def write_json(path: Path, data: Any) -> Path:
    """Write ``data`` as indented JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=_default), encoding="utf-8")
    return path


def append_line(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(text.rstrip("\n") + "\n")
    return path


def safe_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO timestamp usable in a file name: 2024-01-02T03-04-05-678Z."""
    moment = moment or datetime.now(timezone.utc)
    iso = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return re.sub(r"[:.]", "-", iso)


def _terminal_size() -> dict[str, int]:
    try:
        size = os.get_terminal_size()
    except OSError:
        return {"columns": 0, "rows": 0}
    return {"columns": size.columns, "rows": size.lines}


def _base_payload(
    state: AppState,
    request_log: Sequence[DebugRequestLogEntry],
    app_started_at: Optional[float],
    terminal: Optional[dict[str, int]],
) -> tuple[datetime, dict[str, Any]]:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "exportedAt": now.isoformat(),
        "uptimeMs": int((time.time() - app_started_at) * 1000) if app_started_at else None,
        "terminal": terminal or _terminal_size(),
        "uiDescription": describe_ui_state(state),
        "state": serialize_state(state),
        "requestLog": [entry.to_dict() for entry in list(request_log)[:DEBUG_EXPORT_REQUEST_COUNT]],
    }
    return now, payload


def export_state_snapshot(
    state: AppState,
    request_log: Sequence[DebugRequestLogEntry],
    *,
    app_started_at: Optional[float] = None,
    terminal: Optional[dict[str, int]] = None,
    debug_dir: Optional[Path] = None,
) -> Path:
    """Write ``state-<timestamp>.json`` to the debug directory and return its path."""
    now, snapshot = _base_payload(state, request_log, app_started_at, terminal)
    path = (debug_dir or get_debug_dir()) / f"state-{safe_timestamp(now)}.json"
    write_json(path, snapshot)
    logger.info("Exported state snapshot to %s", path)
    return path


def export_bug_report(
    state: AppState,
    request_log: Sequence[DebugRequestLogEntry],
    action_history: Sequence[ActionLogEntry] = (),
    *,
    frame: Optional[str] = None,
    app_started_at: Optional[float] = None,
    terminal: Optional[dict[str, int]] = None,
    debug_dir: Optional[Path] = None,
) -> Path:
    """
    Write ``bug-report-<timestamp>.json`` to the debug directory.

    The report adds environment details, the action history and, when
    given, the last rendered frame with ANSI sequences removed.
    """
    now, report = _base_payload(state, request_log, app_started_at, terminal)
    report["environment"] = {
        "pythonVersion": platform.python_version(),
        "platform": sys.platform,
        "term": os.environ.get("TERM", "unknown"),
    }
    report["actionHistory"] = [
        {
            "timestamp": entry.timestamp,
            "type": entry.event_type,
            "payload": entry.payload,
            "stateSummary": entry.state_summary,
        }
        for entry in action_history
    ]
    if frame:
        report["frame"] = strip_ansi(frame)
    path = (debug_dir or get_debug_dir()) / f"bug-report-{safe_timestamp(now)}.json"
    write_json(path, report)
    logger.info("Exported bug report to %s", path)
    return path


def export_item(item: Any, path: Path) -> Path:
    """Write the raw API payload of one result item."""
    return write_json(path, getattr(item, "data", item))
