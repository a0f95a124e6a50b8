"""Bounded history of dispatched events, attached to bug reports."""

import dataclasses
import json
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from ..config.constants import ACTION_LOG_CAPACITY
from ..models.navigation import AppState


@dataclass(frozen=True)
class ActionLogEntry:
    timestamp: str
    event_type: str
    payload: dict[str, Any]
    state_summary: str


def sanitize_payload(event: Any) -> dict[str, Any]:
    """Event fields with collections and nested objects reduced to placeholders."""
    if not dataclasses.is_dataclass(event):
        return {}
    result: dict[str, Any] = {}
    for event_field in dataclasses.fields(event):
        value = getattr(event, event_field.name)
        if isinstance(value, Enum):
            result[event_field.name] = value.value
        elif isinstance(value, (list, tuple)):
            result[event_field.name] = f"[{len(value)} items]"
        elif value is None or isinstance(value, (str, int, float, bool)):
            result[event_field.name] = value
        else:
            result[event_field.name] = "[object]"
    return result


def summarize_state_diff(before: AppState, after: AppState) -> str:
    """Compact 'field: old→new' list of what an event changed."""
    checks: list[tuple[str, Any, Any]] = [
        ("debug", before.debug_enabled, after.debug_enabled),
        ("focusedPane", before.focused_pane.value, after.focused_pane.value),
        ("navIndex", before.navigator.selected_index, after.navigator.selected_index),
        ("navLoading", before.navigator.loading, after.navigator.loading),
        ("categories", len(before.navigator.categories), len(after.navigator.categories)),
        ("resultIndex", before.results.selected_index, after.results.selected_index),
        ("resultItems", len(before.results.items), len(after.results.items)),
        ("resultsLoading", before.results.loading, after.results.loading),
        ("hasNextPage", before.results.has_next_page, after.results.has_next_page),
        ("generation", before.results.generation, after.results.generation),
        ("detailTab", before.detail.active_tab.value, after.detail.active_tab.value),
        (
            "detailItem",
            before.detail.item.id if before.detail.item else "none",
            after.detail.item.id if after.detail.item else "none",
        ),
        ("cmdPalette", before.command_palette.is_open, after.command_palette.is_open),
        ("webhookModal", before.webhook_modal.mode.value, after.webhook_modal.mode.value),
        ("columnPicker", before.column_picker.is_open, after.column_picker.is_open),
        ("listDrill", before.list_drill.level.value, after.list_drill.level.value),
        ("objectDrill", before.object_drill.level.value, after.object_drill.level.value),
    ]
    if before.results.search_query != after.results.search_query:
        checks.append(
            ("searchQuery", f'"{before.results.search_query}"', f'"{after.results.search_query}"')
        )
    diffs = [f"{name}: {old}→{new}" for name, old, new in checks if old != new]
    return ", ".join(diffs) if diffs else "no change"


class ActionLogger:
    """Keeps the last ``capacity`` dispatched events, oldest first."""

    def __init__(self, capacity: int = ACTION_LOG_CAPACITY):
        self._entries: deque[ActionLogEntry] = deque(maxlen=capacity)

    def record(self, event: Any, before: AppState, after: AppState) -> ActionLogEntry:
        entry = ActionLogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event_type=type(event).__name__,
            payload=sanitize_payload(event),
            state_summary=summarize_state_diff(before, after),
        )
        self._entries.append(entry)
        return entry

    def entries(self) -> list[ActionLogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def write_to_file(self, path: Path) -> Path:
        """Write the history as JSON lines."""
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(dataclasses.asdict(entry), default=str) for entry in self._entries]
        path.write_text("\n".join(lines))
        return path
