"""
Renderers for the three panes, the status bar and the debug panel.

Each takes state and returns a Rich renderable; the Textual app only
pushes the result into a Static widget.
"""

import time
from collections.abc import Sequence
from typing import Optional

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from ..config.constants import DEBUG_PANEL_REQUEST_COUNT
from ..models.columns import ResolvedColumn
from ..models.navigation import AppState, CategoryType, ListDrillLevel, ObjectDrillLevel, PaneId
from ..services.request_log import DebugRequestLogEntry, RequestStatus
from ..state.status import StatusMessage, StatusTone
from ..utils.formatting import format_relative_time, truncate

_ICONS = {
    CategoryType.OBJECT: "◆",
    CategoryType.LIST: "≡",
    CategoryType.LISTS: "≡",
    CategoryType.OBJECTS: "▣",
    CategoryType.NOTES: "✎",
    CategoryType.TASKS: "☐",
    CategoryType.MEETINGS: "◷",
    CategoryType.WEBHOOKS: "⚡",
}


def render_navigator(state: AppState) -> RenderableType:
    navigator = state.navigator
    if navigator.loading and not navigator.categories:
        return Text("Loading...", style="yellow")
    focused = state.focused_pane is PaneId.NAVIGATOR
    text = Text()
    for index, category in enumerate(navigator.categories):
        selected = index == navigator.selected_index
        style = "bold reverse" if selected and focused else ("bold" if selected else "")
        marker = "›" if selected else " "
        text.append(f"{marker} {_ICONS.get(category.type, '•')} {category.title}\n", style=style)
    return text


def results_title(state: AppState) -> str:
    """Pane title with the drill path, e.g. 'Results: Lists › Deals › Won'."""
    category = state.selected_category
    if category is None:
        return "Results"
    parts = [category.title]
    if category.type is CategoryType.LISTS and state.list_drill.level is not ListDrillLevel.LISTS:
        parts.append(state.list_drill.list_name or "")
        if state.list_drill.status_title:
            parts.append(state.list_drill.status_title)
    if category.type is CategoryType.OBJECTS and state.object_drill.level is ObjectDrillLevel.RECORDS:
        parts.append(state.object_drill.object_name or "")
    return "Results: " + " › ".join(parts)


def render_results(state: AppState, columns: Sequence[ResolvedColumn]) -> RenderableType:
    results = state.results
    if results.loading and not results.items:
        return Text("Loading...", style="yellow")
    if results.error and not results.items:
        return Text(f"Error: {results.error}", style="red")
    if not results.items:
        return Text("No results", style="dim")

    focused = state.focused_pane is PaneId.RESULTS
    table = Table(box=None, expand=False, show_edge=False, pad_edge=False, header_style="bold dim")
    for column in columns:
        table.add_column(column.label, width=column.width, no_wrap=True, overflow="ellipsis")
    for index, item in enumerate(results.items):
        selected = index == results.selected_index
        style = "reverse" if selected and focused else ("bold" if selected else None)
        table.add_row(*(truncate(column.value(item), column.width) for column in columns), style=style)

    parts: list[RenderableType] = [table]
    if results.error:
        parts.append(Text(f"\nError: {results.error}", style="red"))
    elif results.loading:
        parts.append(Text("\nLoading more...", style="yellow"))
    elif results.has_next_page:
        parts.append(Text("\nScroll for more...", style="dim italic"))
    return Group(*parts)


def render_status_bar(state: AppState, message: Optional[StatusMessage] = None) -> RenderableType:
    left = Text()
    if message is not None:
        left.append(message.text, style="red" if message.tone is StatusTone.ERROR else "green")
    else:
        for key, hint in (("Tab", "switch panes"), ("j/k", "navigate"), (":", "command"), ("q", "quit")):
            left.append(key, style="bold")
            left.append(f" {hint}  ", style="dim")

    right = Text()
    if state.navigator.loading or state.results.loading:
        right.append("Loading...  ", style="yellow")
    count = len(state.results.items)
    position = state.results.selected_index + 1 if count else 0
    right.append(f"{position}/{count}  ", style="dim")
    right.append(f"[{state.focused_pane.value}]", style="blue")

    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(justify="right")
    grid.add_row(left, right)
    return grid


def format_duration(duration_ms: int) -> str:
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    return f"{duration_ms / 1000:.2f}s"


def format_uptime(uptime_ms: int) -> str:
    total_seconds = uptime_ms // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes or hours:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")
    return " ".join(parts)


def format_request_line(entry: DebugRequestLogEntry) -> str:
    detail = f" • {entry.detail}" if entry.detail else ""
    error = f" • {entry.error_message}" if entry.error_message and entry.status is RequestStatus.ERROR else ""
    return f"{entry.label}{detail}{error}"


def render_debug_panel(
    state: AppState,
    requests: Sequence[DebugRequestLogEntry],
    app_started_at: float,
    now: Optional[float] = None,
) -> RenderableType:
    uptime_ms = max(0, int(((now or time.time()) - app_started_at) * 1000))
    category = state.selected_category
    count = len(state.results.items)
    lines = [
        Text("Debug Panel", style="bold yellow"),
        Text("\nTiming", style="bold"),
        Text(f"Uptime: {format_uptime(uptime_ms)}", style="dim"),
    ]
    if requests:
        last = requests[0]
        lines.append(
            Text(
                f"Last request: {format_duration(last.duration_ms)} · {format_relative_time(last.started_at)}",
                style="dim",
            )
        )
    else:
        lines.append(Text("Last request: -", style="dim"))

    lines += [
        Text("\nState", style="bold"),
        Text(f"Pane: {state.focused_pane.value}", style="dim"),
        Text(f"Tab: {state.detail.active_tab.value}", style="dim"),
        Text(f"Results: {state.results.selected_index + 1 if count else 0}/{count}", style="dim"),
        Text(f"Category: {category.title if category else '-'}", style="dim"),
        Text(f"Generation: {state.results.generation}", style="dim"),
        Text(f"Command palette: {'open' if state.command_palette.is_open else 'closed'}", style="dim"),
        Text(f"Column picker: {'open' if state.column_picker.is_open else 'closed'}", style="dim"),
        Text(f"Webhook modal: {state.webhook_modal.mode.value}", style="dim"),
        Text(
            f"Loading: {'nav' if state.navigator.loading else '-'} / {'results' if state.results.loading else '-'}",
            style="dim",
        ),
        Text("\nRequests", style="bold"),
    ]
    if not requests:
        lines.append(Text("No requests yet", style="dim"))
    for entry in list(requests)[:DEBUG_PANEL_REQUEST_COUNT]:
        color = "green" if entry.status is RequestStatus.SUCCESS else "red"
        line = Text()
        line.append(f"{format_duration(entry.duration_ms):>7} ", style=color)
        line.append(format_request_line(entry), style="dim")
        lines.append(line)
    return Group(*lines)
