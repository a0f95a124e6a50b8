"""Rich renderables for the detail pane tabs."""

import json
from typing import Any, Optional

from rich.console import Group, RenderableType
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from ..config.webhook_events import get_event_label
from ..models.navigation import DetailTab, NavigatorCategory, ResultItem, ResultType
from ..utils.formatting import format_date, format_datetime, format_value

RECORD_FIELDS = (
    ("Name", "name"),
    ("Full Name", "full_name"),
    ("Email", "email_addresses"),
    ("Phone", "phone_numbers"),
    ("Domain", "domains"),
    ("Job Title", "job_title"),
    ("Description", "description"),
)

MAX_PARTICIPANTS = 5

_STATUS_STYLES = {"active": "green", "degraded": "yellow"}


def _rows(rows: list[tuple[str, Any]]) -> Table:
    """Label/value grid; rows with an empty value are skipped."""
    grid = Table.grid(padding=(0, 1))
    grid.add_column(style="bold", no_wrap=True)
    grid.add_column()
    for label, value in rows:
        if value in (None, "", "-"):
            continue
        grid.add_row(f"{label}:", value if isinstance(value, Text) else str(value))
    return grid


def _heading(title: str) -> Text:
    return Text(f"\n{title}", style="bold underline")


def _record_summary(data: dict[str, Any]) -> RenderableType:
    values = data.get("values") or {}
    fields = [(label, format_value(values[key])) for label, key in RECORD_FIELDS if values.get(key)]
    return Group(
        _rows([("ID", Text(data.get("id", ""), style="dim")), ("Created", format_datetime(data.get("created_at")))]),
        _heading("Fields"),
        _rows(fields),
    )


def _note_summary(data: dict[str, Any]) -> RenderableType:
    return Group(
        _rows(
            [
                ("Title", data.get("title") or "Untitled"),
                ("Parent", f"{data.get('parent_object')}/{data.get('parent_record_id')}"),
                ("Created", format_datetime(data.get("created_at"))),
                ("Created By", data.get("created_by_type")),
            ]
        ),
        _heading("Content"),
        Text(data.get("content_plaintext") or "(empty)"),
    )


def _task_summary(data: dict[str, Any]) -> RenderableType:
    completed = bool(data.get("is_completed"))
    status = Text("Completed" if completed else "Pending", style="green" if completed else "yellow")
    return Group(
        _rows(
            [
                ("Status", status),
                ("Deadline", format_date(data.get("deadline_at")) if data.get("deadline_at") else None),
                ("Created", format_datetime(data.get("created_at"))),
                ("Assignees", len(data.get("assignees") or [])),
                ("Linked Records", len(data.get("linked_records") or [])),
            ]
        ),
        _heading("Content"),
        Text(data.get("content") or ""),
    )


def _meeting_summary(data: dict[str, Any]) -> RenderableType:
    participants = data.get("participants") or []
    parts: list[RenderableType] = [
        _rows(
            [
                ("Title", data.get("title") or "Untitled Meeting"),
                ("Start", format_datetime(data.get("start_at"))),
                ("End", format_datetime(data.get("end_at"))),
                ("Participants", len(participants)),
            ]
        )
    ]
    if data.get("description"):
        parts += [_heading("Description"), Text(data["description"])]
    if participants:
        parts.append(_heading("Participants"))
        for participant in participants[:MAX_PARTICIPANTS]:
            organizer = " (organizer)" if participant.get("is_organizer") else ""
            parts.append(Text(f"{participant.get('email_address') or '(no email)'}{organizer}"))
        if len(participants) > MAX_PARTICIPANTS:
            parts.append(Text(f"...and {len(participants) - MAX_PARTICIPANTS} more", style="dim"))
    return Group(*parts)


def _webhook_summary(data: dict[str, Any]) -> RenderableType:
    status = data.get("status") or ""
    subscriptions = data.get("subscriptions") or []
    parts: list[RenderableType] = [
        _rows(
            [
                ("Target URL", data.get("target_url")),
                ("Status", Text(status, style=_STATUS_STYLES.get(status, "red"))),
                ("Created", format_datetime(data.get("created_at"))),
            ]
        ),
        _heading(f"Subscriptions ({len(subscriptions)})"),
    ]
    for subscription in subscriptions:
        parts.append(Text(f"• {get_event_label(subscription.get('event_type') or '')}"))
    return Group(*parts)


def _generic_summary(item: ResultItem) -> RenderableType:
    rows = [("ID", Text(item.id, style="dim")), ("Title", item.title), ("Details", item.subtitle)]
    rows += [(key.replace("_", " ").title(), value) for key, value in item.data.items() if isinstance(value, (str, int))]
    return _rows(rows)


_SUMMARIES = {
    ResultType.OBJECT: _record_summary,
    ResultType.NOTES: _note_summary,
    ResultType.TASKS: _task_summary,
    ResultType.MEETINGS: _meeting_summary,
    ResultType.WEBHOOKS: _webhook_summary,
}


def render_summary(item: Optional[ResultItem]) -> RenderableType:
    if item is None:
        return Text("Select an item to see details", style="dim")
    summary = _SUMMARIES.get(item.type)
    if summary is None:
        return _generic_summary(item)
    return summary(item.data)


def render_json(item: Optional[ResultItem]) -> RenderableType:
    if item is None:
        return Text("Select an item to view its JSON", style="dim")
    return Syntax(json.dumps(item.data, indent=2, default=str), "json", word_wrap=True)


def sdk_snippet(item: Optional[ResultItem], category: Optional[NavigatorCategory]) -> str:
    """Python showing how to fetch the item with :class:`AttioClient`."""
    if item is None or category is None:
        return "# Select an item to view SDK code"
    if item.type is ResultType.OBJECT:
        object_slug = category.object_slug or item.data.get("object_id", "")
        path = f"/v2/objects/{object_slug}/records/{item.id}"
        comment = "Fetch this record"
    elif item.type is ResultType.LIST_ENTRY:
        path = f"/v2/lists/{item.data.get('list_id') or category.list_id}/entries/{item.id}"
        comment = "Fetch this list entry"
    elif item.type is ResultType.LIST:
        path = f"/v2/lists/{item.id}"
        comment = "Fetch this list"
    elif item.type is ResultType.OBJECT_INFO:
        path = f"/v2/objects/{item.id}"
        comment = "Fetch this object"
    elif item.type is ResultType.NOTES:
        path = f"/v2/notes/{item.id}"
        comment = "Fetch this note"
    elif item.type is ResultType.TASKS:
        path = f"/v2/tasks/{item.id}"
        comment = "Fetch this task"
    elif item.type is ResultType.MEETINGS:
        path = f"/v2/meetings/{item.id}"
        comment = "Fetch this meeting"
    elif item.type is ResultType.WEBHOOKS:
        path = f"/v2/webhooks/{item.id}"
        comment = "Fetch this webhook"
    else:
        return "# No API call for this item"
    return "\n".join(
        [
            f"# {comment}",
            "async with AttioClient(api_key) as client:",
            f'    body = await client.get("{path}")',
        ]
    )


def render_sdk(item: Optional[ResultItem], category: Optional[NavigatorCategory]) -> RenderableType:
    return Syntax(sdk_snippet(item, category), "python")


ACTIONS = (
    ("y", "Copy ID", "Copy record ID to clipboard"),
    ("Ctrl+O", "Open", "Open in browser"),
    ("Ctrl+R", "Refresh", "Refresh current data"),
    (":", "Command", "Open command palette"),
)


def render_actions(item: Optional[ResultItem]) -> RenderableType:
    if item is None:
        return Text("Select an item to see available actions", style="dim")
    grid = Table.grid(padding=(0, 1))
    grid.add_column(style="bold blue", no_wrap=True)
    grid.add_column()
    grid.add_column(style="dim")
    for key, label, description in ACTIONS:
        grid.add_row(key, label, f"- {description}")
    return Group(Text("Available Actions:", style="bold"), grid)


def render_detail(
    tab: DetailTab, item: Optional[ResultItem], category: Optional[NavigatorCategory]
) -> RenderableType:
    if tab is DetailTab.JSON:
        return render_json(item)
    if tab is DetailTab.SDK:
        return render_sdk(item, category)
    if tab is DetailTab.ACTIONS:
        return render_actions(item)
    return render_summary(item)
