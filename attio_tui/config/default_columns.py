"""Built-in column definitions and default column sets per entity key."""

from collections.abc import Callable
from typing import Any, Optional

from ..models.columns import DEFAULT_OBJECT_KEY, ColumnConfig, ColumnDefinition, ValueExtractor
from ..models.navigation import ResultItem, ResultType
from ..utils.formatting import EMPTY, format_date, format_datetime, format_value
from ..utils.record_values import get_record_subtitle, get_record_title


def _for_type(result_type: ResultType, getter: Callable[[dict[str, Any]], str]) -> ValueExtractor:
    """Wrap a getter so it yields '-' for rows of any other result type."""

    def extract(item: ResultItem) -> str:
        if item.type is not result_type:
            return EMPTY
        return getter(item.data)

    return extract


def _or_dash(value: Optional[str]) -> str:
    return value if value else EMPTY


def _record_value(attribute: str) -> Callable[[dict[str, Any]], str]:
    def getter(data: dict[str, Any]) -> str:
        values = (data.get("values") or {}).get(attribute)
        if not values:
            return EMPTY
        return format_value(values)

    return getter


def _record(getter: Callable[[dict[str, Any]], str]) -> ValueExtractor:
    return _for_type(ResultType.OBJECT, getter)


def _count(key: str) -> Callable[[dict[str, Any]], str]:
    return lambda data: str(len(data.get(key) or []))


DEFAULT_OBJECT_COLUMNS = (
    ColumnDefinition("title", "Name", 28, _record(lambda d: _or_dash(get_record_title(d.get("values") or {})))),
    ColumnDefinition("subtitle", "Details", 32, _record(lambda d: _or_dash(get_record_subtitle(d.get("values") or {})))),
    ColumnDefinition("createdAt", "Created", 16, _record(lambda d: format_date(d.get("created_at")))),
    ColumnDefinition("id", "ID", 10, _record(lambda d: _or_dash(d.get("id")))),
)

COMPANY_COLUMNS = (
    ColumnDefinition("name", "Name", 26, _record(_record_value("name"))),
    ColumnDefinition("domains", "Domain", 22, _record(_record_value("domains"))),
    ColumnDefinition("description", "Description", 32, _record(_record_value("description"))),
    ColumnDefinition("createdAt", "Created", 16, _record(lambda d: format_date(d.get("created_at")))),
)

PEOPLE_COLUMNS = (
    ColumnDefinition("full_name", "Name", 26, _record(_record_value("full_name"))),
    ColumnDefinition("email_addresses", "Email", 26, _record(_record_value("email_addresses"))),
    ColumnDefinition("job_title", "Title", 22, _record(_record_value("job_title"))),
    ColumnDefinition("company_name", "Company", 22, _record(_record_value("company_name"))),
)

OBJECT_INFO_COLUMNS = (
    ColumnDefinition("pluralNoun", "Object", 24, _for_type(ResultType.OBJECT_INFO, lambda d: _or_dash(d.get("plural_noun")))),
    ColumnDefinition("apiSlug", "Slug", 20, _for_type(ResultType.OBJECT_INFO, lambda d: _or_dash(d.get("api_slug")))),
    ColumnDefinition("singularNoun", "Singular", 20, _for_type(ResultType.OBJECT_INFO, lambda d: _or_dash(d.get("singular_noun")))),
)

LIST_COLUMNS = (
    ColumnDefinition("name", "Name", 26, _for_type(ResultType.LIST, lambda d: _or_dash(d.get("name")))),
    ColumnDefinition("parentObject", "Parent", 16, _for_type(ResultType.LIST, lambda d: _or_dash(d.get("parent_object")))),
    ColumnDefinition("apiSlug", "Slug", 16, _for_type(ResultType.LIST, lambda d: _or_dash(d.get("api_slug")))),
)

NOTE_COLUMNS = (
    ColumnDefinition("title", "Title", 26, _for_type(ResultType.NOTES, lambda d: _or_dash(d.get("title")))),
    ColumnDefinition("contentPlaintext", "Snippet", 36, _for_type(ResultType.NOTES, lambda d: _or_dash(d.get("content_plaintext")))),
    ColumnDefinition("createdAt", "Created", 16, _for_type(ResultType.NOTES, lambda d: format_date(d.get("created_at")))),
)

TASK_COLUMNS = (
    ColumnDefinition("content", "Task", 36, _for_type(ResultType.TASKS, lambda d: _or_dash(d.get("content")))),
    ColumnDefinition(
        "status", "Status", 12,
        _for_type(ResultType.TASKS, lambda d: "Completed" if d.get("is_completed") else "Pending"),
    ),
    ColumnDefinition("deadlineAt", "Due", 16, _for_type(ResultType.TASKS, lambda d: format_date(d.get("deadline_at")))),
)

MEETING_COLUMNS = (
    ColumnDefinition("title", "Title", 26, _for_type(ResultType.MEETINGS, lambda d: _or_dash(d.get("title")))),
    ColumnDefinition("startAt", "Start", 18, _for_type(ResultType.MEETINGS, lambda d: format_datetime(d.get("start_at")))),
    ColumnDefinition("endAt", "End", 18, _for_type(ResultType.MEETINGS, lambda d: format_datetime(d.get("end_at")))),
    ColumnDefinition("participants", "Attendees", 10, _for_type(ResultType.MEETINGS, _count("participants"))),
)

WEBHOOK_COLUMNS = (
    ColumnDefinition("targetUrl", "Target", 32, _for_type(ResultType.WEBHOOKS, lambda d: _or_dash(d.get("target_url")))),
    ColumnDefinition("status", "Status", 10, _for_type(ResultType.WEBHOOKS, lambda d: _or_dash(d.get("status")))),
    ColumnDefinition("subscriptions", "Subs", 8, _for_type(ResultType.WEBHOOKS, _count("subscriptions"))),
    ColumnDefinition("createdAt", "Created", 16, _for_type(ResultType.WEBHOOKS, lambda d: format_date(d.get("created_at")))),
)

# Rows that have no dedicated column set (list statuses, list entries)
GENERIC_COLUMNS = (
    ColumnDefinition("title", "Title", 32, lambda item: _or_dash(item.title)),
    ColumnDefinition("subtitle", "Details", 36, lambda item: _or_dash(item.subtitle)),
)

COLUMN_DEFINITIONS: dict[str, tuple[ColumnDefinition, ...]] = {
    DEFAULT_OBJECT_KEY: DEFAULT_OBJECT_COLUMNS,
    "object-companies": COMPANY_COLUMNS,
    "object-people": PEOPLE_COLUMNS,
    "objects": OBJECT_INFO_COLUMNS,
    "list": LIST_COLUMNS,
    "notes": NOTE_COLUMNS,
    "tasks": TASK_COLUMNS,
    "meetings": MEETING_COLUMNS,
    "webhooks": WEBHOOK_COLUMNS,
}


def _defaults(*attributes: str) -> tuple[ColumnConfig, ...]:
    return tuple(ColumnConfig(attribute) for attribute in attributes)


DEFAULT_COLUMNS: dict[str, tuple[ColumnConfig, ...]] = {
    DEFAULT_OBJECT_KEY: _defaults("title", "subtitle", "createdAt"),
    "object-companies": _defaults("name", "domains", "description"),
    "object-people": _defaults("full_name", "email_addresses", "job_title"),
    "objects": _defaults("pluralNoun", "apiSlug"),
    "list": _defaults("name", "parentObject"),
    "notes": _defaults("title", "contentPlaintext", "createdAt"),
    "tasks": _defaults("content", "status", "deadlineAt"),
    "meetings": _defaults("title", "startAt", "participants"),
    "webhooks": _defaults("targetUrl", "status", "subscriptions"),
}
