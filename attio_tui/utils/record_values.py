"""Pick a display title and subtitle out of a record's attribute values."""

from typing import Any, Optional

TITLE_ATTRIBUTES = ("name", "full_name", "title", "first_name", "company_name")
SUBTITLE_ATTRIBUTES = ("email_addresses", "domains", "description", "job_title")

UNNAMED = "Unnamed"

RecordValues = dict[str, list[dict[str, Any]]]


def _first_value(values: RecordValues, attribute: str) -> Optional[dict[str, Any]]:
    field_values = values.get(attribute)
    if not field_values:
        return None
    first = field_values[0]
    return first if isinstance(first, dict) else None


def extract_text_value(value: dict[str, Any]) -> Optional[str]:
    """Return the human readable text of a single attribute value, if it has one."""
    if isinstance(value.get("value"), str):
        return value["value"]
    if isinstance(value.get("full_name"), str):
        return value["full_name"]
    if "first_name" in value or "last_name" in value:
        name = " ".join(p for p in (value.get("first_name"), value.get("last_name")) if p)
        return name or None
    if isinstance(value.get("email_address"), str):
        return value["email_address"]
    if isinstance(value.get("domain"), str):
        return value["domain"]
    if "option" in value:
        return (value["option"] or {}).get("title") or None
    if "status" in value:
        return (value["status"] or {}).get("title") or None
    return None


def _first_text(values: RecordValues, attributes: tuple[str, ...]) -> Optional[str]:
    for attribute in attributes:
        first = _first_value(values, attribute)
        text = extract_text_value(first) if first else None
        if text:
            return text
    return None


def get_record_title(values: RecordValues) -> str:
    return _first_text(values, TITLE_ATTRIBUTES) or UNNAMED


def get_record_subtitle(values: RecordValues) -> str:
    return _first_text(values, SUBTITLE_ATTRIBUTES) or ""


def get_record_display_name(record: dict[str, Any]) -> str:
    """Title of the record, or its id when nothing readable is set."""
    title = get_record_title(record.get("values") or {})
    return record.get("id", UNNAMED) if title == UNNAMED else title
