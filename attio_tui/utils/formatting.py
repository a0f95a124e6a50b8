"""
Display formatting for Attio values.

Attio attribute values arrive as small typed dicts (``{"value": ...}``,
``{"email_address": ...}``, ``{"option": {...}}`` and so on). These helpers
turn them, and the timestamps on every resource, into short strings for the
results table and the summary tab.
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

DISPLAY_FORMAT = "%Y-%m-%d %H:%M"  # "2024-01-15 10:30"
DATE_ONLY_FORMAT = "%Y-%m-%d"  # "2024-01-15"

EMPTY = "-"


def format_value(value: Any) -> str:
    """Format any Attio attribute value (or list of values) for display."""
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    if isinstance(value, dict):
        return _format_object_value(value)
    return str(value)


def _format_object_value(obj: dict[str, Any]) -> str:
    if "value" in obj:
        return format_value(obj["value"])
    if "email_address" in obj:
        return str(obj["email_address"])
    if "phone_number" in obj:
        return str(obj["phone_number"])
    if "domain" in obj:
        return str(obj["domain"])
    if "currency_value" in obj:
        amount = obj["currency_value"]
        amount_str = f"{amount:,}" if isinstance(amount, (int, float)) else str(amount)
        code = obj.get("currency_code")
        return f"{code} {amount_str}" if code else amount_str
    if "option" in obj:
        option = obj["option"] or {}
        return option.get("title") or EMPTY
    if "status" in obj:
        status = obj["status"] or {}
        return status.get("title") or EMPTY
    if "person" in obj:
        person = obj["person"] or {}
        name = " ".join(p for p in (person.get("first_name"), person.get("last_name")) if p)
        return name or person.get("email_address") or EMPTY
    if "target_object" in obj and "target_record_id" in obj:
        return f"{obj['target_object']}/{obj['target_record_id']}"
    if "line_1" in obj or "city" in obj or "country_code" in obj:
        keys = ("line_1", "line_2", "city", "state", "postcode", "country_code")
        parts = [str(obj[k]) for k in keys if obj.get(k)]
        return ", ".join(parts) or EMPTY
    return json.dumps(obj, default=str)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as returned by the API ('Z' suffix allowed)."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: Optional[str]) -> str:
    if not value:
        return EMPTY
    parsed = parse_timestamp(value)
    return parsed.strftime(DATE_ONLY_FORMAT) if parsed else value


def format_datetime(value: Optional[str]) -> str:
    if not value:
        return EMPTY
    parsed = parse_timestamp(value)
    return parsed.strftime(DISPLAY_FORMAT) if parsed else value


def format_relative_time(value: Optional[str], now: Optional[datetime] = None) -> str:
    """
    Format a timestamp relative to now ("just now", "5m ago", "3d ago").

    Anything a week or older falls back to the plain date.
    """
    if not value:
        return EMPTY
    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    seconds = int((now - parsed).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    return parsed.strftime(DATE_ONLY_FORMAT)


def truncate(text: str, max_len: int) -> str:
    """Truncate to ``max_len`` characters including the trailing '...'."""
    if len(text) <= max_len:
        return text
    return text[: max(max_len - 3, 0)] + "..."


def truncate_text(text: Optional[str], max_len: int = 50) -> str:
    """Collapse whitespace then truncate; used for note and task snippets."""
    if not text:
        return ""
    return truncate(" ".join(text.split()), max_len)


def format_meeting_time(start_at: Optional[str], end_at: Optional[str]) -> str:
    start = parse_timestamp(start_at)
    end = parse_timestamp(end_at)
    if start is None:
        return format_datetime(start_at)
    if end is None:
        return start.strftime(DISPLAY_FORMAT)
    if start.date() == end.date():
        return f"{start.strftime(DISPLAY_FORMAT)} - {end.strftime('%H:%M')}"
    return f"{start.strftime(DISPLAY_FORMAT)} - {end.strftime(DISPLAY_FORMAT)}"


def get_task_subtitle(task: dict[str, Any]) -> str:
    status = "Completed" if task.get("is_completed") else "Pending"
    deadline = task.get("deadline_at")
    if deadline:
        return f"{status} - due {format_date(deadline)}"
    return status
