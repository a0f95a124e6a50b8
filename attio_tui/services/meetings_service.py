"""Meetings.

Unlike the other resources the meetings endpoint paginates with its own
opaque cursor, so the page size is requested exactly and the server's
``next_cursor`` is trusted.
"""

from typing import Any, Optional

from ..utils.pagination import Page, finalize_server_cursor_pagination, normalize_limit
from .client import AttioClient


def _datetime_of(value: Any) -> Optional[str]:
    if not isinstance(value, dict):
        return value if isinstance(value, str) else None
    return value.get("datetime") or value.get("date")


def to_meeting(raw: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": (raw.get("id") or {}).get("meeting_id", ""),
        "title": raw.get("title") or "",
        "description": raw.get("description") or "",
        "start_at": _datetime_of(raw.get("start")),
        "end_at": _datetime_of(raw.get("end")),
        "participants": [
            {
                "email_address": participant.get("email_address"),
                "is_organizer": bool(participant.get("is_organizer")),
                "status": participant.get("status"),
            }
            for participant in raw.get("participants") or []
        ],
    }


async def fetch_meetings(
    client: AttioClient,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
) -> Page[dict[str, Any]]:
    params: dict[str, Any] = {"limit": normalize_limit(limit)}
    if cursor:
        params["cursor"] = cursor
    body = await client.get("/v2/meetings", params=params)
    meetings = [to_meeting(raw) for raw in body.get("data") or []]
    next_cursor = (body.get("pagination") or {}).get("next_cursor")
    return finalize_server_cursor_pagination(meetings, next_cursor)
