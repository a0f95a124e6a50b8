"""Notes."""

from typing import Any, Optional

from ..utils.pagination import Page, build_offset_pagination_request, finalize_offset_pagination
from .client import AttioClient


def to_note(raw: dict[str, Any]) -> dict[str, Any]:
    actor = raw.get("created_by_actor") or {}
    return {
        "id": (raw.get("id") or {}).get("note_id", ""),
        "parent_object": raw.get("parent_object") or "",
        "parent_record_id": raw.get("parent_record_id") or "",
        "title": raw.get("title") or "",
        "content_plaintext": raw.get("content_plaintext") or "",
        "created_at": raw.get("created_at"),
        "created_by_type": actor.get("type") or "unknown",
        "created_by_id": actor.get("id") or "",
    }


async def fetch_notes(
    client: AttioClient,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    parent_object: Optional[str] = None,
    parent_record_id: Optional[str] = None,
) -> Page[dict[str, Any]]:
    request = build_offset_pagination_request(limit, cursor)
    params: dict[str, Any] = {"limit": request.request_limit}
    if request.offset is not None:
        params["offset"] = request.offset
    if parent_object:
        params["parent_object"] = parent_object
    if parent_record_id:
        params["parent_record_id"] = parent_record_id
    body = await client.get("/v2/notes", params=params)
    notes = [to_note(raw) for raw in body.get("data") or []]
    return finalize_offset_pagination(notes, request.limit, request.offset)
