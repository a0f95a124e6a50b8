"""Objects and records."""

import logging
from typing import Any, Optional

from ..utils.pagination import Page, build_offset_pagination_request, finalize_offset_pagination
from .client import AttioClient

logger = logging.getLogger(__name__)


def to_object_info(raw: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": (raw.get("id") or {}).get("object_id", ""),
        "api_slug": raw.get("api_slug") or "",
        "singular_noun": raw.get("singular_noun") or "",
        "plural_noun": raw.get("plural_noun") or "",
    }


def to_record(raw: dict[str, Any]) -> dict[str, Any]:
    ids = raw.get("id") or {}
    return {
        "id": ids.get("record_id", ""),
        "object_id": ids.get("object_id", ""),
        "values": raw.get("values") or {},
        "created_at": raw.get("created_at"),
        "web_url": raw.get("web_url"),
    }


async def fetch_objects(client: AttioClient) -> list[dict[str, Any]]:
    """All objects in the workspace that have an API slug."""
    body = await client.get("/v2/objects")
    return [to_object_info(obj) for obj in body.get("data") or [] if obj.get("api_slug")]


async def query_records(
    client: AttioClient,
    object_slug: str,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
) -> Page[dict[str, Any]]:
    request = build_offset_pagination_request(limit, cursor)
    payload: dict[str, Any] = {"limit": request.request_limit}
    if request.offset is not None:
        payload["offset"] = request.offset
    body = await client.post(f"/v2/objects/{object_slug}/records/query", payload)
    records = [to_record(raw) for raw in body.get("data") or []]
    return finalize_offset_pagination(records, request.limit, request.offset)

