"""Lists, list statuses and list entries."""

import logging
import weakref
from typing import Any, Optional

from ..models.entities import StatusAttribute
from ..utils.pagination import (
    Page,
    build_offset_pagination_request,
    finalize_offset_pagination,
    paginate_locally,
    parse_cursor_offset,
)
from .client import AttioClient

logger = logging.getLogger(__name__)

# The lists endpoint is not paginated, so the full set is fetched on the
# first page and later pages are sliced from this cache.
_list_cache: "weakref.WeakKeyDictionary[AttioClient, list[dict[str, Any]]]" = weakref.WeakKeyDictionary()


def to_list_info(raw: dict[str, Any]) -> dict[str, Any]:
    parent = raw.get("parent_object") or []
    if isinstance(parent, str):
        parent = [parent]
    return {
        "id": (raw.get("id") or {}).get("list_id", ""),
        "api_slug": raw.get("api_slug") or "",
        "name": raw.get("name") or "",
        "parent_object": parent[0] if parent else "",
    }


def to_status_info(raw: dict[str, Any]) -> dict[str, Any]:
    ids = raw.get("id") or {}
    return {
        "status_id": ids.get("status_id", ""),
        "attribute_id": ids.get("attribute_id", ""),
        "title": raw.get("title") or "",
        "is_archived": bool(raw.get("is_archived")),
        "celebration_enabled": bool(raw.get("celebration_enabled")),
        "target_time_in_status": raw.get("target_time_in_status"),
    }


def to_list_entry(raw: dict[str, Any]) -> dict[str, Any]:
    ids = raw.get("id") or {}
    return {
        "id": ids.get("entry_id", ""),
        "list_id": ids.get("list_id", ""),
        "parent_record_id": raw.get("parent_record_id") or "",
        "parent_object": raw.get("parent_object") or "",
        "values": raw.get("entry_values") or {},
        "created_at": raw.get("created_at"),
    }


async def _fetch_all_lists(client: AttioClient) -> list[dict[str, Any]]:
    body = await client.get("/v2/lists")
    lists = [to_list_info(raw) for raw in body.get("data") or []]
    _list_cache[client] = lists
    return lists


async def fetch_lists(
    client: AttioClient,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
) -> Page[dict[str, Any]]:
    """One page of the workspace's lists; the first page refreshes the cache."""
    if parse_cursor_offset(cursor) is None or client not in _list_cache:
        lists = await _fetch_all_lists(client)
    else:
        lists = _list_cache[client]
    return paginate_locally(lists, limit, cursor)


def build_status_filter(attribute_slug: str, status_id: str) -> dict[str, Any]:
    return {attribute_slug: {"status": {"$eq": status_id}}}


async def query_list_entries(
    client: AttioClient,
    list_id: str,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    filter: Optional[dict[str, Any]] = None,
) -> Page[dict[str, Any]]:
    request = build_offset_pagination_request(limit, cursor)
    payload: dict[str, Any] = {"limit": request.request_limit}
    if request.offset is not None:
        payload["offset"] = request.offset
    if filter:
        payload["filter"] = filter
    body = await client.post(f"/v2/lists/{list_id}/entries/query", payload)
    entries = [to_list_entry(raw) for raw in body.get("data") or []]
    return finalize_offset_pagination(entries, request.limit, request.offset)


async def find_list_status_attribute(client: AttioClient, list_id: str) -> Optional[StatusAttribute]:
    """The first attribute of type "status" on the list, if any."""
    body = await client.get(f"/v2/lists/{list_id}/attributes")
    for attribute in body.get("data") or []:
        if attribute.get("type") == "status":
            return StatusAttribute(
                slug=attribute.get("api_slug") or "",
                title=attribute.get("title") or "",
                attribute_id=(attribute.get("id") or {}).get("attribute_id", ""),
            )
    return None


async def fetch_list_statuses(
    client: AttioClient, list_id: str, attribute_slug: str
) -> list[dict[str, Any]]:
    """Statuses of a list's status attribute, archived ones included."""
    body = await client.get(f"/v2/lists/{list_id}/attributes/{attribute_slug}/statuses")
    return [to_status_info(raw) for raw in body.get("data") or []]
