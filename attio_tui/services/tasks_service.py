"""Tasks."""

from typing import Any, Optional

from ..utils.pagination import Page, build_offset_pagination_request, finalize_offset_pagination
from .client import AttioClient


def to_task(raw: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": (raw.get("id") or {}).get("task_id", ""),
        "content": raw.get("content_plaintext") or "",
        "deadline_at": raw.get("deadline_at"),
        "is_completed": bool(raw.get("is_completed")),
        "assignees": [
            {
                "actor_type": assignee.get("referenced_actor_type"),
                "actor_id": assignee.get("referenced_actor_id"),
            }
            for assignee in raw.get("assignees") or []
        ],
        "linked_records": [
            {
                "target_object": record.get("target_object_id"),
                "target_record_id": record.get("target_record_id"),
            }
            for record in raw.get("linked_records") or []
        ],
        "created_at": raw.get("created_at"),
    }


async def fetch_tasks(
    client: AttioClient,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    is_completed: Optional[bool] = None,
) -> Page[dict[str, Any]]:
    request = build_offset_pagination_request(limit, cursor)
    params: dict[str, Any] = {"limit": request.request_limit}
    if request.offset is not None:
        params["offset"] = request.offset
    if is_completed is not None:
        params["is_completed"] = "true" if is_completed else "false"
    body = await client.get("/v2/tasks", params=params)
    tasks = [to_task(raw) for raw in body.get("data") or []]
    return finalize_offset_pagination(tasks, request.limit, request.offset)
