"""Webhooks: listing plus create, update and delete."""

import logging
from typing import Any, Optional, Sequence

from ..exceptions import NetworkError
from ..utils.pagination import Page, paginate_locally
from .client import AttioClient

logger = logging.getLogger(__name__)


def to_webhook(raw: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": (raw.get("id") or {}).get("webhook_id", ""),
        "target_url": raw.get("target_url") or "",
        "status": raw.get("status") or "",
        "subscriptions": [
            {"event_type": sub.get("event_type"), "filter": sub.get("filter")}
            for sub in raw.get("subscriptions") or []
        ],
        "created_at": raw.get("created_at"),
    }


def _subscriptions(events: Sequence[str]) -> list[dict[str, Any]]:
    return [{"event_type": event, "filter": None} for event in events]


async def fetch_webhooks(
    client: AttioClient,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
) -> Page[dict[str, Any]]:
    body = await client.get("/v2/webhooks")
    webhooks = [to_webhook(raw) for raw in body.get("data") or []]
    return paginate_locally(webhooks, limit, cursor)


def _single(body: dict[str, Any]) -> dict[str, Any]:
    data = body.get("data")
    if not data:
        raise NetworkError("No webhook data returned")
    return to_webhook(data)


async def create_webhook(client: AttioClient, target_url: str, events: Sequence[str]) -> dict[str, Any]:
    body = await client.post(
        "/v2/webhooks",
        {"data": {"target_url": target_url, "subscriptions": _subscriptions(events)}},
    )
    webhook = _single(body)
    logger.info("Created webhook %s -> %s", webhook["id"], target_url)
    return webhook


async def update_webhook(
    client: AttioClient,
    webhook_id: str,
    target_url: Optional[str] = None,
    events: Optional[Sequence[str]] = None,
    status: Optional[str] = None,
) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if target_url:
        data["target_url"] = target_url
    if status:
        data["status"] = status
    if events is not None:
        data["subscriptions"] = _subscriptions(events)
    body = await client.patch(f"/v2/webhooks/{webhook_id}", {"data": data})
    webhook = _single(body)
    logger.info("Updated webhook %s", webhook_id)
    return webhook


async def delete_webhook(client: AttioClient, webhook_id: str) -> None:
    await client.delete(f"/v2/webhooks/{webhook_id}")
    logger.info("Deleted webhook %s", webhook_id)
