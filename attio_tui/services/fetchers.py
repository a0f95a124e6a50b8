"""
Page fetchers.

Every resource the results pane can show is loaded through one interface,
``fetch_page(client, context, cursor)``, with one implementation per
resource. ``fetcher_for`` picks the implementation from the drill context,
and :class:`DataService` wraps the call with timing and request logging.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Protocol, TypeVar

from ..exceptions import NetworkError
from ..models.entities import StatusAttribute
from ..models.navigation import (
    AppState,
    CategoryType,
    ListDrillLevel,
    ListDrillState,
    NavigatorCategory,
    ObjectDrillLevel,
    ObjectDrillState,
    ResultItem,
    ResultType,
)
from ..utils.error_messages import extract_error_message
from ..utils.formatting import format_meeting_time, get_task_subtitle, truncate_text
from ..utils.pagination import Page
from ..utils.record_values import get_record_subtitle, get_record_title
from . import lists_service, meetings_service, notes_service, objects_service, tasks_service, webhooks_service
from .client import AttioClient
from .request_log import RequestLog, RequestStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DrillContext:
    """What the results pane should show: category plus drill position."""

    category: NavigatorCategory
    list_drill: ListDrillState = field(default_factory=ListDrillState)
    object_drill: ObjectDrillState = field(default_factory=ObjectDrillState)

    @classmethod
    def from_state(cls, state: AppState) -> Optional[DrillContext]:
        category = state.selected_category
        if category is None:
            return None
        return cls(category=category, list_drill=state.list_drill, object_drill=state.object_drill)

    @property
    def key(self) -> str:
        """Identity of the drill target; two contexts with equal keys load the same data."""
        if self.category.type is CategoryType.LISTS:
            drill = self.list_drill
            if drill.level is ListDrillLevel.STATUSES:
                return f"lists:{drill.list_id}:statuses"
            if drill.level is ListDrillLevel.ENTRIES:
                return f"lists:{drill.list_id}:entries:{drill.status_id or 'all'}"
        if self.category.type is CategoryType.OBJECTS and self.object_drill.level is ObjectDrillLevel.RECORDS:
            return f"objects:{self.object_drill.object_slug}"
        return self.category.key


class PageFetcher(Protocol):
    def label(self, context: DrillContext) -> str: ...

    async def fetch_page(
        self, client: AttioClient, context: DrillContext, cursor: Optional[str]
    ) -> Page[ResultItem]: ...


def _record_item(record: dict) -> ResultItem:
    values = record.get("values") or {}
    return ResultItem(
        type=ResultType.OBJECT,
        id=record["id"],
        title=get_record_title(values),
        subtitle=get_record_subtitle(values) or None,
        data=record,
    )


def _list_item(info: dict) -> ResultItem:
    return ResultItem(
        type=ResultType.LIST,
        id=info["id"],
        title=info["name"],
        subtitle=f"Parent: {info['parent_object']}",
        data=info,
    )


class RecordsFetcher:
    """Records of one object (an object category, or Objects drilled into records)."""

    def _slug(self, context: DrillContext) -> Optional[str]:
        if context.category.type is CategoryType.OBJECT:
            return context.category.object_slug
        return context.object_drill.object_slug

    def label(self, context: DrillContext) -> str:
        return f"query records ({self._slug(context) or 'object'})"

    async def fetch_page(self, client, context, cursor):
        slug = self._slug(context)
        if not slug:
            return Page()
        page = await objects_service.query_records(client, slug, cursor=cursor)
        return Page([_record_item(r) for r in page.items], page.next_cursor)


class ObjectsFetcher:
    def label(self, context: DrillContext) -> str:
        return "fetch objects"

    async def fetch_page(self, client, context, cursor):
        # Workspaces have a handful of objects; the endpoint is not paginated
        objects = await objects_service.fetch_objects(client)
        items = [
            ResultItem(
                type=ResultType.OBJECT_INFO,
                id=obj["api_slug"],
                title=obj["plural_noun"] or obj["api_slug"],
                subtitle=obj["api_slug"],
                data=obj,
            )
            for obj in objects
        ]
        return Page(items)


class ListsFetcher:
    def label(self, context: DrillContext) -> str:
        return "fetch lists"

    async def fetch_page(self, client, context, cursor):
        page = await lists_service.fetch_lists(client, cursor=cursor)
        return Page([_list_item(info) for info in page.items], page.next_cursor)


class ListStatusesFetcher:
    def label(self, context: DrillContext) -> str:
        return f"fetch statuses ({context.list_drill.list_name})"

    async def fetch_page(self, client, context, cursor):
        drill = context.list_drill
        statuses = await lists_service.fetch_list_statuses(
            client, drill.list_id or "", drill.status_attribute_slug or ""
        )
        items = [
            ResultItem(
                type=ResultType.LIST_STATUS,
                id=status["status_id"],
                title=status["title"],
                subtitle="Celebration enabled" if status["celebration_enabled"] else None,
                data=status,
            )
            for status in statuses
            if not status["is_archived"]
        ]
        return Page(items)


class ListEntriesFetcher:
    """Entries of a list, filtered by status when the drill carries one."""

    def _list(self, context: DrillContext) -> tuple[str, str]:
        if context.category.type is CategoryType.LIST:
            return context.category.list_id or "", context.category.title
        return context.list_drill.list_id or "", context.list_drill.list_name or ""

    def label(self, context: DrillContext) -> str:
        return f"query entries ({self._list(context)[1]})"

    async def fetch_page(self, client, context, cursor):
        list_id, list_name = self._list(context)
        drill = context.list_drill
        status_filter = None
        if drill.status_id and drill.status_attribute_slug:
            status_filter = lists_service.build_status_filter(drill.status_attribute_slug, drill.status_id)
        page = await lists_service.query_list_entries(client, list_id, cursor=cursor, filter=status_filter)
        items = [
            ResultItem(
                type=ResultType.LIST_ENTRY,
                id=entry["id"],
                title=entry["parent_record_id"],
                subtitle=f"Entry in {list_name}",
                data=entry,
            )
            for entry in page.items
        ]
        return Page(items, page.next_cursor)


class NotesFetcher:
    def label(self, context: DrillContext) -> str:
        return "fetch notes"

    async def fetch_page(self, client, context, cursor):
        page = await notes_service.fetch_notes(client, cursor=cursor)
        items = [
            ResultItem(
                type=ResultType.NOTES,
                id=note["id"],
                title=note["title"] or "Untitled Note",
                subtitle=truncate_text(note["content_plaintext"], 50) or None,
                data=note,
            )
            for note in page.items
        ]
        return Page(items, page.next_cursor)


class TasksFetcher:
    def label(self, context: DrillContext) -> str:
        return "fetch tasks"

    async def fetch_page(self, client, context, cursor):
        page = await tasks_service.fetch_tasks(client, cursor=cursor)
        items = [
            ResultItem(
                type=ResultType.TASKS,
                id=task["id"],
                title=truncate_text(task["content"], 50) or "Untitled Task",
                subtitle=get_task_subtitle(task),
                data=task,
            )
            for task in page.items
        ]
        return Page(items, page.next_cursor)


class MeetingsFetcher:
    def label(self, context: DrillContext) -> str:
        return "fetch meetings"

    async def fetch_page(self, client, context, cursor):
        page = await meetings_service.fetch_meetings(client, cursor=cursor)
        items = [
            ResultItem(
                type=ResultType.MEETINGS,
                id=meeting["id"],
                title=meeting["title"] or "Untitled Meeting",
                subtitle=format_meeting_time(meeting["start_at"], meeting["end_at"]),
                data=meeting,
            )
            for meeting in page.items
        ]
        return Page(items, page.next_cursor)


class WebhooksFetcher:
    def label(self, context: DrillContext) -> str:
        return "fetch webhooks"

    async def fetch_page(self, client, context, cursor):
        page = await webhooks_service.fetch_webhooks(client, cursor=cursor)
        items = [
            ResultItem(
                type=ResultType.WEBHOOKS,
                id=webhook["id"],
                title=webhook["target_url"],
                subtitle=f"{webhook['status']} - {len(webhook['subscriptions'])} subscriptions",
                data=webhook,
            )
            for webhook in page.items
        ]
        return Page(items, page.next_cursor)


_RECORDS = RecordsFetcher()
_LIST_ENTRIES = ListEntriesFetcher()
_BY_CATEGORY: dict[CategoryType, PageFetcher] = {
    CategoryType.OBJECT: _RECORDS,
    CategoryType.LIST: _LIST_ENTRIES,
    CategoryType.NOTES: NotesFetcher(),
    CategoryType.TASKS: TasksFetcher(),
    CategoryType.MEETINGS: MeetingsFetcher(),
    CategoryType.WEBHOOKS: WebhooksFetcher(),
}
_BY_LIST_LEVEL: dict[ListDrillLevel, PageFetcher] = {
    ListDrillLevel.LISTS: ListsFetcher(),
    ListDrillLevel.STATUSES: ListStatusesFetcher(),
    ListDrillLevel.ENTRIES: _LIST_ENTRIES,
}
_OBJECTS = ObjectsFetcher()


def fetcher_for(context: DrillContext) -> PageFetcher:
    """Select the fetcher for a drill context."""
    category_type = context.category.type
    if category_type is CategoryType.LISTS:
        return _BY_LIST_LEVEL[context.list_drill.level]
    if category_type is CategoryType.OBJECTS:
        if context.object_drill.level is ObjectDrillLevel.RECORDS:
            return _RECORDS
        return _OBJECTS
    return _BY_CATEGORY[category_type]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DataService:
    """The data collaborator the controller talks to.

    Owns no state besides the client; every call is recorded in the
    request log whether it succeeds or fails.
    """

    def __init__(self, client: AttioClient, request_log: RequestLog):
        self.client = client
        self.request_log = request_log

    async def _logged(self, label: str, detail: str, call: Awaitable[T]) -> T:
        started_at = _utc_now_iso()
        start = time.monotonic()
        try:
            result = await call
        except NetworkError as e:
            self._log(label, RequestStatus.ERROR, started_at, start, detail, extract_error_message(e))
            raise
        self._log(label, RequestStatus.SUCCESS, started_at, start, detail)
        return result

    def _log(
        self,
        label: str,
        status: RequestStatus,
        started_at: str,
        start: float,
        detail: str,
        error_message: Optional[str] = None,
    ) -> None:
        self.request_log.append(
            label=label,
            status=status,
            started_at=started_at,
            duration_ms=int((time.monotonic() - start) * 1000),
            detail=detail,
            error_message=error_message,
        )

    async def fetch_page(self, context: DrillContext, cursor: Optional[str] = None) -> Page[ResultItem]:
        fetcher = fetcher_for(context)
        detail = f"cursor {cursor}" if cursor else "initial"
        return await self._logged(fetcher.label(context), detail, fetcher.fetch_page(self.client, context, cursor))

    async def probe_schema(self, list_id: str) -> Optional[StatusAttribute]:
        """Find the status attribute of a list, if it has one."""
        return await self._logged(
            "probe list schema", list_id, lists_service.find_list_status_attribute(self.client, list_id)
        )

    async def create_webhook(self, target_url: str, events: Sequence[str]) -> dict:
        return await self._logged(
            "create webhook", target_url, webhooks_service.create_webhook(self.client, target_url, events)
        )

    async def update_webhook(self, webhook_id: str, target_url: str, events: Sequence[str]) -> dict:
        return await self._logged(
            "update webhook",
            webhook_id,
            webhooks_service.update_webhook(self.client, webhook_id, target_url=target_url, events=events),
        )

    async def delete_webhook(self, webhook_id: str) -> None:
        await self._logged("delete webhook", webhook_id, webhooks_service.delete_webhook(self.client, webhook_id))
