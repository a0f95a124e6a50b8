"""Navigation state model.

Every tagged union here is an enum-tagged frozen dataclass: the ``type`` or
``level`` field names the variant and the optional fields carry its payload.
The reducer in :mod:`attio_tui.state.app_state` builds new values with
``dataclasses.replace`` and never mutates an instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PaneId(str, Enum):
    NAVIGATOR = "navigator"
    RESULTS = "results"
    DETAIL = "detail"


PANE_ORDER: tuple[PaneId, ...] = (PaneId.NAVIGATOR, PaneId.RESULTS, PaneId.DETAIL)


class DetailTab(str, Enum):
    SUMMARY = "summary"
    JSON = "json"
    SDK = "sdk"
    ACTIONS = "actions"


DETAIL_TABS: tuple[DetailTab, ...] = (
    DetailTab.SUMMARY,
    DetailTab.JSON,
    DetailTab.SDK,
    DetailTab.ACTIONS,
)


class CategoryType(str, Enum):
    OBJECT = "object"
    LIST = "list"
    LISTS = "lists"
    OBJECTS = "objects"
    NOTES = "notes"
    TASKS = "tasks"
    MEETINGS = "meetings"
    WEBHOOKS = "webhooks"


@dataclass(frozen=True)
class NavigatorCategory:
    """One entry in the navigator pane.

    ``object_slug`` is set for OBJECT categories and ``list_id`` for LIST
    categories; the other variants carry no payload.
    """

    type: CategoryType
    title: str
    object_slug: str | None = None
    list_id: str | None = None

    @property
    def key(self) -> str:
        if self.type is CategoryType.OBJECT:
            return f"object-{self.object_slug}"
        if self.type is CategoryType.LIST:
            return f"list-{self.list_id}"
        return self.type.value

    @classmethod
    def for_object(cls, slug: str, title: str) -> NavigatorCategory:
        return cls(type=CategoryType.OBJECT, title=title, object_slug=slug)

    @classmethod
    def for_list(cls, list_id: str, title: str) -> NavigatorCategory:
        return cls(type=CategoryType.LIST, title=title, list_id=list_id)


DEFAULT_CATEGORIES: tuple[NavigatorCategory, ...] = (
    NavigatorCategory.for_object("companies", "Companies"),
    NavigatorCategory.for_object("people", "People"),
    NavigatorCategory(CategoryType.OBJECTS, "Objects"),
    NavigatorCategory(CategoryType.LISTS, "Lists"),
    NavigatorCategory(CategoryType.NOTES, "Notes"),
    NavigatorCategory(CategoryType.TASKS, "Tasks"),
    NavigatorCategory(CategoryType.MEETINGS, "Meetings"),
    NavigatorCategory(CategoryType.WEBHOOKS, "Webhooks"),
)


# =============================================================================
# Drill state
# =============================================================================


class ListDrillLevel(str, Enum):
    LISTS = "lists"
    STATUSES = "statuses"
    ENTRIES = "entries"


@dataclass(frozen=True)
class ListDrillState:
    level: ListDrillLevel = ListDrillLevel.LISTS
    list_id: str | None = None
    list_name: str | None = None
    status_attribute_slug: str | None = None
    status_id: str | None = None
    status_title: str | None = None

    @classmethod
    def statuses(
        cls, list_id: str, list_name: str, status_attribute_slug: str
    ) -> ListDrillState:
        return cls(
            level=ListDrillLevel.STATUSES,
            list_id=list_id,
            list_name=list_name,
            status_attribute_slug=status_attribute_slug,
        )

    @classmethod
    def entries(
        cls,
        list_id: str,
        list_name: str,
        status_id: str | None = None,
        status_title: str | None = None,
        status_attribute_slug: str | None = None,
    ) -> ListDrillState:
        return cls(
            level=ListDrillLevel.ENTRIES,
            list_id=list_id,
            list_name=list_name,
            status_attribute_slug=status_attribute_slug,
            status_id=status_id,
            status_title=status_title,
        )

    @property
    def is_filtered(self) -> bool:
        return self.level is ListDrillLevel.ENTRIES and self.status_id is not None


class ObjectDrillLevel(str, Enum):
    OBJECTS = "objects"
    RECORDS = "records"


@dataclass(frozen=True)
class ObjectDrillState:
    level: ObjectDrillLevel = ObjectDrillLevel.OBJECTS
    object_slug: str | None = None
    object_name: str | None = None

    @classmethod
    def records(cls, object_slug: str, object_name: str) -> ObjectDrillState:
        return cls(
            level=ObjectDrillLevel.RECORDS,
            object_slug=object_slug,
            object_name=object_name,
        )


# =============================================================================
# Results
# =============================================================================


class ResultType(str, Enum):
    OBJECT = "object"  # a record of some object
    OBJECT_INFO = "object-info"  # an object definition under "Objects"
    LIST = "list"
    LIST_STATUS = "list-status"
    LIST_ENTRY = "list-entry"
    NOTES = "notes"
    TASKS = "tasks"
    MEETINGS = "meetings"
    WEBHOOKS = "webhooks"


@dataclass(frozen=True)
class ResultItem:
    """A row in the results pane; ``data`` is the raw API payload."""

    type: ResultType
    id: str
    title: str
    subtitle: str | None = None
    data: dict[str, Any] = field(default_factory=dict, compare=False)


# =============================================================================
# Modals
# =============================================================================


class WebhookModalMode(str, Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"
    CONFIRM_DELETE = "confirm-delete"


class WebhookFormStep(str, Enum):
    URL = "url"
    SUBSCRIPTIONS = "subscriptions"
    REVIEW = "review"


WEBHOOK_FORM_STEPS: tuple[WebhookFormStep, ...] = (
    WebhookFormStep.URL,
    WebhookFormStep.SUBSCRIPTIONS,
    WebhookFormStep.REVIEW,
)


@dataclass(frozen=True)
class WebhookModalState:
    mode: WebhookModalMode = WebhookModalMode.CLOSED
    step: WebhookFormStep = WebhookFormStep.URL
    webhook_id: str | None = None
    target_url: str = ""
    selected_events: tuple[str, ...] = ()

    @property
    def is_form(self) -> bool:
        return self.mode in (WebhookModalMode.CREATE, WebhookModalMode.EDIT)


@dataclass(frozen=True)
class ColumnPickerState:
    is_open: bool = False
    entity_key: str | None = None
    title: str | None = None


# =============================================================================
# Application state
# =============================================================================


@dataclass(frozen=True)
class NavigatorState:
    categories: tuple[NavigatorCategory, ...] = DEFAULT_CATEGORIES
    selected_index: int = 0
    loading: bool = False

    @property
    def selected_category(self) -> NavigatorCategory | None:
        if not self.categories:
            return None
        return self.categories[self.selected_index]


@dataclass(frozen=True)
class ResultsState:
    items: tuple[ResultItem, ...] = ()
    selected_index: int = 0
    loading: bool = False
    has_next_page: bool = False
    next_cursor: str | None = None
    search_query: str = ""
    generation: int = 0
    error: str | None = None

    @property
    def selected_item(self) -> ResultItem | None:
        if not self.items:
            return None
        return self.items[self.selected_index]


@dataclass(frozen=True)
class DetailState:
    active_tab: DetailTab = DetailTab.SUMMARY
    item: ResultItem | None = None


@dataclass(frozen=True)
class CommandPaletteState:
    is_open: bool = False
    query: str = ""
    selected_index: int = 0


@dataclass(frozen=True)
class AppState:
    focused_pane: PaneId = PaneId.NAVIGATOR
    navigator: NavigatorState = field(default_factory=NavigatorState)
    results: ResultsState = field(default_factory=ResultsState)
    detail: DetailState = field(default_factory=DetailState)
    command_palette: CommandPaletteState = field(default_factory=CommandPaletteState)
    webhook_modal: WebhookModalState = field(default_factory=WebhookModalState)
    column_picker: ColumnPickerState = field(default_factory=ColumnPickerState)
    list_drill: ListDrillState = field(default_factory=ListDrillState)
    object_drill: ObjectDrillState = field(default_factory=ObjectDrillState)
    debug_enabled: bool = False

    @property
    def selected_category(self) -> NavigatorCategory | None:
        return self.navigator.selected_category

    @property
    def selected_item(self) -> ResultItem | None:
        return self.results.selected_item
