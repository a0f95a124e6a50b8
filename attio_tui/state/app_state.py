"""
Application state reducer.

``app_reducer(state, event)`` is pure: it never performs I/O and never
mutates its input. Side effects (fetches, schema probes, clipboard, export)
are started by :class:`attio_tui.state.controller.NavigationController`,
which reports outcomes back as further events.

Every transition that replaces the results pane bumps
``results.generation``. Completions carry the generation they were started
under and are dropped when it no longer matches, so a slow response can
never overwrite results for a place the user has already left.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Optional, TypeVar

from ..models.navigation import (
    DETAIL_TABS,
    PANE_ORDER,
    WEBHOOK_FORM_STEPS,
    AppState,
    CategoryType,
    ColumnPickerState,
    CommandPaletteState,
    DetailTab,
    ListDrillLevel,
    ListDrillState,
    NavigatorCategory,
    ObjectDrillLevel,
    ObjectDrillState,
    PaneId,
    ResultItem,
    ResultsState,
    WebhookFormStep,
    WebhookModalMode,
    WebhookModalState,
)
from ..ui.command_palette.palette_commands import clamp_command_index

logger = logging.getLogger(__name__)


def clamp_index(index: int, length: int) -> int:
    """Clamp into ``[0, length - 1]``, or 0 for an empty sequence."""
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class FocusPane:
    pane: PaneId


@dataclass(frozen=True)
class FocusNextPane:
    pass


@dataclass(frozen=True)
class FocusPreviousPane:
    pass


@dataclass(frozen=True)
class ToggleDebug:
    pass


@dataclass(frozen=True)
class SetDebugEnabled:
    enabled: bool


@dataclass(frozen=True)
class SetCategories:
    categories: tuple[NavigatorCategory, ...]


@dataclass(frozen=True)
class SelectCategory:
    index: int


@dataclass(frozen=True)
class NavigateCategory:
    delta: int


@dataclass(frozen=True)
class SetNavigatorLoading:
    loading: bool


@dataclass(frozen=True)
class SetResults:
    """Replace the results. ``generation=None`` skips the staleness check."""

    items: tuple[ResultItem, ...]
    has_next_page: bool = False
    next_cursor: Optional[str] = None
    generation: Optional[int] = None
    preserve_selection: bool = False


@dataclass(frozen=True)
class AppendResults:
    items: tuple[ResultItem, ...]
    has_next_page: bool = False
    next_cursor: Optional[str] = None
    generation: Optional[int] = None


@dataclass(frozen=True)
class ResultsFailed:
    error: str
    generation: Optional[int] = None


@dataclass(frozen=True)
class RefreshResults:
    """Reload the current results in place; the old rows stay until replaced."""

    pass


@dataclass(frozen=True)
class SelectResult:
    index: int


@dataclass(frozen=True)
class NavigateResult:
    delta: int


@dataclass(frozen=True)
class SetResultsLoading:
    loading: bool


@dataclass(frozen=True)
class SetSearchQuery:
    query: str


@dataclass(frozen=True)
class SetDetailTab:
    tab: DetailTab


@dataclass(frozen=True)
class NavigateTab:
    delta: int


@dataclass(frozen=True)
class SetDetailItem:
    item: Optional[ResultItem]


@dataclass(frozen=True)
class OpenCommandPalette:
    pass


@dataclass(frozen=True)
class CloseCommandPalette:
    pass


@dataclass(frozen=True)
class SetCommandQuery:
    query: str


@dataclass(frozen=True)
class NavigateCommand:
    delta: int


@dataclass(frozen=True)
class SelectCommand:
    pass


@dataclass(frozen=True)
class OpenColumnPicker:
    entity_key: str
    title: str


@dataclass(frozen=True)
class CloseColumnPicker:
    pass


@dataclass(frozen=True)
class OpenWebhookCreate:
    pass


@dataclass(frozen=True)
class OpenWebhookEdit:
    webhook_id: str
    target_url: str
    events: tuple[str, ...] = ()


@dataclass(frozen=True)
class OpenWebhookDelete:
    webhook_id: str
    webhook_url: str


@dataclass(frozen=True)
class CloseWebhookModal:
    pass


@dataclass(frozen=True)
class WebhookSetUrl:
    url: str


@dataclass(frozen=True)
class WebhookToggleEvent:
    event: str


@dataclass(frozen=True)
class WebhookNavigateStep:
    delta: int


@dataclass(frozen=True)
class ListDrillIntoStatuses:
    list_id: str
    list_name: str
    status_attribute_slug: str


@dataclass(frozen=True)
class ListDrillIntoEntries:
    list_id: str
    list_name: str
    status_id: Optional[str] = None
    status_title: Optional[str] = None
    status_attribute_slug: Optional[str] = None


@dataclass(frozen=True)
class ListDrillBack:
    pass


@dataclass(frozen=True)
class ObjectDrillIntoRecords:
    object_slug: str
    object_name: str


@dataclass(frozen=True)
class ObjectDrillBack:
    pass


# =============================================================================
# Reducer
# =============================================================================

E = TypeVar("E")
Handler = Callable[[AppState, Any], AppState]

_HANDLERS: dict[type, Handler] = {}


def _handles(event_type: type[E]) -> Callable[[Callable[[AppState, E], AppState]], Callable[[AppState, E], AppState]]:
    def decorator(func: Callable[[AppState, E], AppState]) -> Callable[[AppState, E], AppState]:
        _HANDLERS[event_type] = func
        return func

    return decorator


def app_reducer(state: AppState, event: Any) -> AppState:
    """Apply one event and return the next state."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        logger.warning("No reducer handler for %s", type(event).__name__)
        return state
    return _normalize(handler(state, event))


def _normalize(state: AppState) -> AppState:
    """Re-clamp every selection index against the data it points into."""
    navigator = state.navigator
    nav_index = clamp_index(navigator.selected_index, len(navigator.categories))
    if nav_index != navigator.selected_index:
        state = replace(state, navigator=replace(navigator, selected_index=nav_index))

    results = state.results
    result_index = clamp_index(results.selected_index, len(results.items))
    if result_index != results.selected_index:
        state = replace(state, results=replace(results, selected_index=result_index))

    palette = state.command_palette
    command_index = clamp_command_index(palette.selected_index, palette.query)
    if command_index != palette.selected_index:
        state = replace(state, command_palette=replace(palette, selected_index=command_index))

    return state


def _sync_detail(state: AppState) -> AppState:
    """Point the detail pane at the selected result."""
    results = state.results
    index = clamp_index(results.selected_index, len(results.items))
    item = results.items[index] if results.items else None
    return replace(state, detail=replace(state.detail, item=item))


def _reset_results(state: AppState) -> AppState:
    """Clear the results pane for a new navigation target."""
    results = ResultsState(loading=True, generation=state.results.generation + 1)
    return replace(state, results=results, detail=replace(state.detail, item=None))


def _is_current(state: AppState, generation: Optional[int]) -> bool:
    if generation is None or generation == state.results.generation:
        return True
    logger.debug(
        "Dropping stale results (generation %s, current %s)",
        generation,
        state.results.generation,
    )
    return False


# --- Pane focus ---------------------------------------------------------------


@_handles(FocusPane)
def _focus_pane(state: AppState, event: FocusPane) -> AppState:
    return replace(state, focused_pane=event.pane)


def _rotate_pane(state: AppState, step: int) -> AppState:
    index = PANE_ORDER.index(state.focused_pane)
    return replace(state, focused_pane=PANE_ORDER[(index + step) % len(PANE_ORDER)])


@_handles(FocusNextPane)
def _focus_next(state: AppState, event: FocusNextPane) -> AppState:
    return _rotate_pane(state, 1)


@_handles(FocusPreviousPane)
def _focus_previous(state: AppState, event: FocusPreviousPane) -> AppState:
    return _rotate_pane(state, -1)


# --- Debug --------------------------------------------------------------------


@_handles(ToggleDebug)
def _toggle_debug(state: AppState, event: ToggleDebug) -> AppState:
    return replace(state, debug_enabled=not state.debug_enabled)


@_handles(SetDebugEnabled)
def _set_debug(state: AppState, event: SetDebugEnabled) -> AppState:
    return replace(state, debug_enabled=event.enabled)


# --- Navigator ----------------------------------------------------------------


@_handles(SetCategories)
def _set_categories(state: AppState, event: SetCategories) -> AppState:
    navigator = replace(state.navigator, categories=tuple(event.categories), loading=False)
    return replace(state, navigator=navigator)


def _select_category(state: AppState, index: int) -> AppState:
    if not state.navigator.categories:
        return state
    index = clamp_index(index, len(state.navigator.categories))
    state = replace(
        state,
        navigator=replace(state.navigator, selected_index=index),
        list_drill=ListDrillState(),
        object_drill=ObjectDrillState(),
    )
    return _reset_results(state)


@_handles(SelectCategory)
def _select_category_event(state: AppState, event: SelectCategory) -> AppState:
    return _select_category(state, event.index)


@_handles(NavigateCategory)
def _navigate_category(state: AppState, event: NavigateCategory) -> AppState:
    current = state.navigator.selected_index
    target = clamp_index(current + event.delta, len(state.navigator.categories))
    if target == current:
        return state
    return _select_category(state, target)


@_handles(SetNavigatorLoading)
def _set_navigator_loading(state: AppState, event: SetNavigatorLoading) -> AppState:
    return replace(state, navigator=replace(state.navigator, loading=event.loading))


# --- Results ------------------------------------------------------------------


@_handles(SetResults)
def _set_results(state: AppState, event: SetResults) -> AppState:
    if not _is_current(state, event.generation):
        return state
    index = state.results.selected_index if event.preserve_selection else 0
    results = replace(
        state.results,
        items=tuple(event.items),
        selected_index=clamp_index(index, len(event.items)),
        loading=False,
        has_next_page=event.has_next_page,
        next_cursor=event.next_cursor if event.has_next_page else None,
        error=None,
    )
    return _sync_detail(replace(state, results=results))


@_handles(AppendResults)
def _append_results(state: AppState, event: AppendResults) -> AppState:
    if not _is_current(state, event.generation):
        return state
    results = replace(
        state.results,
        items=state.results.items + tuple(event.items),
        loading=False,
        has_next_page=event.has_next_page,
        next_cursor=event.next_cursor if event.has_next_page else None,
        error=None,
    )
    return _sync_detail(replace(state, results=results))


@_handles(ResultsFailed)
def _results_failed(state: AppState, event: ResultsFailed) -> AppState:
    if not _is_current(state, event.generation):
        return state
    results = replace(state.results, loading=False, error=event.error)
    return _sync_detail(replace(state, results=results))


@_handles(RefreshResults)
def _refresh_results(state: AppState, event: RefreshResults) -> AppState:
    results = replace(
        state.results,
        loading=True,
        error=None,
        generation=state.results.generation + 1,
    )
    return replace(state, results=results)


@_handles(SelectResult)
def _select_result(state: AppState, event: SelectResult) -> AppState:
    index = clamp_index(event.index, len(state.results.items))
    return _sync_detail(replace(state, results=replace(state.results, selected_index=index)))


@_handles(NavigateResult)
def _navigate_result(state: AppState, event: NavigateResult) -> AppState:
    index = clamp_index(state.results.selected_index + event.delta, len(state.results.items))
    return _sync_detail(replace(state, results=replace(state.results, selected_index=index)))


@_handles(SetResultsLoading)
def _set_results_loading(state: AppState, event: SetResultsLoading) -> AppState:
    return replace(state, results=replace(state.results, loading=event.loading))


@_handles(SetSearchQuery)
def _set_search_query(state: AppState, event: SetSearchQuery) -> AppState:
    return replace(state, results=replace(state.results, search_query=event.query))


# --- Detail -------------------------------------------------------------------


@_handles(SetDetailTab)
def _set_detail_tab(state: AppState, event: SetDetailTab) -> AppState:
    return replace(state, detail=replace(state.detail, active_tab=event.tab))


@_handles(NavigateTab)
def _navigate_tab(state: AppState, event: NavigateTab) -> AppState:
    index = DETAIL_TABS.index(state.detail.active_tab)
    tab = DETAIL_TABS[(index + event.delta) % len(DETAIL_TABS)]
    return replace(state, detail=replace(state.detail, active_tab=tab))


@_handles(SetDetailItem)
def _set_detail_item(state: AppState, event: SetDetailItem) -> AppState:
    return replace(state, detail=replace(state.detail, item=event.item))


# --- Command palette ----------------------------------------------------------


@_handles(OpenCommandPalette)
def _open_palette(state: AppState, event: OpenCommandPalette) -> AppState:
    return replace(state, command_palette=CommandPaletteState(is_open=True))


@_handles(CloseCommandPalette)
def _close_palette(state: AppState, event: CloseCommandPalette) -> AppState:
    return replace(state, command_palette=CommandPaletteState())


@_handles(SetCommandQuery)
def _set_command_query(state: AppState, event: SetCommandQuery) -> AppState:
    palette = replace(state.command_palette, query=event.query, selected_index=0)
    return replace(state, command_palette=palette)


@_handles(NavigateCommand)
def _navigate_command(state: AppState, event: NavigateCommand) -> AppState:
    palette = state.command_palette
    index = clamp_command_index(palette.selected_index + event.delta, palette.query)
    return replace(state, command_palette=replace(palette, selected_index=index))


@_handles(SelectCommand)
def _select_command(state: AppState, event: SelectCommand) -> AppState:
    return replace(state, command_palette=CommandPaletteState())


# --- Column picker ------------------------------------------------------------


@_handles(OpenColumnPicker)
def _open_column_picker(state: AppState, event: OpenColumnPicker) -> AppState:
    picker = ColumnPickerState(is_open=True, entity_key=event.entity_key, title=event.title)
    return replace(state, column_picker=picker)


@_handles(CloseColumnPicker)
def _close_column_picker(state: AppState, event: CloseColumnPicker) -> AppState:
    return replace(state, column_picker=ColumnPickerState())


# --- Webhook modal ------------------------------------------------------------


@_handles(OpenWebhookCreate)
def _open_webhook_create(state: AppState, event: OpenWebhookCreate) -> AppState:
    return replace(state, webhook_modal=WebhookModalState(mode=WebhookModalMode.CREATE))


@_handles(OpenWebhookEdit)
def _open_webhook_edit(state: AppState, event: OpenWebhookEdit) -> AppState:
    modal = WebhookModalState(
        mode=WebhookModalMode.EDIT,
        webhook_id=event.webhook_id,
        target_url=event.target_url,
        selected_events=tuple(event.events),
    )
    return replace(state, webhook_modal=modal)


@_handles(OpenWebhookDelete)
def _open_webhook_delete(state: AppState, event: OpenWebhookDelete) -> AppState:
    modal = WebhookModalState(
        mode=WebhookModalMode.CONFIRM_DELETE,
        webhook_id=event.webhook_id,
        target_url=event.webhook_url,
    )
    return replace(state, webhook_modal=modal)


@_handles(CloseWebhookModal)
def _close_webhook_modal(state: AppState, event: CloseWebhookModal) -> AppState:
    return replace(state, webhook_modal=WebhookModalState())


@_handles(WebhookSetUrl)
def _webhook_set_url(state: AppState, event: WebhookSetUrl) -> AppState:
    if not state.webhook_modal.is_form:
        return state
    return replace(state, webhook_modal=replace(state.webhook_modal, target_url=event.url))


@_handles(WebhookToggleEvent)
def _webhook_toggle_event(state: AppState, event: WebhookToggleEvent) -> AppState:
    modal = state.webhook_modal
    if not modal.is_form:
        return state
    if event.event in modal.selected_events:
        events = tuple(e for e in modal.selected_events if e != event.event)
    else:
        events = modal.selected_events + (event.event,)
    return replace(state, webhook_modal=replace(modal, selected_events=events))


@_handles(WebhookNavigateStep)
def _webhook_navigate_step(state: AppState, event: WebhookNavigateStep) -> AppState:
    modal = state.webhook_modal
    if not modal.is_form:
        return state
    index = clamp_index(WEBHOOK_FORM_STEPS.index(modal.step) + event.delta, len(WEBHOOK_FORM_STEPS))
    step: WebhookFormStep = WEBHOOK_FORM_STEPS[index]
    return replace(state, webhook_modal=replace(modal, step=step))


# --- List drill ---------------------------------------------------------------


def _in_category(state: AppState, category_type: CategoryType) -> bool:
    category = state.selected_category
    return category is not None and category.type is category_type


@_handles(ListDrillIntoStatuses)
def _list_drill_statuses(state: AppState, event: ListDrillIntoStatuses) -> AppState:
    if not _in_category(state, CategoryType.LISTS):
        return state
    drill = ListDrillState.statuses(event.list_id, event.list_name, event.status_attribute_slug)
    return _reset_results(replace(state, list_drill=drill))


@_handles(ListDrillIntoEntries)
def _list_drill_entries(state: AppState, event: ListDrillIntoEntries) -> AppState:
    if not _in_category(state, CategoryType.LISTS):
        return state
    drill = ListDrillState.entries(
        event.list_id,
        event.list_name,
        status_id=event.status_id,
        status_title=event.status_title,
        status_attribute_slug=event.status_attribute_slug,
    )
    return _reset_results(replace(state, list_drill=drill))


@_handles(ListDrillBack)
def _list_drill_back(state: AppState, event: ListDrillBack) -> AppState:
    drill = state.list_drill
    if drill.level is ListDrillLevel.LISTS:
        return state
    if drill.level is ListDrillLevel.ENTRIES and drill.status_attribute_slug:
        previous = ListDrillState.statuses(
            drill.list_id or "", drill.list_name or "", drill.status_attribute_slug
        )
    else:
        previous = ListDrillState()
    return _reset_results(replace(state, list_drill=previous))


# --- Object drill -------------------------------------------------------------


@_handles(ObjectDrillIntoRecords)
def _object_drill_records(state: AppState, event: ObjectDrillIntoRecords) -> AppState:
    if not _in_category(state, CategoryType.OBJECTS):
        return state
    drill = ObjectDrillState.records(event.object_slug, event.object_name)
    return _reset_results(replace(state, object_drill=drill))


@_handles(ObjectDrillBack)
def _object_drill_back(state: AppState, event: ObjectDrillBack) -> AppState:
    if state.object_drill.level is ObjectDrillLevel.OBJECTS:
        return state
    return _reset_results(replace(state, object_drill=ObjectDrillState()))
