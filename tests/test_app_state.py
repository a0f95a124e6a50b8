"""Tests for the application reducer and store."""

from dataclasses import replace

import pytest

from attio_tui.models.navigation import (
    DEFAULT_CATEGORIES,
    DETAIL_TABS,
    PANE_ORDER,
    AppState,
    CategoryType,
    DetailTab,
    ListDrillLevel,
    ObjectDrillLevel,
    PaneId,
    ResultItem,
    ResultType,
    WebhookFormStep,
    WebhookModalMode,
)
from attio_tui.state.app_state import (
    AppendResults,
    CloseWebhookModal,
    FocusNextPane,
    FocusPane,
    FocusPreviousPane,
    ListDrillBack,
    ListDrillIntoEntries,
    ListDrillIntoStatuses,
    NavigateCategory,
    NavigateResult,
    NavigateTab,
    ObjectDrillBack,
    ObjectDrillIntoRecords,
    OpenCommandPalette,
    OpenWebhookCreate,
    OpenWebhookEdit,
    RefreshResults,
    ResultsFailed,
    SelectCategory,
    SelectCommand,
    SelectResult,
    SetCategories,
    SetResults,
    ToggleDebug,
    WebhookNavigateStep,
    WebhookSetUrl,
    WebhookToggleEvent,
    app_reducer,
    clamp_index,
)
from attio_tui.state.store import AppStore, serialize_state

from conftest import make_item, make_items

LISTS_INDEX = next(i for i, c in enumerate(DEFAULT_CATEGORIES) if c.type is CategoryType.LISTS)
OBJECTS_INDEX = next(i for i, c in enumerate(DEFAULT_CATEGORIES) if c.type is CategoryType.OBJECTS)


def reduce(state, *events):
    for event in events:
        state = app_reducer(state, event)
    return state


class TestClampIndex:
    def test_empty(self):
        assert clamp_index(5, 0) == 0

    def test_bounds(self):
        assert clamp_index(-1, 3) == 0
        assert clamp_index(3, 3) == 2
        assert clamp_index(1, 3) == 1


class TestPaneFocus:
    """Tests for pane rotation."""

    @pytest.mark.parametrize("start", list(PaneId))
    def test_three_steps_return_to_start(self, start):
        state = AppState(focused_pane=start)
        assert reduce(state, FocusNextPane(), FocusNextPane(), FocusNextPane()).focused_pane is start

    @pytest.mark.parametrize("start", list(PaneId))
    def test_previous_inverts_next(self, start):
        state = AppState(focused_pane=start)
        assert reduce(state, FocusNextPane(), FocusPreviousPane()).focused_pane is start
        assert reduce(state, FocusPreviousPane(), FocusNextPane()).focused_pane is start

    def test_order(self):
        state = AppState()
        seen = []
        for _ in PANE_ORDER:
            seen.append(state.focused_pane)
            state = app_reducer(state, FocusNextPane())
        assert tuple(seen) == PANE_ORDER

    def test_focus_pane(self):
        assert app_reducer(AppState(), FocusPane(PaneId.DETAIL)).focused_pane is PaneId.DETAIL


class TestNavigator:
    """Tests for category selection."""

    def test_select_category_resets_results(self):
        state = reduce(AppState(), SetResults(make_items(3)), SelectResult(2))
        generation = state.results.generation
        state = app_reducer(state, SelectCategory(4))
        assert state.navigator.selected_index == 4
        assert state.results.items == ()
        assert state.results.selected_index == 0
        assert state.results.loading
        assert state.results.generation == generation + 1
        assert state.detail.item is None

    def test_select_category_clamped(self):
        state = app_reducer(AppState(), SelectCategory(99))
        assert state.navigator.selected_index == len(DEFAULT_CATEGORIES) - 1

    def test_select_category_resets_drills(self):
        state = reduce(
            AppState(),
            SelectCategory(LISTS_INDEX),
            ListDrillIntoEntries("L1", "Deals"),
            SelectCategory(0),
        )
        assert state.list_drill.level is ListDrillLevel.LISTS

    def test_navigate_category_at_edge_is_no_op(self):
        state = AppState()
        assert app_reducer(state, NavigateCategory(-1)) is state

    def test_navigate_category_by_page(self):
        state = app_reducer(AppState(), NavigateCategory(10))
        assert state.navigator.selected_index == len(DEFAULT_CATEGORIES) - 1

    def test_empty_categories(self):
        state = reduce(AppState(), SetCategories(()), SelectCategory(2))
        assert state.navigator.selected_index == 0
        assert state.selected_category is None

    def test_set_categories_reclamps_selection(self):
        state = reduce(AppState(), SelectCategory(6), SetCategories(DEFAULT_CATEGORIES[:2]))
        assert state.navigator.selected_index == 1


class TestResults:
    """Tests for results loading, paging and staleness."""

    def test_set_results_selects_first(self):
        items = make_items(3)
        state = app_reducer(AppState(), SetResults(items, has_next_page=True, next_cursor="3"))
        assert state.results.items == items
        assert state.results.selected_index == 0
        assert state.results.next_cursor == "3"
        assert state.detail.item == items[0]

    def test_cursor_dropped_without_next_page(self):
        state = app_reducer(AppState(), SetResults(make_items(1), has_next_page=False, next_cursor="9"))
        assert state.results.next_cursor is None

    def test_stale_generation_dropped(self):
        state = app_reducer(AppState(), SelectCategory(1))
        stale = state.results.generation - 1
        assert app_reducer(state, SetResults(make_items(2), generation=stale)) is state
        assert app_reducer(state, AppendResults(make_items(2), generation=stale)) is state
        assert app_reducer(state, ResultsFailed("boom", generation=stale)) is state

    def test_no_generation_skips_check(self):
        state = app_reducer(AppState(), SelectCategory(1))
        state = app_reducer(state, SetResults(make_items(2)))
        assert len(state.results.items) == 2

    def test_append_keeps_selection(self):
        state = reduce(AppState(), SetResults(make_items(3), True, "3"), SelectResult(2))
        state = app_reducer(state, AppendResults(make_items(2, prefix="more"), has_next_page=False))
        assert len(state.results.items) == 5
        assert state.results.selected_index == 2
        assert not state.results.has_next_page

    def test_failure_keeps_rows(self):
        state = reduce(AppState(), SetResults(make_items(3)), ResultsFailed("Network error: boom"))
        assert state.results.error == "Network error: boom"
        assert len(state.results.items) == 3
        assert not state.results.loading

    def test_refresh_keeps_rows_and_bumps_generation(self):
        state = reduce(AppState(), SetResults(make_items(3)), SelectResult(2))
        refreshed = app_reducer(state, RefreshResults())
        assert refreshed.results.items == state.results.items
        assert refreshed.results.loading
        assert refreshed.results.generation == state.results.generation + 1

    def test_preserve_selection_clamped(self):
        state = reduce(AppState(), SetResults(make_items(5)), SelectResult(4))
        state = app_reducer(state, SetResults(make_items(2), preserve_selection=True))
        assert state.results.selected_index == 1

    def test_navigate_result_clamped(self):
        state = reduce(AppState(), SetResults(make_items(3)), NavigateResult(10))
        assert state.results.selected_index == 2
        state = app_reducer(state, NavigateResult(-10))
        assert state.results.selected_index == 0

    def test_select_result_updates_detail(self):
        items = make_items(3)
        state = reduce(AppState(), SetResults(items), SelectResult(1))
        assert state.detail.item == items[1]


class TestDetailTabs:
    def test_tabs_wrap(self):
        state = app_reducer(AppState(), NavigateTab(-1))
        assert state.detail.active_tab is DETAIL_TABS[-1]
        state = app_reducer(state, NavigateTab(1))
        assert state.detail.active_tab is DetailTab.SUMMARY


class TestListDrill:
    """Tests for the list drill-down levels."""

    def test_drill_outside_lists_ignored(self):
        state = AppState()
        assert app_reducer(state, ListDrillIntoEntries("L1", "Deals")) is state

    def test_statuses_then_entries_then_back(self):
        state = reduce(
            AppState(),
            SelectCategory(LISTS_INDEX),
            ListDrillIntoStatuses("L1", "Deals", "stage"),
        )
        assert state.list_drill.level is ListDrillLevel.STATUSES
        assert state.list_drill.status_attribute_slug == "stage"

        state = app_reducer(state, ListDrillIntoEntries("L1", "Deals", "S1", "Won", "stage"))
        assert state.list_drill.level is ListDrillLevel.ENTRIES
        assert state.list_drill.is_filtered

        state = app_reducer(state, ListDrillBack())
        assert state.list_drill.level is ListDrillLevel.STATUSES
        assert state.list_drill.list_id == "L1"

        state = app_reducer(state, ListDrillBack())
        assert state.list_drill.level is ListDrillLevel.LISTS

    def test_unfiltered_entries_back_to_lists(self):
        state = reduce(
            AppState(),
            SelectCategory(LISTS_INDEX),
            ListDrillIntoEntries("L1", "Deals"),
            ListDrillBack(),
        )
        assert state.list_drill.level is ListDrillLevel.LISTS

    def test_back_at_top_is_no_op(self):
        state = app_reducer(AppState(), SelectCategory(LISTS_INDEX))
        assert app_reducer(state, ListDrillBack()) is state

    def test_every_level_change_bumps_generation(self):
        state = app_reducer(AppState(), SelectCategory(LISTS_INDEX))
        generations = [state.results.generation]
        for event in (ListDrillIntoStatuses("L1", "Deals", "stage"), ListDrillIntoEntries("L1", "Deals"), ListDrillBack()):
            state = app_reducer(state, event)
            generations.append(state.results.generation)
        assert generations == sorted(set(generations))


class TestObjectDrill:
    def test_drill_and_back(self):
        state = reduce(AppState(), SelectCategory(OBJECTS_INDEX), ObjectDrillIntoRecords("deals", "Deals"))
        assert state.object_drill.level is ObjectDrillLevel.RECORDS
        assert state.object_drill.object_slug == "deals"
        state = app_reducer(state, ObjectDrillBack())
        assert state.object_drill.level is ObjectDrillLevel.OBJECTS

    def test_drill_outside_objects_ignored(self):
        state = AppState()
        assert app_reducer(state, ObjectDrillIntoRecords("deals", "Deals")) is state


class TestWebhookModal:
    """Tests for the webhook form state."""

    def test_create_flow(self):
        state = reduce(
            AppState(),
            OpenWebhookCreate(),
            WebhookSetUrl("https://example.com/hook"),
            WebhookNavigateStep(1),
            WebhookToggleEvent("record.created"),
            WebhookToggleEvent("note.created"),
            WebhookToggleEvent("record.created"),
            WebhookNavigateStep(5),
        )
        modal = state.webhook_modal
        assert modal.mode is WebhookModalMode.CREATE
        assert modal.target_url == "https://example.com/hook"
        assert modal.selected_events == ("note.created",)
        assert modal.step is WebhookFormStep.REVIEW

    def test_edit_prefills(self):
        state = app_reducer(AppState(), OpenWebhookEdit("wh-1", "https://x.test", ("task.created",)))
        assert state.webhook_modal.mode is WebhookModalMode.EDIT
        assert state.webhook_modal.selected_events == ("task.created",)

    def test_form_events_ignored_when_closed(self):
        state = AppState()
        assert app_reducer(state, WebhookSetUrl("https://x.test")) is state
        assert app_reducer(state, WebhookNavigateStep(1)) is state

    def test_close(self):
        state = reduce(AppState(), OpenWebhookCreate(), CloseWebhookModal())
        assert state.webhook_modal.mode is WebhookModalMode.CLOSED


def test_unknown_event_returns_same_state():
    state = AppState()
    assert app_reducer(state, object()) is state


def test_toggle_debug():
    assert app_reducer(AppState(), ToggleDebug()).debug_enabled


def test_select_command_closes_palette():
    state = reduce(AppState(), OpenCommandPalette(), SelectCommand())
    assert not state.command_palette.is_open


class TestStore:
    """Tests for AppStore."""

    def test_dispatch_notifies_on_change(self, store):
        seen = []
        store.subscribe(lambda state, event: seen.append(type(event).__name__))
        store.dispatch(FocusNextPane())
        assert seen == ["FocusNextPane"]
        assert store.state.focused_pane is PaneId.RESULTS

    def test_no_notification_without_change(self, store):
        seen = []
        store.subscribe(lambda state, event: seen.append(event))
        store.dispatch(NavigateCategory(-1))
        assert seen == []

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(lambda state, event: seen.append(event))
        unsubscribe()
        store.dispatch(ToggleDebug())
        assert seen == []

    def test_every_dispatch_is_logged(self, store):
        store.dispatch(ToggleDebug())
        store.dispatch(NavigateCategory(-1))
        entries = store.action_logger.entries()
        assert [e.event_type for e in entries] == ["ToggleDebug", "NavigateCategory"]
        assert entries[0].state_summary == "debug: False→True"
        assert entries[1].state_summary == "no change"


def _category(type_, title, object_slug=None, list_id=None):
    return {"type": type_, "title": title, "object_slug": object_slug, "list_id": list_id}


def _entry(entry_id, record_id):
    return {
        "type": "list-entry",
        "id": entry_id,
        "title": record_id,
        "subtitle": "Entry in Deals",
        "data": {"id": entry_id},
    }


def test_list_entries_snapshot():
    """Walking into a list's entries and opening the palette yields a known state tree."""
    entries = (
        ResultItem(ResultType.LIST_ENTRY, "E1", "rec-1", "Entry in Deals", {"id": "E1"}),
        ResultItem(ResultType.LIST_ENTRY, "E2", "rec-2", "Entry in Deals", {"id": "E2"}),
    )
    store = AppStore()
    store.dispatch(SetCategories(DEFAULT_CATEGORIES))
    store.dispatch(SelectCategory(LISTS_INDEX))
    store.dispatch(ListDrillIntoEntries("L1", "Deals"))
    store.dispatch(SetResults(entries, generation=store.state.results.generation))
    store.dispatch(SelectResult(1))
    store.dispatch(OpenCommandPalette())

    assert store.snapshot() == {
        "focused_pane": "navigator",
        "navigator": {
            "categories": (
                _category("object", "Companies", object_slug="companies"),
                _category("object", "People", object_slug="people"),
                _category("objects", "Objects"),
                _category("lists", "Lists"),
                _category("notes", "Notes"),
                _category("tasks", "Tasks"),
                _category("meetings", "Meetings"),
                _category("webhooks", "Webhooks"),
            ),
            "selected_index": 3,
            "loading": False,
        },
        "results": {
            "items": (_entry("E1", "rec-1"), _entry("E2", "rec-2")),
            "selected_index": 1,
            "loading": False,
            "has_next_page": False,
            "next_cursor": None,
            "search_query": "",
            "generation": 2,
            "error": None,
        },
        "detail": {"active_tab": "summary", "item": _entry("E2", "rec-2")},
        "command_palette": {"is_open": True, "query": "", "selected_index": 0},
        "webhook_modal": {
            "mode": "closed",
            "step": "url",
            "webhook_id": None,
            "target_url": "",
            "selected_events": (),
        },
        "column_picker": {"is_open": False, "entity_key": None, "title": None},
        "list_drill": {
            "level": "entries",
            "list_id": "L1",
            "list_name": "Deals",
            "status_attribute_slug": None,
            "status_id": None,
            "status_title": None,
        },
        "object_drill": {"level": "objects", "object_slug": None, "object_name": None},
        "debug_enabled": False,
    }


def test_snapshot_is_plain_values():
    state = replace(AppState(), results=replace(AppState().results, items=(make_item(),)))
    snapshot = serialize_state(state)
    assert type(snapshot["focused_pane"]) is str
    assert type(snapshot["results"]["items"][0]["type"]) is str
