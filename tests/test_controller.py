"""Tests for NavigationController side effects."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from attio_tui.config.columns_store import ColumnsStore
from attio_tui.config.constants import LOAD_MORE_COOLDOWN_SECONDS
from attio_tui.exceptions import ApiError, CommandError, NetworkError
from attio_tui.models.columns import ColumnConfig
from attio_tui.models.commands import AppAction, WebhookOperation
from attio_tui.models.entities import StatusAttribute
from attio_tui.models.navigation import (
    DEFAULT_CATEGORIES,
    AppState,
    CategoryType,
    ListDrillLevel,
    ObjectDrillLevel,
    PaneId,
    ResultType,
    WebhookModalMode,
)
from attio_tui.state.app_state import (
    OpenCommandPalette,
    SelectCategory,
    SetCommandQuery,
    SetResults,
)
from attio_tui.state.controller import NavigationController, find_match
from attio_tui.state.status import StatusTone, TemporaryStatus
from attio_tui.state.store import AppStore
from attio_tui.utils.pagination import Page

from conftest import make_item, make_items


def category_index(category_type):
    return next(i for i, c in enumerate(DEFAULT_CATEGORIES) if c.type is category_type)


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data():
    service = MagicMock()
    service.fetch_page = AsyncMock(return_value=Page(list(make_items(3)), None))
    service.probe_schema = AsyncMock(return_value=None)
    service.create_webhook = AsyncMock(return_value={})
    service.update_webhook = AsyncMock(return_value={})
    service.delete_webhook = AsyncMock(return_value=None)
    return service


@pytest.fixture
def controller(store, data, clock, tmp_path):
    return NavigationController(
        store,
        data,
        columns_store=ColumnsStore(tmp_path / "columns.json"),
        status=TemporaryStatus(clock=clock),
        clock=clock,
        export_dir=tmp_path / "exports",
        debug_dir=tmp_path / "debug",
    )


async def enter_lists(controller, store):
    await controller.select_category(category_index(CategoryType.LISTS))
    return store.state.results.generation


class TestLoading:
    """Tests for first page loads."""

    @pytest.mark.asyncio
    async def test_start_loads_first_category(self, controller, store, data):
        await controller.start()
        assert len(store.state.results.items) == 3
        assert not store.state.results.loading
        context = data.fetch_page.await_args.args[0]
        assert context.category == DEFAULT_CATEGORIES[0]

    @pytest.mark.asyncio
    async def test_failure_becomes_error_state(self, controller, store, data):
        data.fetch_page.side_effect = ApiError("Unauthorized", status=401)
        await controller.select_category(1)
        assert store.state.results.error == "Unauthorized"
        assert not store.state.results.loading

    @pytest.mark.asyncio
    async def test_stale_completion_dropped(self, controller, store, data):
        """A page that arrives after the user moved on must not replace the new view."""
        release = asyncio.Event()

        async def slow_page(context, cursor=None):
            await release.wait()
            return Page([make_item("old")], None)

        data.fetch_page.side_effect = slow_page
        pending = asyncio.create_task(controller.select_category(1))
        await asyncio.sleep(0)
        store.dispatch(SelectCategory(2))
        release.set()
        await pending

        assert store.state.navigator.selected_index == 2
        assert store.state.results.items == ()
        assert store.state.results.loading

    @pytest.mark.asyncio
    async def test_refresh_keeps_selection(self, controller, store, data):
        data.fetch_page.return_value = Page(list(make_items(5)), None)
        await controller.start()
        await controller.select_result(3)
        await controller.refresh()
        assert store.state.results.selected_index == 3
        assert data.fetch_page.await_count == 2

    @pytest.mark.asyncio
    async def test_refresh_failure_shows_status(self, controller, store, data):
        await controller.start()
        data.fetch_page.side_effect = NetworkError("offline")
        await controller.refresh()
        assert controller.status.current.tone is StatusTone.ERROR
        assert controller.status.current.text.startswith("Refresh failed")


class TestLoadMore:
    """Tests for pagination guards and cooldown."""

    async def _with_more(self, controller, data, count=10):
        data.fetch_page.return_value = Page(list(make_items(count)), str(count))
        await controller.start()
        data.fetch_page.return_value = Page(list(make_items(2, prefix="more")), None)

    @pytest.mark.asyncio
    async def test_appends_next_page(self, controller, store, data):
        await self._with_more(controller, data)
        assert await controller.load_more()
        assert len(store.state.results.items) == 12
        assert not store.state.results.has_next_page
        assert data.fetch_page.await_args.args[1] == "10"

    @pytest.mark.asyncio
    async def test_nothing_more_to_load(self, controller, data):
        await controller.start()
        assert not await controller.load_more()
        assert data.fetch_page.await_count == 1

    @pytest.mark.asyncio
    async def test_cooldown_after_failure(self, controller, store, data, clock):
        await self._with_more(controller, data)
        data.fetch_page.side_effect = NetworkError("offline")
        assert await controller.load_more()
        assert store.state.results.error

        # A failure leaves has_next_page set, but the cooldown holds retries back
        assert not await controller.load_more()
        clock.now += LOAD_MORE_COOLDOWN_SECONDS
        data.fetch_page.side_effect = None
        assert await controller.load_more()
        assert len(store.state.results.items) == 12

    @pytest.mark.asyncio
    async def test_single_request_in_flight(self, controller, store, data):
        await self._with_more(controller, data)
        release = asyncio.Event()

        async def slow_page(context, cursor=None):
            await release.wait()
            return Page(list(make_items(2, prefix="more")), None)

        data.fetch_page.side_effect = slow_page
        first = asyncio.create_task(controller.load_more())
        await asyncio.sleep(0)
        assert not await controller.load_more()
        release.set()
        assert await first
        assert len(store.state.results.items) == 12

    @pytest.mark.asyncio
    async def test_prefetch_near_end(self, controller, store, data):
        await self._with_more(controller, data, count=10)
        await controller.select_result(2)
        assert len(store.state.results.items) == 10
        await controller.navigate_result(2)
        assert len(store.state.results.items) == 12


class TestFindInResults:
    """Tests for find_in_results and find_match."""

    @pytest.fixture
    def rows(self, store):
        items = (
            make_item("r0", "Acme"),
            make_item("r1", "Globex", subtitle="acme.io"),
            make_item("r2", "Initech"),
        )
        store.dispatch(SetResults(items))
        return items

    @pytest.mark.asyncio
    async def test_steps_through_matches(self, controller, store, rows):
        assert await controller.find_in_results("  ACME ") == 1
        assert store.state.results.search_query == "ACME"
        assert store.state.focused_pane is PaneId.RESULTS
        assert await controller.find_in_results("acme") == 0
        assert store.state.results.selected_index == 0

    @pytest.mark.asyncio
    async def test_no_match(self, controller, store, rows):
        assert await controller.find_in_results("umbrella") is None
        assert store.state.results.selected_index == 0
        assert controller.status.current.text == 'No match for "umbrella"'

    @pytest.mark.asyncio
    async def test_empty_query_clears(self, controller, store, rows):
        await controller.find_in_results("globex")
        assert await controller.find_in_results("") is None
        assert store.state.results.search_query == ""
        assert store.state.results.selected_index == 1

    @pytest.mark.asyncio
    async def test_category_change_clears_query(self, controller, store, rows):
        await controller.find_in_results("initech")
        await controller.select_category(1)
        assert store.state.results.search_query == ""

    def test_find_match_wraps(self, rows):
        assert find_match(rows, "initech", start=0) == 2
        assert find_match(rows, "acme", start=2) == 0
        assert find_match((), "acme") is None


class TestListDrill:
    """Tests for the list schema probe."""

    @pytest.mark.asyncio
    async def test_status_attribute_goes_to_statuses(self, controller, store, data):
        await enter_lists(controller, store)
        data.probe_schema.return_value = StatusAttribute(slug="stage", title="Stage", attribute_id="a1")
        await controller.drill_into_list("L1", "Deals")
        drill = store.state.list_drill
        assert drill.level is ListDrillLevel.STATUSES
        assert drill.status_attribute_slug == "stage"
        assert data.fetch_page.await_args.args[0].list_drill == drill

    @pytest.mark.asyncio
    async def test_no_status_attribute_goes_to_entries(self, controller, store, data):
        await enter_lists(controller, store)
        await controller.drill_into_list("L1", "Deals")
        assert store.state.list_drill.level is ListDrillLevel.ENTRIES
        assert not store.state.list_drill.is_filtered

    @pytest.mark.asyncio
    async def test_probe_failure_falls_back_to_entries(self, controller, store, data):
        await enter_lists(controller, store)
        data.probe_schema.side_effect = NetworkError("offline")
        await controller.drill_into_list("L1", "Deals")
        assert store.state.list_drill.level is ListDrillLevel.ENTRIES
        assert store.state.list_drill.list_id == "L1"

    @pytest.mark.asyncio
    async def test_repeat_request_for_same_list_ignored(self, controller, store, data):
        await enter_lists(controller, store)
        release = asyncio.Event()

        async def slow_probe(list_id):
            await release.wait()
            return None

        data.probe_schema.side_effect = slow_probe
        first = asyncio.create_task(controller.drill_into_list("L1", "Deals"))
        await asyncio.sleep(0)
        await controller.drill_into_list("L1", "Deals")
        release.set()
        await first

        assert data.probe_schema.await_count == 1
        assert store.state.list_drill.list_id == "L1"

    @pytest.mark.asyncio
    async def test_other_list_supersedes_probe(self, controller, store, data):
        await enter_lists(controller, store)
        release_first = asyncio.Event()

        async def probe(list_id):
            if list_id == "L1":
                await release_first.wait()
                return StatusAttribute(slug="stage", title="Stage", attribute_id="a1")
            return None

        data.probe_schema.side_effect = probe
        first = asyncio.create_task(controller.drill_into_list("L1", "Deals"))
        await asyncio.sleep(0)
        await controller.drill_into_list("L2", "Hiring")
        release_first.set()
        await first

        drill = store.state.list_drill
        assert drill.list_id == "L2"
        assert drill.level is ListDrillLevel.ENTRIES

    @pytest.mark.asyncio
    async def test_leaving_lists_discards_probe(self, controller, store, data):
        await enter_lists(controller, store)
        release = asyncio.Event()

        async def slow_probe(list_id):
            await release.wait()
            return None

        data.probe_schema.side_effect = slow_probe
        pending = asyncio.create_task(controller.drill_into_list("L1", "Deals"))
        await asyncio.sleep(0)
        await controller.select_category(0)
        release.set()
        await pending

        assert store.state.navigator.selected_index == 0
        assert store.state.list_drill.level is ListDrillLevel.LISTS

    @pytest.mark.asyncio
    async def test_returning_to_lists_allows_same_list_again(self, controller, store, data):
        await enter_lists(controller, store)
        release = asyncio.Event()
        calls = []

        async def lookup(list_id):
            calls.append(list_id)
            if len(calls) == 1:
                await release.wait()
            return None

        data.probe_schema.side_effect = lookup
        stale = asyncio.create_task(controller.drill_into_list("L1", "Deals"))
        await asyncio.sleep(0)
        await controller.select_category(0)
        await enter_lists(controller, store)
        await controller.drill_into_list("L1", "Deals")

        assert calls == ["L1", "L1"]
        assert store.state.list_drill.level is ListDrillLevel.ENTRIES
        assert store.state.list_drill.list_id == "L1"

        release.set()
        await stale
        assert store.state.list_drill.level is ListDrillLevel.ENTRIES

    @pytest.mark.asyncio
    async def test_status_row_filters_entries(self, controller, store, data):
        await enter_lists(controller, store)
        data.probe_schema.return_value = StatusAttribute(slug="stage", title="Stage", attribute_id="a1")
        await controller.drill_into_list("L1", "Deals")
        status_row = make_item("S1", "Won", ResultType.LIST_STATUS)
        await controller.drill_into_status(status_row)
        drill = store.state.list_drill
        assert drill.is_filtered
        assert drill.status_id == "S1"
        assert drill.status_title == "Won"

    @pytest.mark.asyncio
    async def test_go_back_steps_out(self, controller, store, data):
        await enter_lists(controller, store)
        data.probe_schema.return_value = StatusAttribute(slug="stage", title="Stage", attribute_id="a1")
        await controller.drill_into_list("L1", "Deals")
        await controller.drill_into_status(make_item("S1", "Won", ResultType.LIST_STATUS))

        assert await controller.go_back()
        assert store.state.list_drill.level is ListDrillLevel.STATUSES
        assert await controller.go_back()
        assert store.state.list_drill.level is ListDrillLevel.LISTS
        assert not await controller.go_back()

    @pytest.mark.asyncio
    async def test_activate_list_row(self, controller, store, data):
        data.fetch_page.return_value = Page([make_item("L1", "Deals", ResultType.LIST)], None)
        await enter_lists(controller, store)
        await controller.activate_selected()
        data.probe_schema.assert_awaited_once_with("L1")


class TestObjectDrill:
    @pytest.mark.asyncio
    async def test_activate_object_row_drills_into_records(self, controller, store, data):
        data.fetch_page.return_value = Page([make_item("deals", "Deals", ResultType.OBJECT_INFO)], None)
        await controller.select_category(category_index(CategoryType.OBJECTS))
        await controller.activate_selected()
        assert store.state.object_drill.level is ObjectDrillLevel.RECORDS
        assert store.state.object_drill.object_slug == "deals"
        assert await controller.go_back()
        assert store.state.object_drill.level is ObjectDrillLevel.OBJECTS

    @pytest.mark.asyncio
    async def test_activate_plain_row_focuses_detail(self, controller, store):
        await controller.start()
        await controller.activate_selected()
        assert store.state.focused_pane is PaneId.DETAIL


class TestCommands:
    """Tests for running palette commands."""

    @pytest.mark.asyncio
    async def test_navigate_command(self, controller, store):
        store.dispatch(OpenCommandPalette())
        store.dispatch(SetCommandQuery("go to tasks"))
        assert await controller.execute_selected_command() is None
        assert store.state.selected_category.type is CategoryType.TASKS
        assert not store.state.command_palette.is_open

    @pytest.mark.asyncio
    async def test_toggle_debug_command(self, controller, store):
        store.dispatch(OpenCommandPalette())
        store.dispatch(SetCommandQuery("toggle debug"))
        await controller.execute_selected_command()
        assert store.state.debug_enabled

    @pytest.mark.asyncio
    async def test_quit_returned_to_host(self, controller, store):
        store.dispatch(OpenCommandPalette())
        store.dispatch(SetCommandQuery("exit the application"))
        assert await controller.execute_selected_command() is AppAction.QUIT

    @pytest.mark.asyncio
    async def test_closed_palette_runs_nothing(self, controller):
        assert await controller.execute_selected_command() is None

    @pytest.mark.asyncio
    async def test_columns_command_opens_picker(self, controller, store):
        await controller.start()
        await controller.run_action(AppAction.COLUMNS)
        assert store.state.column_picker.is_open
        assert store.state.column_picker.entity_key == "object-companies"


class TestWebhooks:
    """Tests for webhook create, edit and delete."""

    def _webhook(self):
        return make_item(
            "wh-1",
            "https://example.com/hook",
            ResultType.WEBHOOKS,
            data={
                "id": "wh-1",
                "target_url": "https://example.com/hook",
                "subscriptions": [{"event_type": "record.created", "filter": None}],
            },
        )

    @pytest.mark.asyncio
    async def test_edit_requires_selected_webhook(self, controller, store):
        controller.open_webhook_modal(WebhookOperation.EDIT)
        assert store.state.webhook_modal.mode is WebhookModalMode.CLOSED
        assert controller.status.current.tone is StatusTone.ERROR

    @pytest.mark.asyncio
    async def test_edit_prefills_from_selection(self, controller, store):
        store.dispatch(SetResults((self._webhook(),)))
        controller.open_webhook_modal(WebhookOperation.EDIT)
        modal = store.state.webhook_modal
        assert modal.mode is WebhookModalMode.EDIT
        assert modal.webhook_id == "wh-1"
        assert modal.selected_events == ("record.created",)

    @pytest.mark.asyncio
    async def test_delete_then_refresh(self, controller, store, data):
        data.fetch_page.return_value = Page([self._webhook()], None)
        await controller.select_category(category_index(CategoryType.WEBHOOKS))
        controller.open_webhook_modal(WebhookOperation.DELETE)
        assert store.state.webhook_modal.mode is WebhookModalMode.CONFIRM_DELETE

        assert await controller.submit_webhook()
        data.delete_webhook.assert_awaited_once_with("wh-1")
        assert store.state.webhook_modal.mode is WebhookModalMode.CLOSED
        assert data.fetch_page.await_count == 2

    @pytest.mark.asyncio
    async def test_failure_keeps_modal_open(self, controller, store, data):
        controller.open_webhook_modal(WebhookOperation.CREATE)
        data.create_webhook.side_effect = ApiError("Invalid target", status=400)
        assert not await controller.submit_webhook()
        assert store.state.webhook_modal.mode is WebhookModalMode.CREATE
        assert "Invalid target" in controller.status.current.text


class TestSelectionActions:
    """Tests for copy, open and export."""

    @pytest.mark.asyncio
    async def test_copy_id(self, controller):
        await controller.start()
        with patch("attio_tui.state.controller.write_to_clipboard") as clip:
            controller.copy_id()
        clip.assert_called_once_with("rec-0")
        assert controller.status.current.text == "Copied rec-0"

    @pytest.mark.asyncio
    async def test_copy_failure_is_status_message(self, controller, clock):
        await controller.start()
        with patch(
            "attio_tui.state.controller.write_to_clipboard",
            side_effect=CommandError("xclip is not installed", command="xclip"),
        ):
            controller.copy_id()
        assert controller.status.current.tone is StatusTone.ERROR
        clock.now += 60
        assert controller.status.current is None

    def test_browser_url_prefers_web_url(self, controller):
        assert controller.browser_url(make_item(data={"web_url": "https://app.attio.com/x/1"})) == (
            "https://app.attio.com/x/1"
        )
        assert controller.browser_url(make_item(data={})) == "https://app.attio.com"

    @pytest.mark.asyncio
    async def test_export_selected_item(self, controller, store, tmp_path):
        data = {"id": "rec-9", "values": {"name": [{"value": "Acme"}]}}
        store.dispatch(SetResults((make_item("rec-9", data=data),)))
        path = controller.export_json()
        assert path.parent == tmp_path / "exports"
        assert json.loads(path.read_text()) == data

    def test_export_without_selection(self, controller):
        assert controller.export_json() is None
        assert controller.status.current.tone is StatusTone.ERROR

    @pytest.mark.asyncio
    async def test_export_debug_bug_report(self, controller, tmp_path):
        await controller.start()
        path = controller.export_debug(frame="\x1b[1mhello\x1b[0m")
        report = json.loads(path.read_text())
        assert path.parent == tmp_path / "debug"
        assert report["frame"] == "hello"
        assert report["actionHistory"]

    @pytest.mark.asyncio
    async def test_export_debug_command_captures_frame(self, controller, store):
        controller.frame_provider = MagicMock(return_value="\x1b[2Jscreen")
        await controller.start()
        assert await controller.run_action(AppAction.EXPORT_DEBUG) is None

        path, = controller.debug_dir.glob("bug-report-*.json")
        assert json.loads(path.read_text())["frame"] == "screen"
        controller.frame_provider.assert_called_once_with()


class TestColumns:
    def test_set_columns_persists(self, controller, tmp_path):
        assert controller.set_columns("notes", [ColumnConfig("title")])
        saved = json.loads((tmp_path / "columns.json").read_text())
        assert saved["notes"] == [{"attribute": "title"}]

    def test_set_columns_failure(self, controller):
        with patch.object(controller.columns_store, "set_for_entity", side_effect=OSError("read-only")):
            assert not controller.set_columns("notes", [ColumnConfig("title")])
        assert controller.status.current.tone is StatusTone.ERROR


def test_debug_summary(store, data):
    controller = NavigationController(store, data)
    assert controller.debug_summary() == {"requests": 0, "actions": 0, "generation": 0}
    assert isinstance(controller.state, AppState)
