"""
Navigation controller.

The reducer only describes state; this module performs the work the state
asks for. It starts fetches and schema probes, then reports outcomes back
to the store as events. Every async operation captures
``results.generation`` when it starts and passes it along with its
completion, so the reducer can drop answers for a view the user has
already left.
"""

import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Optional

from ..config.columns_store import ColumnsStore
from ..config.constants import APP_BASE_URL, LOAD_MORE_COOLDOWN_SECONDS, PREFETCH_THRESHOLD, get_config_dir
from ..exceptions import NetworkError, PlatformError
from ..models.columns import ColumnConfig, get_entity_key
from ..models.commands import AppAction, Command, CommandActionKind, ToggleFlag, WebhookOperation
from ..models.navigation import (
    AppState,
    CategoryType,
    ListDrillLevel,
    ObjectDrillLevel,
    PaneId,
    ResultItem,
    ResultType,
    WebhookModalMode,
)
from ..services.fetchers import DataService, DrillContext
from ..ui.command_palette.palette_commands import visible_commands
from ..utils.clipboard import open_browser, write_to_clipboard
from ..utils.error_messages import extract_error_message
from ..utils.export import export_bug_report, export_item, export_state_snapshot, safe_timestamp
from .app_state import (
    AppendResults,
    CloseWebhookModal,
    FocusPane,
    ListDrillBack,
    ListDrillIntoEntries,
    ListDrillIntoStatuses,
    NavigateCategory,
    NavigateResult,
    ObjectDrillBack,
    ObjectDrillIntoRecords,
    OpenColumnPicker,
    OpenWebhookCreate,
    OpenWebhookDelete,
    OpenWebhookEdit,
    RefreshResults,
    ResultsFailed,
    SelectCategory,
    SelectCommand,
    SelectResult,
    SetResults,
    SetSearchQuery,
    ToggleDebug,
)
from .status import TemporaryStatus
from .store import AppStore

logger = logging.getLogger(__name__)


def find_match(items: Sequence[ResultItem], query: str, start: int = 0) -> Optional[int]:
    """Index of the first item at or after ``start`` (wrapping) matching ``query``, case-insensitively."""
    needle = query.casefold()
    count = len(items)
    for offset in range(count):
        index = (start + offset) % count
        item = items[index]
        if needle in item.title.casefold() or needle in (item.subtitle or "").casefold():
            return index
    return None



class NavigationController:
    """Runs the side effects of navigation against an :class:`AppStore`.

    Operations that only change state are plain ``store.dispatch`` calls
    and are not wrapped here.
    """

    def __init__(
        self,
        store: AppStore,
        data: DataService,
        *,
        columns_store: Optional[ColumnsStore] = None,
        status: Optional[TemporaryStatus] = None,
        clock: Callable[[], float] = time.monotonic,
        export_dir: Optional[Path] = None,
        debug_dir: Optional[Path] = None,
        app_started_at: Optional[float] = None,
        frame_provider: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self.data = data
        self.columns_store = columns_store or ColumnsStore()
        self.status = status or TemporaryStatus(clock=clock)
        self._clock = clock
        self.export_dir = export_dir
        self.debug_dir = debug_dir
        self.app_started_at = app_started_at or time.time()
        self.frame_provider = frame_provider

        self._load_more_in_flight = False
        self._cooldown_until = 0.0
        # List-drill schema probe
        self._probe_token = 0
        self._probing_list_id: Optional[str] = None

    @property
    def state(self) -> AppState:
        return self.store.state

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load_results(self, *, preserve_selection: bool = False) -> None:
        """Fetch the first page for the current view."""
        context = DrillContext.from_state(self.state)
        if context is None:
            return
        generation = self.state.results.generation
        try:
            page = await self.data.fetch_page(context)
        except NetworkError as e:
            self._start_cooldown()
            self.store.dispatch(ResultsFailed(extract_error_message(e), generation=generation))
            return
        self.store.dispatch(
            SetResults(
                tuple(page.items),
                has_next_page=page.has_more,
                next_cursor=page.next_cursor,
                generation=generation,
                preserve_selection=preserve_selection,
            )
        )

    async def refresh(self) -> None:
        self.store.dispatch(RefreshResults())
        await self.load_results(preserve_selection=True)
        if self.state.results.error:
            self.status.error(f"Refresh failed: {self.state.results.error}")

    async def load_more(self) -> bool:
        """Append the next page; returns False when nothing was requested."""
        results = self.state.results
        if (
            not results.has_next_page
            or not results.next_cursor
            or results.loading
            or self._load_more_in_flight
            or self._clock() < self._cooldown_until
        ):
            return False
        context = DrillContext.from_state(self.state)
        if context is None:
            return False

        generation = results.generation
        self._load_more_in_flight = True
        try:
            page = await self.data.fetch_page(context, results.next_cursor)
        except NetworkError as e:
            self._start_cooldown()
            self.store.dispatch(ResultsFailed(extract_error_message(e), generation=generation))
            return True
        finally:
            self._load_more_in_flight = False
        self.store.dispatch(
            AppendResults(
                tuple(page.items),
                has_next_page=page.has_more,
                next_cursor=page.next_cursor,
                generation=generation,
            )
        )
        return True

    async def check_prefetch(self) -> None:
        """Load the next page once the selection is near the end."""
        results = self.state.results
        remaining = len(results.items) - results.selected_index - 1
        if remaining <= PREFETCH_THRESHOLD:
            await self.load_more()

    def _start_cooldown(self) -> None:
        self._cooldown_until = self._clock() + LOAD_MORE_COOLDOWN_SECONDS

    def _reset_paging(self) -> None:
        self._cooldown_until = 0.0
        self._load_more_in_flight = False

    def _cancel_schema_lookup(self) -> None:
        """Leaving the list view drops any outstanding status-attribute lookup."""
        self._probe_token += 1
        self._probing_list_id = None

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Load the initially selected category."""
        await self.select_category(self.state.navigator.selected_index)

    async def select_category(self, index: int) -> None:
        before = self.state.results.generation
        self.store.dispatch(SelectCategory(index))
        if self.state.results.generation != before:
            self._cancel_schema_lookup()
            self._reset_paging()
            await self.load_results()

    async def navigate_category(self, delta: int) -> None:
        before = self.state.results.generation
        self.store.dispatch(NavigateCategory(delta))
        if self.state.results.generation != before:
            self._cancel_schema_lookup()
            self._reset_paging()
            await self.load_results()

    async def select_result(self, index: int) -> None:
        self.store.dispatch(SelectResult(index))
        await self.check_prefetch()

    async def navigate_result(self, delta: int) -> None:
        self.store.dispatch(NavigateResult(delta))
        await self.check_prefetch()

    async def find_in_results(self, query: str) -> Optional[int]:
        """
        Select the next loaded row whose title or subtitle contains ``query``.

        The search starts after the current selection and wraps around, so
        repeating the same query steps through every match. An empty query
        clears the search.
        """
        query = query.strip()
        self.store.dispatch(SetSearchQuery(query))
        if not query:
            return None
        results = self.state.results
        index = find_match(results.items, query, results.selected_index + 1)
        if index is None:
            self.status.error(f'No match for "{query}"')
            return None
        self.store.dispatch(FocusPane(PaneId.RESULTS))
        await self.select_result(index)
        return index

    async def activate_selected(self) -> None:
        """Enter on a result: drill where the row supports it, else focus the detail pane."""
        item = self.state.selected_item
        category = self.state.selected_category
        if item is None or category is None:
            return
        if item.type is ResultType.LIST and category.type is CategoryType.LISTS:
            await self.drill_into_list(item.id, item.title)
        elif item.type is ResultType.LIST_STATUS:
            await self.drill_into_status(item)
        elif item.type is ResultType.OBJECT_INFO:
            await self.drill_into_object(item.id, item.title)
        else:
            self.store.dispatch(FocusPane(PaneId.DETAIL))

    async def drill_into_list(self, list_id: str, list_name: str) -> None:
        """
        Probe the list for a status attribute, then drill into its statuses
        or, when it has none (or the probe fails), straight into its entries.

        A second request for the list already being probed is ignored. A
        request for another list supersedes the outstanding probe, whose
        answer is then discarded.
        """
        if self._probing_list_id == list_id:
            logger.debug("Schema probe for %s already running", list_id)
            return
        self._probe_token += 1
        token = self._probe_token
        self._probing_list_id = list_id
        generation = self.state.results.generation

        try:
            attribute = await self.data.probe_schema(list_id)
        except NetworkError as e:
            logger.warning("Schema probe for list %s failed, showing all entries: %s", list_id, e)
            attribute = None
        finally:
            if token == self._probe_token:
                self._probing_list_id = None

        if token != self._probe_token or self.state.results.generation != generation:
            logger.debug("Discarding superseded schema probe for %s", list_id)
            return

        if attribute is not None:
            self.store.dispatch(ListDrillIntoStatuses(list_id, list_name, attribute.slug))
        else:
            self.store.dispatch(ListDrillIntoEntries(list_id, list_name))
        self._reset_paging()
        await self.load_results()

    async def drill_into_status(self, item: ResultItem) -> None:
        drill = self.state.list_drill
        if drill.level is not ListDrillLevel.STATUSES or not drill.list_id:
            return
        self.store.dispatch(
            ListDrillIntoEntries(
                drill.list_id,
                drill.list_name or "",
                status_id=item.id,
                status_title=item.title,
                status_attribute_slug=drill.status_attribute_slug,
            )
        )
        self._reset_paging()
        await self.load_results()

    async def drill_into_object(self, object_slug: str, object_name: str) -> None:
        before = self.state.results.generation
        self.store.dispatch(ObjectDrillIntoRecords(object_slug, object_name))
        if self.state.results.generation != before:
            self._reset_paging()
            await self.load_results()

    async def go_back(self) -> bool:
        """Leave the current drill level; returns False at the top level."""
        category = self.state.selected_category
        if category is None:
            return False
        if category.type is CategoryType.LISTS and self.state.list_drill.level is not ListDrillLevel.LISTS:
            self._cancel_schema_lookup()
            self.store.dispatch(ListDrillBack())
        elif category.type is CategoryType.OBJECTS and self.state.object_drill.level is ObjectDrillLevel.RECORDS:
            self.store.dispatch(ObjectDrillBack())
        else:
            return False
        self._reset_paging()
        await self.load_results()
        return True

    # -------------------------------------------------------------------------
    # Command palette
    # -------------------------------------------------------------------------

    async def execute_selected_command(self) -> Optional[AppAction]:
        palette = self.state.command_palette
        commands = visible_commands(palette.query)
        if not palette.is_open or not commands:
            return None
        command = commands[min(palette.selected_index, len(commands) - 1)]
        self.store.dispatch(SelectCommand())
        return await self.execute_command(command)

    async def execute_command(self, command: Command) -> Optional[AppAction]:
        """
        Run a command.

        Returns the action when it has to be carried out by the host
        (quitting, showing help); everything else is handled here.
        """
        logger.info("Executing command %s", command.id)
        action = command.action
        if action.kind is CommandActionKind.NAVIGATE:
            await self._navigate_to(action.target)
            return None
        if action.kind is CommandActionKind.TOGGLE:
            if action.target == ToggleFlag.DEBUG.value:
                self.store.dispatch(ToggleDebug())
            return None
        if action.kind is CommandActionKind.WEBHOOK:
            self.open_webhook_modal(WebhookOperation(action.target))
            return None
        return await self.run_action(AppAction(action.target))

    async def run_action(self, action: AppAction) -> Optional[AppAction]:
        if action is AppAction.COPY_ID:
            self.copy_id()
        elif action is AppAction.OPEN_IN_BROWSER:
            self.open_in_browser()
        elif action is AppAction.REFRESH:
            await self.refresh()
        elif action is AppAction.EXPORT_JSON:
            self.export_json()
        elif action is AppAction.EXPORT_DEBUG:
            self.export_debug()
        elif action is AppAction.COLUMNS:
            self.open_column_picker()
        else:
            return action
        return None

    async def _navigate_to(self, category_key: str) -> None:
        for index, category in enumerate(self.state.navigator.categories):
            if category.key == category_key:
                await self.select_category(index)
                return
        logger.warning("No navigator category %s", category_key)

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    def open_webhook_modal(self, operation: WebhookOperation) -> None:
        if operation is WebhookOperation.CREATE:
            self.store.dispatch(OpenWebhookCreate())
            return
        item = self.state.selected_item
        if item is None or item.type is not ResultType.WEBHOOKS:
            self.status.error("Select a webhook first")
            return
        if operation is WebhookOperation.EDIT:
            events = tuple(sub["event_type"] for sub in item.data.get("subscriptions", []))
            self.store.dispatch(OpenWebhookEdit(item.id, item.data.get("target_url", item.title), events))
        else:
            self.store.dispatch(OpenWebhookDelete(item.id, item.data.get("target_url", item.title)))

    async def submit_webhook(self) -> bool:
        """Send the open webhook modal to the API; the modal stays open on failure."""
        modal = self.state.webhook_modal
        try:
            if modal.mode is WebhookModalMode.CREATE:
                await self.data.create_webhook(modal.target_url, modal.selected_events)
                message = "Webhook created"
            elif modal.mode is WebhookModalMode.EDIT and modal.webhook_id:
                await self.data.update_webhook(modal.webhook_id, modal.target_url, modal.selected_events)
                message = "Webhook updated"
            elif modal.mode is WebhookModalMode.CONFIRM_DELETE and modal.webhook_id:
                await self.data.delete_webhook(modal.webhook_id)
                message = "Webhook deleted"
            else:
                return False
        except NetworkError as e:
            self.status.error(f"Webhook {modal.mode.value} failed: {extract_error_message(e)}")
            return False

        self.store.dispatch(CloseWebhookModal())
        self.status.info(message)
        category = self.state.selected_category
        if category is not None and category.type is CategoryType.WEBHOOKS:
            await self.refresh()
        return True

    # -------------------------------------------------------------------------
    # Actions on the selection
    # -------------------------------------------------------------------------

    def copy_id(self) -> None:
        item = self.state.selected_item
        if item is None:
            self.status.error("Nothing selected")
            return
        try:
            write_to_clipboard(item.id)
        except PlatformError as e:
            self.status.error(f"Copy failed: {e.message}")
            return
        self.status.info(f"Copied {item.id}")

    def browser_url(self, item: ResultItem) -> str:
        web_url = item.data.get("web_url")
        if isinstance(web_url, str) and web_url:
            return web_url
        return APP_BASE_URL

    def open_in_browser(self) -> None:
        item = self.state.selected_item
        if item is None:
            self.status.error("Nothing selected")
            return
        url = self.browser_url(item)
        try:
            open_browser(url)
        except PlatformError as e:
            self.status.error(f"Open failed: {e.message}")
            return
        self.status.info(f"Opened {url}")

    def export_json(self) -> Optional[Path]:
        """Write the selected item's raw payload to the exports directory."""
        item = self.state.selected_item
        if item is None:
            self.status.error("Nothing to export")
            return None
        directory = self.export_dir or get_config_dir() / "exports"
        path = directory / f"{item.type.value}-{item.id}-{safe_timestamp()}.json"
        try:
            export_item(item, path)
        except OSError as e:
            self.status.error(f"Export failed: {e}")
            return None
        self.status.info(f"Exported {item.title} to {path}")
        return path

    def export_debug(self, frame: Optional[str] = None, *, bug_report: bool = True) -> Optional[Path]:
        """Write a bug report, or a plain state snapshot when ``bug_report`` is False."""
        if frame is None and bug_report and self.frame_provider is not None:
            frame = self.frame_provider()
        requests = self.store.request_log.recent()
        try:
            if bug_report:
                path = export_bug_report(
                    self.state,
                    requests,
                    self.store.action_logger.entries(),
                    frame=frame,
                    app_started_at=self.app_started_at,
                    debug_dir=self.debug_dir,
                )
            else:
                path = export_state_snapshot(
                    self.state, requests, app_started_at=self.app_started_at, debug_dir=self.debug_dir
                )
        except OSError as e:
            self.status.error(f"Debug export failed: {e}")
            return None
        self.status.info(f"Debug snapshot saved to {path}")
        return path

    # -------------------------------------------------------------------------
    # Columns
    # -------------------------------------------------------------------------

    def open_column_picker(self) -> None:
        state = self.state
        entity_key = get_entity_key(state.selected_category, state.object_drill)
        if entity_key is None:
            return
        title = state.selected_category.title if state.selected_category else entity_key
        self.store.dispatch(OpenColumnPicker(entity_key, title))

    def set_columns(self, entity_key: str, columns: Sequence[ColumnConfig]) -> bool:
        try:
            self.columns_store.set_for_entity(entity_key, columns)
        except OSError as e:
            self.status.error(f"Failed to save columns: {e}")
            return False
        self.status.info("Columns saved")
        return True

    def debug_summary(self) -> dict[str, Any]:
        """Counts shown in the debug panel header."""
        return {
            "requests": len(self.store.request_log),
            "actions": len(self.store.action_logger.entries()),
            "generation": self.state.results.generation,
        }
