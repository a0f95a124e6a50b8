"""
Textual application shell.

The app owns the store and controller, renders every pane from
``store.state`` whenever it changes, and translates keys into store
events or controller calls. Modals are opened and closed to mirror the
modal flags in the state.
"""

import logging
import time
from typing import Any, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Key
from textual.screen import ModalScreen, Screen
from textual.widgets import Static

from ..config.columns_store import ColumnsStore
from ..config.settings import AppConfig, save_config
from ..models.commands import AppAction
from ..models.navigation import DETAIL_TABS, AppState, PaneId, WebhookModalMode
from ..services.client import AttioClient
from ..services.fetchers import DataService
from ..services.request_log import RequestLog
from ..state.app_state import (
    FocusNextPane,
    FocusPane,
    FocusPreviousPane,
    NavigateTab,
    OpenCommandPalette,
    ToggleDebug,
)
from ..state.controller import NavigationController
from ..state.status import TemporaryStatus
from ..state.store import AppStore
from ..utils.columns import resolve_columns_for_state
from .column_picker import ColumnPickerScreen
from .command_palette.palette_screen import CommandPaletteScreen
from .detail_views import render_detail
from .keybindings import PAGE_SIZE, KeyAction, find_key_action
from .modals import ApiKeyScreen, FindScreen, HelpScreen, WebhookDeleteScreen, WebhookFormScreen
from .panes import render_debug_panel, render_navigator, render_results, render_status_bar, results_title

logger = logging.getLogger(__name__)

_PANE_IDS = {
    PaneId.NAVIGATOR: "navigator-pane",
    PaneId.RESULTS: "results-pane",
    PaneId.DETAIL: "detail-pane",
}


class Pane(VerticalScroll, can_focus=False):
    """Scrollable pane that never takes focus; the screen handles every key."""


class MainScreen(Screen, inherit_bindings=False):
    """The three-pane screen; every key goes through the keybinding tables."""

    def compose(self) -> ComposeResult:
        with Horizontal(id="panes"):
            with Pane(id="navigator-pane", classes="pane"):
                yield Static(id="navigator")
            with Pane(id="results-pane", classes="pane"):
                yield Static(id="results")
            with Vertical(id="detail-pane", classes="pane"):
                yield Static(id="detail-tabs")
                with Pane(id="detail-scroll"):
                    yield Static(id="detail")
        yield Static(id="debug-panel")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        self.app.refresh_view()  # type: ignore[attr-defined]

    def on_key(self, event: Key) -> None:
        app: AttioApp = self.app  # type: ignore[assignment]
        state = app.store.state
        action = find_key_action(event.key, state.focused_pane, state.command_palette.is_open)
        if action is None:
            return
        event.stop()
        event.prevent_default()
        app.handle_key_action(action)


class AttioApp(App):
    """Three-pane browser for an Attio workspace."""

    TITLE = "attio-tui"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #panes {
        height: 1fr;
    }

    .pane {
        border: round $primary-darken-2;
        padding: 0 1;
    }

    .pane.focused {
        border: round $accent;
    }

    #navigator-pane {
        width: 24;
    }

    #results-pane {
        width: 2fr;
    }

    #detail-pane {
        width: 1fr;
    }

    #detail-tabs {
        height: 1;
    }

    #debug-panel {
        height: auto;
        max-height: 24;
        border: round $warning;
        padding: 0 1;
        display: none;
    }

    #status-bar {
        height: 1;
        background: $surface-darken-1;
        padding: 0 1;
    }
    """

    def __init__(self, config: AppConfig, debug: bool = False, **kwargs: Any):
        super().__init__(**kwargs)
        self.config = config
        self.app_started_at = time.time()
        self.request_log = RequestLog()
        self.store = AppStore(AppState(debug_enabled=debug or config.debug_enabled), request_log=self.request_log)
        self.status = TemporaryStatus()
        self.columns_store = ColumnsStore()
        self.columns_store.load()
        self.client: Optional[AttioClient] = None
        self.controller = self._build_controller(config.api_key)
        self._unsubscribe = self.store.subscribe(lambda state, event: self.refresh_view())

    def _build_controller(self, api_key: Optional[str]) -> NavigationController:
        if api_key:
            self.client = AttioClient(api_key, base_url=self.config.base_url)
        data = DataService(self.client, self.request_log) if self.client else None
        return NavigationController(
            self.store,
            data,  # type: ignore[arg-type]
            columns_store=self.columns_store,
            status=self.status,
            app_started_at=self.app_started_at,
            frame_provider=self.capture_frame,
        )

    def capture_frame(self) -> str:
        """The current screen as an SVG screenshot, for bug reports."""
        return self.export_screenshot()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def on_mount(self) -> None:
        self.push_screen(MainScreen())
        self.set_interval(0.5, self.refresh_status_bar)
        if self.client is None:
            self.push_screen(ApiKeyScreen(), callback=self._on_api_key)
        else:
            self.run_worker(self.controller.start(), exclusive=True, group="load")
        self.refresh_view()

    def _on_api_key(self, api_key: Optional[str]) -> None:
        if not api_key:
            return
        self.config = self.config.with_api_key(api_key)
        path = save_config(self.config)
        logger.info("Saved API key to %s", path)
        self.controller = self._build_controller(api_key)
        self.run_worker(self.controller.start(), exclusive=True, group="load")

    async def on_unmount(self) -> None:
        self._unsubscribe()
        if self.client is not None:
            await self.client.close()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _main(self) -> Optional[MainScreen]:
        for screen in self.screen_stack:
            if isinstance(screen, MainScreen):
                return screen
        return None

    def refresh_view(self) -> None:
        main = self._main()
        if main is None or not main.is_mounted:
            return
        state = self.store.state

        for pane, widget_id in _PANE_IDS.items():
            main.query_one(f"#{widget_id}").set_class(state.focused_pane is pane, "focused")

        main.query_one("#navigator-pane").border_title = "Navigator"
        main.query_one("#navigator", Static).update(render_navigator(state))

        columns = resolve_columns_for_state(state, self.columns_store.columns)
        main.query_one("#results-pane").border_title = results_title(state)
        main.query_one("#results", Static).update(render_results(state, columns))

        tabs = Text()
        for tab in DETAIL_TABS:
            style = "bold reverse" if tab is state.detail.active_tab else "dim"
            tabs.append(f" {tab.value.capitalize()} ", style=style)
        main.query_one("#detail-pane").border_title = "Detail"
        main.query_one("#detail-tabs", Static).update(tabs)
        main.query_one("#detail", Static).update(
            render_detail(state.detail.active_tab, state.detail.item, state.selected_category)
        )

        debug_panel = main.query_one("#debug-panel", Static)
        debug_panel.display = state.debug_enabled
        if state.debug_enabled:
            debug_panel.update(render_debug_panel(state, self.request_log.entries(), self.app_started_at))

        self.refresh_status_bar()
        self._sync_modals(state)

    def refresh_status_bar(self) -> None:
        main = self._main()
        if main is None or not main.is_mounted:
            return
        main.query_one("#status-bar", Static).update(render_status_bar(self.store.state, self.status.current))

    def _sync_modals(self, state: AppState) -> None:
        """Push the modal the state asks for when it is not already on screen."""
        if isinstance(self.screen, ModalScreen):
            return
        if state.command_palette.is_open:
            self.push_screen(CommandPaletteScreen())
        elif state.webhook_modal.is_form:
            self.push_screen(WebhookFormScreen(), callback=self._after_modal)
        elif state.webhook_modal.mode is WebhookModalMode.CONFIRM_DELETE:
            self.push_screen(WebhookDeleteScreen(), callback=self._after_modal)
        elif state.column_picker.is_open and state.column_picker.entity_key:
            picker = ColumnPickerScreen(state.column_picker.entity_key, state.column_picker.title)
            self.push_screen(picker, callback=self._after_modal)

    def _after_modal(self, result: Any = None) -> None:
        self.refresh_view()

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def _spawn(self, work: Any) -> None:
        self.run_worker(work, group="nav")

    def handle_key_action(self, action: KeyAction) -> None:
        state = self.store.state
        pane = state.focused_pane
        controller = self.controller

        if action is KeyAction.NEXT_PANE:
            self.store.dispatch(FocusNextPane())
        elif action is KeyAction.PREVIOUS_PANE or action is KeyAction.MOVE_LEFT:
            self.store.dispatch(FocusPreviousPane())
        elif action is KeyAction.FOCUS_NAVIGATOR:
            self.store.dispatch(FocusPane(PaneId.NAVIGATOR))
        elif action is KeyAction.FOCUS_RESULTS:
            self.store.dispatch(FocusPane(PaneId.RESULTS))
        elif action is KeyAction.FOCUS_DETAIL:
            self.store.dispatch(FocusPane(PaneId.DETAIL))
        elif action is KeyAction.MOVE_RIGHT:
            if pane is PaneId.NAVIGATOR:
                self.store.dispatch(FocusPane(PaneId.RESULTS))
            elif pane is PaneId.RESULTS:
                self.store.dispatch(FocusPane(PaneId.DETAIL))
        elif action in (KeyAction.MOVE_UP, KeyAction.MOVE_DOWN):
            self._move(pane, -1 if action is KeyAction.MOVE_UP else 1)
        elif action in (KeyAction.PAGE_UP, KeyAction.PAGE_DOWN):
            self._move(pane, -PAGE_SIZE if action is KeyAction.PAGE_UP else PAGE_SIZE)
        elif action in (KeyAction.JUMP_TO_TOP, KeyAction.JUMP_TO_BOTTOM):
            self._jump(pane, action is KeyAction.JUMP_TO_TOP)
        elif action is KeyAction.NEXT_TAB:
            self.store.dispatch(NavigateTab(1))
        elif action is KeyAction.PREVIOUS_TAB:
            self.store.dispatch(NavigateTab(-1))
        elif action is KeyAction.SELECT_ITEM:
            if pane is PaneId.NAVIGATOR:
                self.store.dispatch(FocusPane(PaneId.RESULTS))
            elif pane is PaneId.RESULTS:
                self._spawn(controller.activate_selected())
        elif action is KeyAction.GO_BACK:
            self._spawn(self._go_back())
        elif action is KeyAction.FIND:
            self.push_screen(FindScreen(state.results.search_query), callback=self._on_find)
        elif action is KeyAction.OPEN_COMMAND_PALETTE:
            self.store.dispatch(OpenCommandPalette())
        elif action is KeyAction.COPY_ID:
            controller.copy_id()
            self.refresh_status_bar()
        elif action is KeyAction.OPEN_IN_BROWSER:
            controller.open_in_browser()
            self.refresh_status_bar()
        elif action is KeyAction.REFRESH:
            self._spawn(controller.refresh())
        elif action is KeyAction.TOGGLE_DEBUG:
            self.store.dispatch(ToggleDebug())
        elif action is KeyAction.TOGGLE_HELP:
            self.push_screen(HelpScreen())
        elif action is KeyAction.QUIT:
            self.exit()

    def _on_find(self, query: Optional[str]) -> None:
        if query is not None:
            self._spawn(self._find(query))

    async def _find(self, query: str) -> None:
        await self.controller.find_in_results(query)
        self.refresh_status_bar()

    def _move(self, pane: PaneId, delta: int) -> None:
        if pane is PaneId.NAVIGATOR:
            self._spawn(self.controller.navigate_category(delta))
        elif pane is PaneId.RESULTS:
            self._spawn(self.controller.navigate_result(delta))
        else:
            main = self._main()
            if main is not None:
                main.query_one("#detail-scroll", Pane).scroll_relative(y=delta)

    def _jump(self, pane: PaneId, to_top: bool) -> None:
        state = self.store.state
        if pane is PaneId.NAVIGATOR and state.navigator.categories:
            index = 0 if to_top else len(state.navigator.categories) - 1
            self._spawn(self.controller.select_category(index))
        elif pane is PaneId.RESULTS and state.results.items:
            index = 0 if to_top else len(state.results.items) - 1
            self._spawn(self.controller.select_result(index))

    async def _go_back(self) -> None:
        if not await self.controller.go_back() and self.store.state.focused_pane is PaneId.RESULTS:
            self.store.dispatch(FocusPane(PaneId.NAVIGATOR))

    async def run_selected_command(self) -> None:
        action = await self.controller.execute_selected_command()
        if action is AppAction.QUIT:
            self.exit()
        elif action is AppAction.HELP:
            self.push_screen(HelpScreen())
        self.refresh_view()
