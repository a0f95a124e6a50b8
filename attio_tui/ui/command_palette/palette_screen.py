"""
Command Palette Screen - modal overlay over the three panes.

The query and selection live in the app store; this screen forwards
input to the store and redraws from it.
"""

import logging
from typing import TYPE_CHECKING

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from ...state.app_state import CloseCommandPalette, NavigateCommand, SetCommandQuery
from .palette_commands import filter_commands, visible_commands

if TYPE_CHECKING:
    from ..app import AttioApp

logger = logging.getLogger(__name__)


class CommandPaletteScreen(ModalScreen):
    """Command palette modal overlay."""

    CSS = """
    CommandPaletteScreen {
        align: center top;
        padding-top: 3;
    }

    #palette-container {
        width: 70;
        height: auto;
        max-height: 20;
        background: $surface;
        border: solid $primary;
    }

    #palette-input {
        width: 100%;
        border: none;
        border-bottom: solid $primary-darken-1;
        padding: 0 1;
    }

    #palette-results {
        height: auto;
        padding: 0 1;
    }

    #palette-hints {
        height: 1;
        background: $surface-darken-1;
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Cancel", show=False),
        Binding("enter", "select", "Select", show=False),
        Binding("up", "cursor_up", "Up", show=False),
        Binding("down", "cursor_down", "Down", show=False),
        Binding("ctrl+k", "cursor_up", "Up", show=False),
        Binding("ctrl+j", "cursor_down", "Down", show=False),
    ]

    @property
    def attio_app(self) -> "AttioApp":
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        with Vertical(id="palette-container"):
            yield Input(placeholder="Type a command...", id="palette-input")
            yield Static(id="palette-results")
            yield Static("↑↓ Navigate │ Enter Run │ Esc Close", id="palette-hints")

    def on_mount(self) -> None:
        self.query_one("#palette-input", Input).focus()
        self.refresh_results()

    def refresh_results(self) -> None:
        palette = self.attio_app.store.state.command_palette
        commands = visible_commands(palette.query)
        text = Text()
        if not commands:
            text.append("No matching commands", style="dim")
        for index, command in enumerate(commands):
            selected = index == palette.selected_index
            text.append("› " if selected else "  ", style="bold")
            text.append(command.label, style="bold reverse" if selected else "bold")
            if command.shortcut:
                text.append(f"  {command.shortcut}", style="blue")
            text.append(f"  {command.description}\n", style="dim")
        hidden = len(filter_commands(palette.query)) - len(commands)
        if hidden > 0:
            text.append(f"  ...{hidden} more", style="dim italic")
        self.query_one("#palette-results", Static).update(text)

    def on_input_changed(self, event: Input.Changed) -> None:
        self.attio_app.store.dispatch(SetCommandQuery(event.value))
        self.refresh_results()

    def action_cursor_up(self) -> None:
        self.attio_app.store.dispatch(NavigateCommand(-1))
        self.refresh_results()

    def action_cursor_down(self) -> None:
        self.attio_app.store.dispatch(NavigateCommand(1))
        self.refresh_results()

    def action_select(self) -> None:
        self.dismiss()
        self.attio_app.run_worker(self.attio_app.run_selected_command())

    def action_close(self) -> None:
        self.attio_app.store.dispatch(CloseCommandPalette())
        self.dismiss()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_select()
