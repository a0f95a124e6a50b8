"""
Modal screens for the attio-tui app.
"""

import logging
from typing import TYPE_CHECKING

from rich.console import Group
from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Grid, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static

from ..config.settings import validate_api_key
from ..config.webhook_events import ALL_WEBHOOK_EVENTS, WEBHOOK_EVENT_CATEGORIES, get_event_label
from ..exceptions import ValidationError
from ..models.navigation import WebhookFormStep, WebhookModalMode
from ..state.app_state import CloseWebhookModal, WebhookNavigateStep, WebhookSetUrl, WebhookToggleEvent
from .keybindings import help_rows

if TYPE_CHECKING:
    from .app import AttioApp

logger = logging.getLogger(__name__)


def is_valid_webhook_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


class WebhookFormScreen(ModalScreen):
    """Three-step create/edit form: target URL, event subscriptions, review."""

    CSS = """
    WebhookFormScreen {
        align: center middle;
    }

    #webhook-form {
        width: 76;
        height: auto;
        max-height: 36;
        padding: 1 2;
        border: thick $background 80%;
        background: $surface;
    }

    #webhook-url {
        margin: 1 0;
    }

    #webhook-hints {
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("tab", "next_step", "Next"),
        ("shift+tab", "previous_step", "Back"),
        ("up", "cursor_up", "Up"),
        ("down", "cursor_down", "Down"),
        ("space", "toggle_event", "Toggle"),
        ("ctrl+s", "submit", "Save"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.event_cursor = 0

    @property
    def attio_app(self) -> "AttioApp":
        return self.app  # type: ignore[return-value]

    @property
    def modal(self):
        return self.attio_app.store.state.webhook_modal

    def compose(self) -> ComposeResult:
        with Vertical(id="webhook-form"):
            yield Label(id="webhook-title")
            yield Input(value=self.modal.target_url, placeholder="https://example.com/webhook", id="webhook-url")
            yield Static(id="webhook-body")
            yield Static(id="webhook-hints")

    def on_mount(self) -> None:
        self.refresh_form()

    def refresh_form(self) -> None:
        modal = self.modal
        verb = "Create" if modal.mode is WebhookModalMode.CREATE else "Edit"
        step_number = list(WebhookFormStep).index(modal.step) + 1
        self.query_one("#webhook-title", Label).update(
            f"[bold]{verb} Webhook[/bold]  [dim]step {step_number}/3 · {modal.step.value}[/dim]"
        )
        url_input = self.query_one("#webhook-url", Input)
        url_input.display = modal.step is WebhookFormStep.URL
        body = self.query_one("#webhook-body", Static)
        hints = self.query_one("#webhook-hints", Static)

        if modal.step is WebhookFormStep.URL:
            url_input.focus()
            if modal.target_url and not is_valid_webhook_url(modal.target_url):
                body.update(Text("URL should start with http:// or https://", style="yellow"))
            else:
                body.update("")
            hints.update("Enter/Tab next │ Esc cancel")
        elif modal.step is WebhookFormStep.SUBSCRIPTIONS:
            self.focus()
            body.update(self._render_events())
            hints.update("↑↓ move │ Space toggle │ Tab next │ Shift+Tab back │ Esc cancel")
        else:
            self.focus()
            body.update(self._render_review())
            hints.update("Ctrl+S save │ Shift+Tab back │ Esc cancel")

    def _render_events(self) -> Text:
        selected = set(self.modal.selected_events)
        text = Text()
        index = 0
        for category in WEBHOOK_EVENT_CATEGORIES:
            text.append(f"{category.name}\n", style="bold underline")
            for event in category.events:
                cursor = "›" if index == self.event_cursor else " "
                box = "[x]" if event.value in selected else "[ ]"
                style = "reverse" if index == self.event_cursor else ""
                text.append(f"{cursor} {box} {event.label}\n", style=style)
                index += 1
        return text

    def _render_review(self) -> Group:
        modal = self.modal
        grid = Table.grid(padding=(0, 1))
        grid.add_column(style="bold")
        grid.add_column()
        grid.add_row("Target URL:", modal.target_url or "-")
        grid.add_row("Events:", str(len(modal.selected_events)))
        events = Text("\n".join(f"• {get_event_label(e)}" for e in modal.selected_events) or "(none)")
        problems = []
        if not is_valid_webhook_url(modal.target_url):
            problems.append("Target URL must start with http:// or https://")
        if not modal.selected_events:
            problems.append("Select at least one event")
        return Group(grid, events, Text("\n".join(problems), style="red"))

    def on_input_changed(self, event: Input.Changed) -> None:
        self.attio_app.store.dispatch(WebhookSetUrl(event.value.strip()))
        self.refresh_form()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_next_step()

    def action_next_step(self) -> None:
        self.attio_app.store.dispatch(WebhookNavigateStep(1))
        self.refresh_form()

    def action_previous_step(self) -> None:
        self.attio_app.store.dispatch(WebhookNavigateStep(-1))
        self.refresh_form()

    def action_cursor_up(self) -> None:
        self.event_cursor = max(0, self.event_cursor - 1)
        self.refresh_form()

    def action_cursor_down(self) -> None:
        self.event_cursor = min(len(ALL_WEBHOOK_EVENTS) - 1, self.event_cursor + 1)
        self.refresh_form()

    def action_toggle_event(self) -> None:
        if self.modal.step is not WebhookFormStep.SUBSCRIPTIONS:
            return
        self.attio_app.store.dispatch(WebhookToggleEvent(ALL_WEBHOOK_EVENTS[self.event_cursor].value))
        self.refresh_form()

    async def action_submit(self) -> None:
        modal = self.modal
        if modal.step is not WebhookFormStep.REVIEW:
            return
        if not is_valid_webhook_url(modal.target_url) or not modal.selected_events:
            self.attio_app.bell()
            return
        if await self.attio_app.controller.submit_webhook():
            self.dismiss(True)
        else:
            self.attio_app.refresh_view()

    def action_cancel(self) -> None:
        self.attio_app.store.dispatch(CloseWebhookModal())
        self.dismiss(False)


class WebhookDeleteScreen(ModalScreen):
    """Confirmation before deleting a webhook."""

    CSS = """
    WebhookDeleteScreen {
        align: center middle;
    }

    #dialog {
        grid-size: 2;
        grid-gutter: 1 2;
        grid-rows: 1fr 3;
        padding: 0 2;
        width: 70;
        height: 11;
        border: thick $background 80%;
        background: $surface;
    }

    #question {
        column-span: 2;
        height: 3;
        content-align: center middle;
        text-style: bold;
    }

    Button {
        width: 100%;
    }
    """

    BINDINGS = [
        ("y", "confirm_delete", "Yes"),
        ("n", "cancel", "No"),
        ("escape", "cancel", "Cancel"),
    ]

    @property
    def attio_app(self) -> "AttioApp":
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        modal = self.attio_app.store.state.webhook_modal
        with Grid(id="dialog"):
            yield Label(
                f'Delete webhook?\n"{modal.target_url}"\n\n'
                f"[dim]Press [bold]y[/bold] to delete, [bold]n[/bold] to cancel[/dim]",
                id="question",
            )
            yield Button("Cancel (n)", variant="primary", id="cancel")
            yield Button("Delete (y)", variant="error", id="delete")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "delete":
            await self.action_confirm_delete()
        else:
            self.action_cancel()

    async def action_confirm_delete(self) -> None:
        if await self.attio_app.controller.submit_webhook():
            self.dismiss(True)
        else:
            self.attio_app.refresh_view()

    def action_cancel(self) -> None:
        self.attio_app.store.dispatch(CloseWebhookModal())
        self.dismiss(False)


class HelpScreen(ModalScreen):
    """Keyboard shortcut overview."""

    CSS = """
    HelpScreen {
        align: center middle;
    }

    #help {
        width: 70;
        height: auto;
        max-height: 40;
        padding: 1 2;
        border: thick $background 80%;
        background: $surface;
    }
    """

    BINDINGS = [
        ("escape", "close", "Close"),
        ("question_mark", "close", "Close"),
        ("q", "close", "Close"),
    ]

    def compose(self) -> ComposeResult:
        table = Table(title="Keyboard Shortcuts", box=None, header_style="bold")
        table.add_column("Context", style="dim")
        table.add_column("Key", style="bold blue")
        table.add_column("Action")
        for context, key, description in help_rows():
            table.add_row(context, key, description)
        yield Static(table, id="help")

    def action_close(self) -> None:
        self.dismiss()


class ApiKeyScreen(ModalScreen[str]):
    """Prompt for an Attio API key when none is configured."""

    CSS = """
    ApiKeyScreen {
        align: center middle;
    }

    #api-key-form {
        width: 70;
        height: auto;
        padding: 1 2;
        border: thick $background 80%;
        background: $surface;
    }

    #api-key-error {
        color: $error;
    }
    """

    BINDINGS = [("escape", "quit", "Quit")]

    def compose(self) -> ComposeResult:
        with Vertical(id="api-key-form"):
            yield Label("[bold]Welcome to attio-tui[/bold]\nPaste your Attio API key to continue.")
            yield Input(password=True, placeholder="API key", id="api-key")
            yield Static(id="api-key-error")

    def on_mount(self) -> None:
        self.query_one("#api-key", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        try:
            api_key = validate_api_key(event.value)
        except ValidationError as e:
            self.query_one("#api-key-error", Static).update(e.message)
            return
        self.dismiss(api_key)

    def action_quit(self) -> None:
        self.app.exit()


class FindScreen(ModalScreen[str]):
    """Single-line prompt for finding a row in the loaded results."""

    CSS = """
    FindScreen {
        align: center bottom;
    }

    #find-form {
        width: 60;
        height: auto;
        padding: 0 1;
        border: thick $background 80%;
        background: $surface;
    }
    """

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, query: str = "") -> None:
        super().__init__()
        self.initial_query = query

    def compose(self) -> ComposeResult:
        with Vertical(id="find-form"):
            yield Label("Find in results (empty clears)")
            yield Input(value=self.initial_query, placeholder="Search text", id="find-query")

    def on_mount(self) -> None:
        self.query_one("#find-query", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)
