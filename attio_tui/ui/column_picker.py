"""Column picker: choose and order the results table columns for an entity."""

import logging
from typing import TYPE_CHECKING, Optional

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, Static

from ..models.columns import ColumnConfig, ColumnDefinition
from ..state.app_state import CloseColumnPicker
from ..utils.columns import get_available_columns, get_columns_config

if TYPE_CHECKING:
    from .app import AttioApp

logger = logging.getLogger(__name__)


class ColumnPickerModel:
    """Selection and order of columns, independent of the screen."""

    def __init__(self, available: tuple[ColumnDefinition, ...], current: tuple[ColumnConfig, ...]):
        self.available = available
        by_attribute = {column.attribute: column for column in current}
        known = {definition.attribute for definition in available}
        # Configured columns keep their order, the rest follow in catalogue order
        ordered = [column.attribute for column in current if column.attribute in known]
        ordered += [d.attribute for d in available if d.attribute not in by_attribute]
        self.order: list[str] = list(dict.fromkeys(ordered))
        self.selected: set[str] = {column.attribute for column in current if column.attribute in known}
        self._configs = by_attribute
        self.cursor = 0

    def move_cursor(self, delta: int) -> None:
        self.cursor = max(0, min(len(self.order) - 1, self.cursor + delta))

    def toggle(self) -> None:
        attribute = self.order[self.cursor]
        if attribute in self.selected:
            self.selected.discard(attribute)
        else:
            self.selected.add(attribute)

    def move_item(self, delta: int) -> None:
        target = self.cursor + delta
        if 0 <= target < len(self.order):
            self.order[self.cursor], self.order[target] = self.order[target], self.order[self.cursor]
            self.cursor = target

    def result(self) -> list[ColumnConfig]:
        return [self._configs.get(a, ColumnConfig(a)) for a in self.order if a in self.selected]

    def label_of(self, attribute: str) -> str:
        for definition in self.available:
            if definition.attribute == attribute:
                return definition.label
        return attribute


class ColumnPickerScreen(ModalScreen):
    CSS = """
    ColumnPickerScreen {
        align: center middle;
    }

    #column-picker {
        width: 60;
        height: auto;
        max-height: 30;
        padding: 1 2;
        border: thick $background 80%;
        background: $surface;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("up,k", "cursor(-1)", "Up"),
        ("down,j", "cursor(1)", "Down"),
        ("K", "move(-1)", "Move up"),
        ("J", "move(1)", "Move down"),
        ("space", "toggle", "Toggle"),
        ("enter", "save", "Save"),
    ]

    def __init__(self, entity_key: str, title: Optional[str] = None):
        super().__init__()
        self.entity_key = entity_key
        self.title_text = title or entity_key
        self.model: Optional[ColumnPickerModel] = None

    @property
    def attio_app(self) -> "AttioApp":
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        with Vertical(id="column-picker"):
            yield Label(f"[bold]Columns: {self.title_text}[/bold]")
            yield Static(id="column-list")
            yield Static("[dim]Space toggle │ J/K reorder │ Enter save │ Esc cancel[/dim]")

    def on_mount(self) -> None:
        columns = self.attio_app.controller.columns_store.columns
        self.model = ColumnPickerModel(
            get_available_columns(self.entity_key), get_columns_config(self.entity_key, columns)
        )
        self.refresh_list()

    def refresh_list(self) -> None:
        if self.model is None:
            return
        text = Text()
        for index, attribute in enumerate(self.model.order):
            box = "[x]" if attribute in self.model.selected else "[ ]"
            style = "reverse" if index == self.model.cursor else ""
            text.append(f"{box} {self.model.label_of(attribute)}", style=style)
            text.append(f"  {attribute}\n", style="dim")
        self.query_one("#column-list", Static).update(text)

    def action_cursor(self, delta: int) -> None:
        if self.model:
            self.model.move_cursor(delta)
            self.refresh_list()

    def action_move(self, delta: int) -> None:
        if self.model:
            self.model.move_item(delta)
            self.refresh_list()

    def action_toggle(self) -> None:
        if self.model:
            self.model.toggle()
            self.refresh_list()

    def action_save(self) -> None:
        if self.model is None:
            return
        columns = self.model.result()
        if not columns:
            self.attio_app.bell()
            return
        self.attio_app.controller.set_columns(self.entity_key, columns)
        self.attio_app.store.dispatch(CloseColumnPicker())
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.attio_app.store.dispatch(CloseColumnPicker())
        self.dismiss(False)
