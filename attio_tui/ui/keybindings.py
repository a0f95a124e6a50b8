"""
Keybinding tables.

Keys use Textual's key names (``event.key``). Bindings are grouped by the
context they apply in; lookup checks the most specific context first so
the palette and the focused pane can shadow global keys.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.navigation import PaneId

# Rows moved by page up / page down
PAGE_SIZE = 10


class KeyAction(str, Enum):
    # Navigation
    MOVE_UP = "moveUp"
    MOVE_DOWN = "moveDown"
    MOVE_LEFT = "moveLeft"
    MOVE_RIGHT = "moveRight"
    PAGE_UP = "pageUp"
    PAGE_DOWN = "pageDown"
    JUMP_TO_TOP = "jumpToTop"
    JUMP_TO_BOTTOM = "jumpToBottom"
    SELECT_ITEM = "selectItem"
    GO_BACK = "goBack"
    FIND = "find"
    # Pane focus
    NEXT_PANE = "nextPane"
    PREVIOUS_PANE = "previousPane"
    FOCUS_NAVIGATOR = "focusNavigator"
    FOCUS_RESULTS = "focusResults"
    FOCUS_DETAIL = "focusDetail"
    # Detail tabs
    NEXT_TAB = "nextTab"
    PREVIOUS_TAB = "previousTab"
    # Command palette
    OPEN_COMMAND_PALETTE = "openCommandPalette"
    CLOSE_COMMAND_PALETTE = "closeCommandPalette"
    # Actions
    COPY_ID = "copyId"
    OPEN_IN_BROWSER = "openInBrowser"
    REFRESH = "refresh"
    TOGGLE_DEBUG = "toggleDebug"
    TOGGLE_HELP = "toggleHelp"
    # App
    QUIT = "quit"


class Context(Enum):
    GLOBAL = "global"
    LIST = "list"  # navigator or results pane focused
    DETAIL = "detail"
    PALETTE = "palette"


@dataclass(frozen=True)
class KeyBinding:
    key: str
    action: KeyAction
    description: str = ""


GLOBAL_KEYBINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding("tab", KeyAction.NEXT_PANE, "Next pane"),
    KeyBinding("shift+tab", KeyAction.PREVIOUS_PANE, "Previous pane"),
    KeyBinding("1", KeyAction.FOCUS_NAVIGATOR, "Focus navigator"),
    KeyBinding("2", KeyAction.FOCUS_RESULTS, "Focus results"),
    KeyBinding("3", KeyAction.FOCUS_DETAIL, "Focus detail"),
    KeyBinding("colon", KeyAction.OPEN_COMMAND_PALETTE, "Command palette"),
    KeyBinding("ctrl+p", KeyAction.OPEN_COMMAND_PALETTE, "Command palette"),
    KeyBinding("y", KeyAction.COPY_ID, "Copy ID"),
    KeyBinding("ctrl+o", KeyAction.OPEN_IN_BROWSER, "Open in browser"),
    KeyBinding("ctrl+r", KeyAction.REFRESH, "Refresh"),
    KeyBinding("ctrl+d", KeyAction.TOGGLE_DEBUG, "Toggle debug panel"),
    KeyBinding("question_mark", KeyAction.TOGGLE_HELP, "Help"),
    KeyBinding("q", KeyAction.QUIT, "Quit"),
)

LIST_KEYBINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding("j", KeyAction.MOVE_DOWN, "Down"),
    KeyBinding("k", KeyAction.MOVE_UP, "Up"),
    KeyBinding("h", KeyAction.MOVE_LEFT, "Previous pane"),
    KeyBinding("l", KeyAction.MOVE_RIGHT, "Next pane"),
    KeyBinding("down", KeyAction.MOVE_DOWN, "Down"),
    KeyBinding("up", KeyAction.MOVE_UP, "Up"),
    KeyBinding("left", KeyAction.MOVE_LEFT, "Previous pane"),
    KeyBinding("right", KeyAction.MOVE_RIGHT, "Next pane"),
    KeyBinding("pageup", KeyAction.PAGE_UP, "Page up"),
    KeyBinding("pagedown", KeyAction.PAGE_DOWN, "Page down"),
    KeyBinding("g", KeyAction.JUMP_TO_TOP, "Top"),
    KeyBinding("G", KeyAction.JUMP_TO_BOTTOM, "Bottom"),
    KeyBinding("home", KeyAction.JUMP_TO_TOP, "Top"),
    KeyBinding("end", KeyAction.JUMP_TO_BOTTOM, "Bottom"),
    KeyBinding("enter", KeyAction.SELECT_ITEM, "Open"),
    KeyBinding("space", KeyAction.SELECT_ITEM, "Open"),
    KeyBinding("backspace", KeyAction.GO_BACK, "Back"),
    KeyBinding("slash", KeyAction.FIND, "Find in results"),
)

DETAIL_KEYBINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding("h", KeyAction.PREVIOUS_TAB, "Previous tab"),
    KeyBinding("l", KeyAction.NEXT_TAB, "Next tab"),
    KeyBinding("left", KeyAction.PREVIOUS_TAB, "Previous tab"),
    KeyBinding("right", KeyAction.NEXT_TAB, "Next tab"),
    KeyBinding("j", KeyAction.MOVE_DOWN, "Scroll down"),
    KeyBinding("k", KeyAction.MOVE_UP, "Scroll up"),
    KeyBinding("down", KeyAction.MOVE_DOWN, "Scroll down"),
    KeyBinding("up", KeyAction.MOVE_UP, "Scroll up"),
    KeyBinding("backspace", KeyAction.GO_BACK, "Back"),
)

PALETTE_KEYBINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding("down", KeyAction.MOVE_DOWN, "Next command"),
    KeyBinding("up", KeyAction.MOVE_UP, "Previous command"),
    KeyBinding("ctrl+j", KeyAction.MOVE_DOWN, "Next command"),
    KeyBinding("ctrl+k", KeyAction.MOVE_UP, "Previous command"),
    KeyBinding("enter", KeyAction.SELECT_ITEM, "Run command"),
    KeyBinding("escape", KeyAction.CLOSE_COMMAND_PALETTE, "Close"),
)

KEYBINDINGS: dict[Context, tuple[KeyBinding, ...]] = {
    Context.GLOBAL: GLOBAL_KEYBINDINGS,
    Context.LIST: LIST_KEYBINDINGS,
    Context.DETAIL: DETAIL_KEYBINDINGS,
    Context.PALETTE: PALETTE_KEYBINDINGS,
}


def active_contexts(focused_pane: PaneId, palette_open: bool) -> list[Context]:
    """Contexts to search, most specific first.

    An open palette captures the keyboard: global keys are not consulted
    so typing 'q' into the query does not quit.
    """
    if palette_open:
        return [Context.PALETTE]
    pane_context = Context.DETAIL if focused_pane is PaneId.DETAIL else Context.LIST
    return [pane_context, Context.GLOBAL]


def find_key_action(key: str, focused_pane: PaneId, palette_open: bool = False) -> Optional[KeyAction]:
    """The action bound to ``key`` in the current context, if any."""
    for context in active_contexts(focused_pane, palette_open):
        for binding in KEYBINDINGS[context]:
            if binding.key == key:
                return binding.action
    return None


def help_rows() -> list[tuple[str, str, str]]:
    """(context, key, description) rows for the help overlay, first binding per action."""
    rows = []
    for context in (Context.GLOBAL, Context.LIST, Context.DETAIL, Context.PALETTE):
        seen: set[KeyAction] = set()
        for binding in KEYBINDINGS[context]:
            if binding.action in seen:
                continue
            seen.add(binding.action)
            rows.append((context.value, binding.key, binding.description))
    return rows
