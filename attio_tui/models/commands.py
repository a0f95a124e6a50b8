"""Command palette command model."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CommandActionKind(str, Enum):
    NAVIGATE = "navigate"  # target: a navigator category key
    FIRE = "action"  # target: an AppAction value
    TOGGLE = "toggle"  # target: a ToggleFlag value
    WEBHOOK = "webhook"  # target: a WebhookOperation value


class AppAction(str, Enum):
    COPY_ID = "copyId"
    OPEN_IN_BROWSER = "openInBrowser"
    REFRESH = "refresh"
    EXPORT_JSON = "exportJson"
    EXPORT_DEBUG = "exportDebug"
    HELP = "help"
    COLUMNS = "columns"
    QUIT = "quit"


class ToggleFlag(str, Enum):
    DEBUG = "debug"


class WebhookOperation(str, Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


@dataclass(frozen=True)
class CommandAction:
    kind: CommandActionKind
    target: str


@dataclass(frozen=True)
class Command:
    """A command that can be executed from the palette."""

    id: str  # e.g. "goto-companies"
    label: str  # "Go to Companies"
    description: str
    action: CommandAction
    shortcut: Optional[str] = None  # Keyboard shortcut hint

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on label or description."""
        needle = query.strip().lower()
        if not needle:
            return True
        return needle in self.label.lower() or needle in self.description.lower()
