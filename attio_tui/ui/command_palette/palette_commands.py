"""
Command registry for the command palette.

Holds the fixed catalogue of commands and the substring filter the
palette uses. The visible list is capped, and selection is always clamped
into whatever is visible.
"""

import logging

from ...config.constants import COMMAND_PALETTE_MAX_VISIBLE
from ...models.commands import (
    AppAction,
    Command,
    CommandAction,
    CommandActionKind,
    ToggleFlag,
    WebhookOperation,
)

logger = logging.getLogger(__name__)


def _navigate(category_key: str) -> CommandAction:
    return CommandAction(CommandActionKind.NAVIGATE, category_key)


def _fire(action: AppAction) -> CommandAction:
    return CommandAction(CommandActionKind.FIRE, action.value)


class CommandRegistry:
    """Registry of available commands for the palette."""

    def __init__(self):
        self._commands: dict[str, Command] = {}
        self._register_defaults()

    def register(self, command: Command) -> None:
        """Register a command."""
        self._commands[command.id] = command
        logger.debug(f"Registered command: {command.id}")

    def get(self, command_id: str) -> Command | None:
        """Get a command by ID."""
        return self._commands.get(command_id)

    def get_all(self) -> list[Command]:
        """All commands in registration order."""
        return list(self._commands.values())

    def filter(self, query: str) -> list[Command]:
        """Commands whose label or description contains ``query`` (case-insensitive).

        Blank queries match everything. Results keep catalogue order; there
        is no ranking.
        """
        return [command for command in self._commands.values() if command.matches(query)]

    def visible(self, query: str, limit: int = COMMAND_PALETTE_MAX_VISIBLE) -> list[Command]:
        return self.filter(query)[:limit]

    def _register_defaults(self) -> None:
        """Register default commands."""
        # Navigation
        for command_id, label, description, target in (
            ("goto-companies", "Go to Companies", "Navigate to companies list", "object-companies"),
            ("goto-people", "Go to People", "Navigate to people list", "object-people"),
            ("goto-objects", "Go to Objects", "Browse all workspace objects", "objects"),
            ("goto-lists", "Go to Lists", "Navigate to workspace lists", "lists"),
            ("goto-notes", "Go to Notes", "Navigate to notes", "notes"),
            ("goto-tasks", "Go to Tasks", "Navigate to tasks", "tasks"),
            ("goto-meetings", "Go to Meetings", "Navigate to meetings", "meetings"),
            ("goto-webhooks", "Go to Webhooks", "Navigate to webhook management", "webhooks"),
        ):
            self.register(Command(command_id, label, description, _navigate(target)))

        # Actions on the selected item
        self.register(
            Command(
                id="copy-id",
                label="Copy ID",
                description="Copy selected item ID to clipboard",
                action=_fire(AppAction.COPY_ID),
                shortcut="y",
            )
        )
        self.register(
            Command(
                id="open-browser",
                label="Open in Browser",
                description="Open selected item in Attio web app",
                action=_fire(AppAction.OPEN_IN_BROWSER),
                shortcut="Ctrl+O",
            )
        )
        self.register(
            Command(
                id="refresh",
                label="Refresh",
                description="Refresh current data",
                action=_fire(AppAction.REFRESH),
                shortcut="Ctrl+R",
            )
        )
        self.register(
            Command(
                id="export-json",
                label="Export JSON",
                description="Export selected item as JSON file",
                action=_fire(AppAction.EXPORT_JSON),
            )
        )

        # General
        self.register(
            Command(
                id="help",
                label="Help",
                description="Show keyboard shortcuts and help",
                action=_fire(AppAction.HELP),
                shortcut="?",
            )
        )
        self.register(
            Command(
                id="columns",
                label="Columns",
                description="Configure columns for the current results",
                action=_fire(AppAction.COLUMNS),
            )
        )
        self.register(
            Command(
                id="export-debug",
                label="Export Debug Snapshot",
                description="Write UI state and recent requests to a bug report file",
                action=_fire(AppAction.EXPORT_DEBUG),
            )
        )
        self.register(
            Command(
                id="quit",
                label="Quit",
                description="Exit the application",
                action=_fire(AppAction.QUIT),
                shortcut="q",
            )
        )
        self.register(
            Command(
                id="toggle-debug",
                label="Toggle Debug Panel",
                description="Show/hide debug information",
                action=CommandAction(CommandActionKind.TOGGLE, ToggleFlag.DEBUG.value),
                shortcut="Ctrl+D",
            )
        )

        # Webhook management
        for operation, description in (
            (WebhookOperation.CREATE, "Create a new webhook"),
            (WebhookOperation.EDIT, "Edit selected webhook"),
            (WebhookOperation.DELETE, "Delete selected webhook"),
        ):
            self.register(
                Command(
                    id=f"webhook-{operation.value}",
                    label=f"Webhook {operation.value.capitalize()}",
                    description=description,
                    action=CommandAction(CommandActionKind.WEBHOOK, operation.value),
                )
            )


# Global registry instance
_registry: CommandRegistry | None = None


def get_command_registry() -> CommandRegistry:
    """Get the global command registry instance."""
    global _registry
    if _registry is None:
        _registry = CommandRegistry()
    return _registry


def filter_commands(query: str) -> list[Command]:
    return get_command_registry().filter(query)


def visible_commands(query: str) -> list[Command]:
    """The filtered list capped at COMMAND_PALETTE_MAX_VISIBLE."""
    return get_command_registry().visible(query)


def clamp_command_index(index: int, query: str) -> int:
    """Clamp a palette selection into the visible list for ``query``."""
    count = len(visible_commands(query))
    if count == 0:
        return 0
    return max(0, min(index, count - 1))
