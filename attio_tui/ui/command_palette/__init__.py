"""
Command palette for attio-tui.

Opened with ':'; filters the command catalogue by substring.
"""

from .palette_commands import (
    CommandRegistry,
    filter_commands,
    get_command_registry,
    visible_commands,
)

__all__ = [
    "CommandRegistry",
    "filter_commands",
    "get_command_registry",
    "visible_commands",
]
