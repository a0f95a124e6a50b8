"""Tests for the command registry and palette filtering."""

import pytest

from attio_tui.config.constants import COMMAND_PALETTE_MAX_VISIBLE
from attio_tui.models.commands import AppAction, Command, CommandAction, CommandActionKind
from attio_tui.models.navigation import DEFAULT_CATEGORIES, AppState
from attio_tui.state.app_state import (
    NavigateCommand,
    OpenCommandPalette,
    SetCommandQuery,
    app_reducer,
)
from attio_tui.ui.command_palette.palette_commands import (
    CommandRegistry,
    clamp_command_index,
    filter_commands,
    get_command_registry,
    visible_commands,
)


@pytest.fixture
def registry():
    return CommandRegistry()


class TestCommandRegistry:
    """Tests for the built-in command catalogue."""

    def test_ids_unique(self, registry):
        ids = [command.id for command in registry.get_all()]
        assert len(ids) == len(set(ids))

    def test_navigate_targets_exist(self, registry):
        keys = {category.key for category in DEFAULT_CATEGORIES}
        for command in registry.get_all():
            if command.action.kind is CommandActionKind.NAVIGATE:
                assert command.action.target in keys, command.id

    def test_fire_targets_are_app_actions(self, registry):
        for command in registry.get_all():
            if command.action.kind is CommandActionKind.FIRE:
                AppAction(command.action.target)

    def test_register_replaces_by_id(self, registry):
        count = len(registry.get_all())
        registry.register(Command("quit", "Exit", "Leave", CommandAction(CommandActionKind.FIRE, "quit")))
        assert len(registry.get_all()) == count
        assert registry.get("quit").label == "Exit"

    def test_global_registry_is_shared(self):
        assert get_command_registry() is get_command_registry()


class TestFilter:
    """Tests for substring filtering."""

    def test_blank_query_matches_everything(self, registry):
        assert registry.filter("") == registry.get_all()
        assert registry.filter("   ") == registry.get_all()

    def test_case_insensitive_label_match(self, registry):
        assert [c.id for c in registry.filter("COPY")] == ["copy-id"]

    def test_description_match(self, registry):
        ids = [c.id for c in registry.filter("clipboard")]
        assert ids == ["copy-id"]

    def test_catalogue_order_kept(self, registry):
        ids = [c.id for c in registry.filter("go to")]
        assert ids[:2] == ["goto-companies", "goto-people"]

    def test_no_match(self, registry):
        assert registry.filter("zzz-nothing") == []

    def test_visible_is_capped(self):
        assert len(filter_commands("")) > COMMAND_PALETTE_MAX_VISIBLE
        assert len(visible_commands("")) == COMMAND_PALETTE_MAX_VISIBLE


class TestSelectionClamping:
    """Palette selection stays inside the visible list."""

    def test_clamp_command_index(self):
        assert clamp_command_index(99, "") == COMMAND_PALETTE_MAX_VISIBLE - 1
        assert clamp_command_index(-3, "") == 0
        assert clamp_command_index(5, "zzz-nothing") == 0

    def test_query_change_resets_selection(self):
        state = app_reducer(AppState(), OpenCommandPalette())
        state = app_reducer(state, NavigateCommand(3))
        assert state.command_palette.selected_index == 3
        state = app_reducer(state, SetCommandQuery("go"))
        assert state.command_palette.selected_index == 0

    def test_navigation_clamped_to_filtered_length(self):
        state = app_reducer(AppState(), OpenCommandPalette())
        state = app_reducer(state, SetCommandQuery("webhook"))
        filtered = len(visible_commands("webhook"))
        state = app_reducer(state, NavigateCommand(50))
        assert state.command_palette.selected_index == filtered - 1
        state = app_reducer(state, NavigateCommand(-50))
        assert state.command_palette.selected_index == 0
