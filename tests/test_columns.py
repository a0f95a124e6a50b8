"""Tests for column resolution and the persisted column store."""

import json

import pytest

from attio_tui.config.columns_store import ColumnsStore, parse_columns
from attio_tui.config.default_columns import COLUMN_DEFINITIONS, DEFAULT_COLUMNS
from attio_tui.models.columns import DEFAULT_OBJECT_KEY, ColumnConfig, get_entity_key
from attio_tui.models.navigation import (
    DEFAULT_CATEGORIES,
    AppState,
    CategoryType,
    ListDrillState,
    NavigatorCategory,
    NavigatorState,
    ObjectDrillState,
    ResultType,
)
from attio_tui.utils.columns import (
    get_columns_config,
    resolve_columns,
    resolve_columns_for_state,
    resolve_entity_key,
    title_case,
)

from conftest import make_item


class TestResolveColumns:
    """Tests for resolve_columns."""

    @pytest.mark.parametrize(
        "entity_key",
        list(COLUMN_DEFINITIONS) + ["object-unknown", "list-status", "", None],
    )
    def test_never_empty(self, entity_key):
        assert resolve_columns(entity_key, {}) != []

    def test_defaults_used_without_config(self):
        columns = resolve_columns("tasks", {})
        assert [c.attribute for c in columns] == ["content", "status", "deadlineAt"]

    def test_duplicate_attribute_keeps_first(self):
        config = {
            "object-companies": [
                ColumnConfig("name", "Primary", 12),
                ColumnConfig("name", "Secondary", 40),
            ]
        }
        columns = resolve_columns("object-companies", config)
        assert len(columns) == 1
        assert columns[0].label == "Primary"
        assert columns[0].width == max(12, len("Primary"), 1)

    def test_width_at_least_label_length(self):
        config = {"tasks": [ColumnConfig("content", "A very long label", 3)]}
        assert resolve_columns("tasks", config)[0].width == len("A very long label")

    def test_unknown_attribute_discards_whole_list(self):
        config = {"tasks": [ColumnConfig("status"), ColumnConfig("bogus")]}
        columns = resolve_columns("tasks", config)
        assert [c.attribute for c in columns] == [c.attribute for c in DEFAULT_COLUMNS["tasks"]]

    def test_configured_order_kept(self):
        config = {"notes": [ColumnConfig("createdAt"), ColumnConfig("title")]}
        assert [c.attribute for c in resolve_columns("notes", config)] == ["createdAt", "title"]

    def test_unknown_entity_uses_generic_object_set(self):
        assert resolve_entity_key("object-deals") == DEFAULT_OBJECT_KEY
        assert [c.attribute for c in resolve_columns("object-deals", {})] == ["title", "subtitle", "createdAt"]

    def test_empty_configured_list_falls_back(self):
        assert get_columns_config("notes", {"notes": []}) == DEFAULT_COLUMNS["notes"]

    def test_extractor_reads_record_values(self):
        item = make_item(data={"values": {"name": [{"value": "Acme"}]}})
        name = resolve_columns("object-companies", {})[0]
        assert name.value(item) == "Acme"

    def test_extractor_ignores_other_types(self):
        column = resolve_columns("tasks", {})[0]
        assert column.value(make_item(result_type=ResultType.NOTES)) == "-"


class TestEntityKey:
    """Tests for get_entity_key."""

    def test_object_category(self):
        assert get_entity_key(NavigatorCategory.for_object("people", "People")) == "object-people"

    def test_list_categories_share_key(self):
        assert get_entity_key(NavigatorCategory.for_list("L1", "Deals")) == "list"
        assert get_entity_key(NavigatorCategory(CategoryType.LISTS, "Lists")) == "list"

    def test_objects_drilled_into_records(self):
        category = NavigatorCategory(CategoryType.OBJECTS, "Objects")
        assert get_entity_key(category) == "objects"
        assert get_entity_key(category, ObjectDrillState.records("deals", "Deals")) == "object-deals"

    def test_no_category(self):
        assert get_entity_key(None) is None


class TestResolveColumnsForState:
    """Tests for resolve_columns_for_state."""

    def test_list_entries_use_generic_columns(self):
        lists_index = next(i for i, c in enumerate(DEFAULT_CATEGORIES) if c.type is CategoryType.LISTS)
        state = AppState(
            navigator=NavigatorState(selected_index=lists_index),
            list_drill=ListDrillState.entries("L1", "Deals"),
        )
        assert [c.attribute for c in resolve_columns_for_state(state, {})] == ["title", "subtitle"]

    def test_top_level_lists_use_list_columns(self):
        lists_index = next(i for i, c in enumerate(DEFAULT_CATEGORIES) if c.type is CategoryType.LISTS)
        state = AppState(navigator=NavigatorState(selected_index=lists_index))
        assert [c.attribute for c in resolve_columns_for_state(state, {})] == ["name", "parentObject"]


def test_title_case():
    assert title_case("email_addresses") == "Email Addresses"
    assert title_case("createdAt") == "Created At"


class TestColumnsStore:
    """Tests for loading and saving columns.json."""

    def test_missing_file_gives_defaults(self, tmp_path):
        store = ColumnsStore(tmp_path / "columns.json")
        assert store.load() == DEFAULT_COLUMNS

    def test_stored_lists_merge_over_defaults(self, tmp_path):
        path = tmp_path / "columns.json"
        path.write_text(json.dumps({"tasks": [{"attribute": "status", "label": "State", "width": 9}]}))
        columns = ColumnsStore(path).load()
        assert columns["tasks"] == (ColumnConfig("status", "State", 9),)
        assert columns["notes"] == DEFAULT_COLUMNS["notes"]

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            json.dumps([1, 2]),
            json.dumps({"tasks": "status"}),
            json.dumps({"tasks": [{"attribute": ""}]}),
            json.dumps({"tasks": [{"attribute": "status", "width": -1}]}),
        ],
    )
    def test_invalid_file_ignored(self, tmp_path, content):
        path = tmp_path / "columns.json"
        path.write_text(content)
        assert ColumnsStore(path).load() == DEFAULT_COLUMNS

    def test_non_utf8_file_ignored(self, tmp_path):
        path = tmp_path / "columns.json"
        path.write_bytes(b"\xff\xfe{}")
        assert ColumnsStore(path).load() == DEFAULT_COLUMNS

    def test_set_for_entity_persists(self, tmp_path):
        path = tmp_path / "nested" / "columns.json"
        store = ColumnsStore(path)
        store.load()
        store.set_for_entity("notes", [ColumnConfig("title"), ColumnConfig("createdAt", width=20)])

        saved = json.loads(path.read_text())
        assert saved["notes"] == [{"attribute": "title"}, {"attribute": "createdAt", "width": 20}]
        assert ColumnsStore(path).load()["notes"] == (ColumnConfig("title"), ColumnConfig("createdAt", width=20))

    def test_parse_columns_rejects_non_mapping(self):
        with pytest.raises(ValueError):
            parse_columns(["tasks"])
