"""
Column resolution.

Turns the persisted column overrides for an entity key into the ordered
columns the results table renders. Resolution never returns an empty
sequence: any configured list that cannot be used falls back to the
built-in defaults for the key.
"""

import logging
from collections.abc import Sequence
from typing import Optional

from ..config.default_columns import COLUMN_DEFINITIONS, DEFAULT_COLUMNS, GENERIC_COLUMNS
from ..models.columns import (
    DEFAULT_OBJECT_KEY,
    ColumnConfig,
    ColumnDefinition,
    ColumnsConfig,
    ResolvedColumn,
    get_entity_key,
)
from ..models.navigation import AppState, CategoryType, ListDrillLevel

logger = logging.getLogger(__name__)


def resolve_entity_key(entity_key: Optional[str]) -> str:
    """Known keys map to themselves; anything else uses the generic object set."""
    if entity_key and entity_key in COLUMN_DEFINITIONS:
        return entity_key
    return DEFAULT_OBJECT_KEY


def get_available_columns(entity_key: Optional[str]) -> tuple[ColumnDefinition, ...]:
    return COLUMN_DEFINITIONS[resolve_entity_key(entity_key)]


def get_default_columns(entity_key: Optional[str]) -> tuple[ColumnConfig, ...]:
    key = resolve_entity_key(entity_key)
    return DEFAULT_COLUMNS.get(key) or DEFAULT_COLUMNS[DEFAULT_OBJECT_KEY]


def get_columns_config(
    entity_key: Optional[str], columns_config: ColumnsConfig
) -> tuple[ColumnConfig, ...]:
    """The configured list for a key, or its defaults when none is stored."""
    key = resolve_entity_key(entity_key)
    configured = columns_config.get(key)
    if configured:
        return tuple(configured)
    return get_default_columns(key)


def title_case(attribute: str) -> str:
    """'email_addresses' -> 'Email Addresses', 'createdAt' -> 'Created At'."""
    spaced = []
    for index, char in enumerate(attribute):
        if char.isupper() and index > 0 and attribute[index - 1].islower():
            spaced.append(" ")
        spaced.append(" " if char in "_-" else char)
    return " ".join(word.capitalize() for word in "".join(spaced).split())


def _apply(
    definitions: Sequence[ColumnDefinition], configured: Sequence[ColumnConfig]
) -> list[ResolvedColumn]:
    by_attribute = {definition.attribute: definition for definition in definitions}
    seen: set[str] = set()
    resolved: list[ResolvedColumn] = []
    for config in configured:
        definition = by_attribute.get(config.attribute)
        if definition is None or config.attribute in seen:
            continue
        seen.add(config.attribute)
        label = config.label or definition.label or title_case(config.attribute)
        width = max(config.width or definition.width, len(label), 1)
        resolved.append(
            ResolvedColumn(
                attribute=definition.attribute,
                label=label,
                width=width,
                value=definition.value,
            )
        )
    return resolved


def resolve_columns(
    entity_key: Optional[str], columns_config: ColumnsConfig
) -> list[ResolvedColumn]:
    """
    Resolve the columns to render for an entity key.

    A configured list that names any attribute unknown for the key is
    discarded as a whole. Duplicate attributes keep their first occurrence.
    """
    key = resolve_entity_key(entity_key)
    available = get_available_columns(key)
    known = {definition.attribute for definition in available}
    configured = get_columns_config(key, columns_config)

    unknown = [config.attribute for config in configured if config.attribute not in known]
    if unknown:
        logger.info("Ignoring column config for %s, unknown attributes: %s", key, unknown)
        configured = get_default_columns(key)

    resolved = _apply(available, configured)
    if resolved:
        return resolved

    resolved = _apply(available, get_default_columns(key))
    if resolved:
        return resolved

    return _apply(available, [ColumnConfig(d.attribute) for d in available])


def resolve_columns_for_state(state: AppState, columns_config: ColumnsConfig) -> list[ResolvedColumn]:
    """Columns for whatever the results pane currently shows.

    List statuses and list entries have no configurable column set and use
    a plain title/details layout.
    """
    category = state.selected_category
    if (
        category is not None
        and category.type is CategoryType.LISTS
        and state.list_drill.level is not ListDrillLevel.LISTS
    ) or (category is not None and category.type is CategoryType.LIST):
        return _apply(GENERIC_COLUMNS, [ColumnConfig(d.attribute) for d in GENERIC_COLUMNS])
    return resolve_columns(get_entity_key(category, state.object_drill), columns_config)
