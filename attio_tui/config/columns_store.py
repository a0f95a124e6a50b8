"""
Persisted column overrides (~/.attio-tui/columns.json).

The file maps entity keys to ordered column lists. Loading merges the
stored lists over the built-in defaults; a file that is unreadable or has
any malformed entry is ignored as a whole.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Optional

from ..exceptions import ConfigurationError
from ..models.columns import ColumnConfig
from .constants import COLUMNS_FILE_NAME, get_config_dir
from .default_columns import DEFAULT_COLUMNS
from .settings import read_json_file

logger = logging.getLogger(__name__)


def get_columns_path() -> Path:
    return get_config_dir() / COLUMNS_FILE_NAME


def parse_columns(raw: Any) -> dict[str, tuple[ColumnConfig, ...]]:
    """Validate decoded JSON; raises ValueError if any part is malformed."""
    if not isinstance(raw, Mapping):
        raise ValueError("columns file must contain an object")
    parsed: dict[str, tuple[ColumnConfig, ...]] = {}
    for entity_key, entries in raw.items():
        if not isinstance(entries, list):
            raise ValueError(f"columns for {entity_key!r} must be a list")
        parsed[entity_key] = tuple(ColumnConfig.from_dict(entry) for entry in entries)
    return parsed


class ColumnsStore:
    """Loads and saves the column overrides, keeping the last known value."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_columns_path()
        self._columns: dict[str, tuple[ColumnConfig, ...]] = dict(DEFAULT_COLUMNS)

    @property
    def columns(self) -> dict[str, tuple[ColumnConfig, ...]]:
        return dict(self._columns)

    def load(self) -> dict[str, tuple[ColumnConfig, ...]]:
        columns = dict(DEFAULT_COLUMNS)
        if self.path.exists():
            try:
                columns.update(parse_columns(read_json_file(self.path)))
            except (ConfigurationError, ValueError) as e:
                logger.warning("Ignoring invalid columns file %s: %s", self.path, e)
        self._columns = columns
        return dict(columns)

    def save(self, columns: Mapping[str, Sequence[ColumnConfig]]) -> Path:
        self._columns = {key: tuple(value) for key, value in columns.items()}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {key: [column.to_dict() for column in value] for key, value in self._columns.items()}
        self.path.write_text(json.dumps(payload, indent=2))
        logger.info("Saved column config to %s", self.path)
        return self.path

    def set_for_entity(self, entity_key: str, columns: Sequence[ColumnConfig]) -> Path:
        updated = dict(self._columns)
        updated[entity_key] = tuple(columns)
        return self.save(updated)
