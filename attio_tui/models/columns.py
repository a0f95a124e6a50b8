"""Column types and the entity key that selects a column set."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from .navigation import CategoryType, NavigatorCategory, ObjectDrillLevel, ObjectDrillState, ResultItem

DEFAULT_OBJECT_KEY = "object-default"

ValueExtractor = Callable[[ResultItem], str]


@dataclass(frozen=True)
class ColumnConfig:
    """A user's column choice as persisted in columns.json."""

    attribute: str
    label: Optional[str] = None
    width: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Any) -> ColumnConfig:
        """Parse one persisted entry; raises ValueError on a bad shape."""
        if not isinstance(raw, Mapping):
            raise ValueError("column entry must be an object")
        attribute = raw.get("attribute")
        if not isinstance(attribute, str) or not attribute:
            raise ValueError("column attribute must be a non-empty string")
        label = raw.get("label")
        if label is not None and (not isinstance(label, str) or not label):
            raise ValueError(f"invalid label for column {attribute!r}")
        width = raw.get("width")
        if width is not None and (isinstance(width, bool) or not isinstance(width, int) or width <= 0):
            raise ValueError(f"invalid width for column {attribute!r}")
        return cls(attribute=attribute, label=label, width=width)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"attribute": self.attribute}
        if self.label is not None:
            data["label"] = self.label
        if self.width is not None:
            data["width"] = self.width
        return data


ColumnsConfig = Mapping[str, Sequence[ColumnConfig]]


@dataclass(frozen=True)
class ColumnDefinition:
    """A built-in column: the only place value extractors come from."""

    attribute: str
    label: str
    width: int
    value: ValueExtractor


@dataclass(frozen=True)
class ResolvedColumn:
    attribute: str
    label: str
    width: int
    value: ValueExtractor


def get_entity_key(
    category: Optional[NavigatorCategory],
    object_drill: Optional[ObjectDrillState] = None,
) -> Optional[str]:
    """Map the active category (and object drill) to a column entity key."""
    if category is None:
        return None
    if category.type is CategoryType.OBJECT:
        return f"object-{category.object_slug}"
    if category.type in (CategoryType.LIST, CategoryType.LISTS):
        return "list"
    if category.type is CategoryType.OBJECTS:
        if object_drill is not None and object_drill.level is ObjectDrillLevel.RECORDS:
            return f"object-{object_drill.object_slug}"
        return "objects"
    return category.type.value
