"""Small value types returned by the services."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StatusAttribute:
    """The first status-typed attribute found on a list."""

    slug: str
    title: str
    attribute_id: str
