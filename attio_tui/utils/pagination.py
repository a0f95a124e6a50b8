"""
Cursor and pagination arithmetic shared by every resource fetcher.

Two strategies exist side by side:

* Offset cursors. The cursor is a stringified non-negative offset. Fetchers
  ask the server for ``limit + 1`` rows and use the extra row to decide
  whether another page exists, since the API does not return totals.
* Server cursors. The server hands back an opaque ``next_cursor`` and the
  page is used as-is (meetings).

Everything here is pure and does no I/O.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, Sequence, TypeVar

from ..config.constants import DEFAULT_PAGE_LIMIT

T = TypeVar("T")

_LEADING_INT = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class OffsetPaginationRequest:
    """What to ask the server for."""

    limit: int  # rows the caller wants
    request_limit: int  # rows to request (limit + 1)
    offset: Optional[int]  # None means "start of data"


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the cursor for the following page."""

    items: list[T] = field(default_factory=list)
    next_cursor: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


def parse_cursor_offset(cursor: Optional[str]) -> Optional[int]:
    """
    Parse an offset cursor.

    Surrounding whitespace is ignored and only the leading integer run is
    read, so ``"10abc"`` is 10 and ``"10.5"`` is 10. Absent, empty,
    negative and non-numeric cursors ("abc10", "NaN", "Infinity") yield None.
    """
    if cursor is None:
        return None
    text = cursor.strip()
    if not text:
        return None
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    offset = int(match.group(0))
    if offset < 0:
        return None
    return offset


def normalize_limit(limit: Any, default_limit: int = DEFAULT_PAGE_LIMIT) -> int:
    """Coerce a caller supplied limit; anything unusable becomes the default."""
    if isinstance(limit, bool) or not isinstance(limit, (int, float)):
        return max(1, default_limit)
    if isinstance(limit, float) and not math.isfinite(limit):
        return max(1, default_limit)
    if limit <= 0:
        return max(1, default_limit)
    return max(1, int(limit))


def build_offset_pagination_request(
    limit: Any,
    cursor: Optional[str],
    default_limit: int = DEFAULT_PAGE_LIMIT,
) -> OffsetPaginationRequest:
    effective_limit = normalize_limit(limit, default_limit)
    return OffsetPaginationRequest(
        limit=effective_limit,
        request_limit=effective_limit + 1,
        offset=parse_cursor_offset(cursor),
    )


def finalize_offset_pagination(
    data: Sequence[T], limit: int, offset: Optional[int]
) -> Page[T]:
    """
    Turn an over-fetched response into a page.

    ``next_cursor`` is only set when the server returned more than ``limit``
    rows, so a short or exactly-full page never claims there is more.
    """
    has_more = len(data) > limit
    items = list(data[:limit]) if has_more else list(data)
    next_cursor = str((offset or 0) + limit) if has_more else None
    return Page(items=items, next_cursor=next_cursor)


def paginate_locally(
    items: Sequence[T],
    limit: Any,
    cursor: Optional[str],
    default_limit: int = DEFAULT_PAGE_LIMIT,
) -> Page[T]:
    """Slice an already fully fetched collection with offset cursors."""
    effective_limit = normalize_limit(limit, default_limit)
    offset = parse_cursor_offset(cursor) or 0
    end = offset + effective_limit
    next_cursor = str(end) if end < len(items) else None
    return Page(items=list(items[offset:end]), next_cursor=next_cursor)


def finalize_server_cursor_pagination(
    data: Sequence[T], next_cursor: Optional[str]
) -> Page[T]:
    """Trust the server's cursor; blank cursors mean there is nothing more."""
    if isinstance(next_cursor, str) and not next_cursor.strip():
        next_cursor = None
    return Page(items=list(data), next_cursor=next_cursor)
