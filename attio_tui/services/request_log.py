"""
Request log for the debug panel and debug exports.

A single bounded ring buffer: live capture and exports read the same
buffer, exports just take a smaller window off the top.
"""

import itertools
import logging
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional

from ..config.constants import DEBUG_EXPORT_REQUEST_COUNT, REQUEST_LOG_CAPACITY

logger = logging.getLogger(__name__)


class RequestStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class DebugRequestLogEntry:
    id: str
    label: str
    status: RequestStatus
    started_at: str  # ISO 8601
    duration_ms: int
    detail: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return {key: value for key, value in data.items() if value is not None}


class RequestLog:
    """Bounded, newest-first request history."""

    def __init__(self, capacity: int = REQUEST_LOG_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: deque[DebugRequestLogEntry] = deque(maxlen=capacity)
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def append(
        self,
        label: str,
        status: RequestStatus,
        started_at: str,
        duration_ms: int,
        detail: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> DebugRequestLogEntry:
        entry = DebugRequestLogEntry(
            id=f"req-{next(self._ids)}",
            label=label,
            status=status,
            started_at=started_at,
            duration_ms=max(0, int(duration_ms)),
            detail=detail,
            error_message=error_message,
        )
        # Newest first; deque drops from the right once full
        self._entries.appendleft(entry)
        if status is RequestStatus.ERROR:
            logger.warning("Request failed: %s (%s) %s", label, detail, error_message)
        else:
            logger.debug("Request ok: %s (%s) %dms", label, detail, entry.duration_ms)
        return entry

    def recent(self, count: int = DEBUG_EXPORT_REQUEST_COUNT) -> list[DebugRequestLogEntry]:
        return list(itertools.islice(self._entries, max(0, count)))

    def entries(self) -> list[DebugRequestLogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
