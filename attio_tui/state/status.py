"""Transient status-bar messages."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config.constants import STATUS_MESSAGE_TIMEOUT_SECONDS


class StatusTone(str, Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    text: str
    tone: StatusTone
    expires_at: float


class TemporaryStatus:
    """Holds at most one status message and forgets it once it expires.

    ``clock`` is injectable so tests can move time forward.
    """

    def __init__(
        self,
        timeout: float = STATUS_MESSAGE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout = timeout
        self._clock = clock
        self._message: Optional[StatusMessage] = None

    def show(self, text: str, tone: StatusTone = StatusTone.INFO) -> StatusMessage:
        self._message = StatusMessage(text=text, tone=tone, expires_at=self._clock() + self.timeout)
        return self._message

    def info(self, text: str) -> StatusMessage:
        return self.show(text, StatusTone.INFO)

    def error(self, text: str) -> StatusMessage:
        return self.show(text, StatusTone.ERROR)

    @property
    def current(self) -> Optional[StatusMessage]:
        if self._message is not None and self._clock() >= self._message.expires_at:
            self._message = None
        return self._message

    def clear(self) -> None:
        self._message = None
