"""
The application store.

One ``AppStore`` is created by the host (the Textual app or a test) and
passed by reference to whatever needs it. State only changes through
``dispatch``; readers get the current immutable snapshot from ``state``
or subscribe to be told when it changes.
"""

import dataclasses
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Optional

from ..models.navigation import AppState
from ..services.request_log import RequestLog
from ..utils.action_logger import ActionLogger
from .app_state import app_reducer

logger = logging.getLogger(__name__)

Listener = Callable[[AppState, Any], None]


def _dict_factory(items: list[tuple[str, Any]]) -> dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in items}


def serialize_state(state: AppState) -> dict[str, Any]:
    """Plain JSON-compatible dict of the whole state tree."""
    return dataclasses.asdict(state, dict_factory=_dict_factory)


class AppStore:
    """Owns the single AppState value plus the telemetry buffers."""

    def __init__(
        self,
        initial_state: Optional[AppState] = None,
        request_log: Optional[RequestLog] = None,
        action_logger: Optional[ActionLogger] = None,
    ):
        self._state = initial_state or AppState()
        self.request_log = request_log or RequestLog()
        self.action_logger = action_logger or ActionLogger()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, event: Any) -> AppState:
        """Apply ``event`` and notify subscribers if anything changed."""
        before = self._state
        after = app_reducer(before, event)
        self._state = after
        self.action_logger.record(event, before, after)
        if after is not before:
            for listener in list(self._listeners):
                listener(after, event)
        return after

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> dict[str, Any]:
        return serialize_state(self._state)
