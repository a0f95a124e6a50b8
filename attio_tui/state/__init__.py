"""Navigation state engine."""

from .app_state import app_reducer
from .store import AppStore

__all__ = ["AppStore", "app_reducer"]
