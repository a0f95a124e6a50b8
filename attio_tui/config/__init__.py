"""Configuration for attio-tui."""

from .constants import CONFIG_DIR, DEBUG_DIR
from .settings import AppConfig, load_config, save_config

__all__ = ["AppConfig", "CONFIG_DIR", "DEBUG_DIR", "load_config", "save_config"]
