"""
Core module - Engineering foundation

Contains configuration, logging, errors and time utilities.
"""

from dexwatch.core.config import (
    BotConfig,
    Settings,
    get_settings,
    load_bot_config,
    load_yaml_config,
)
from dexwatch.core.errors import (
    DexwatchError,
    ConfigurationError,
    StoreError,
    VenueError,
)
from dexwatch.core.logging import setup_logging, get_logger

__all__ = [
    "BotConfig",
    "Settings",
    "get_settings",
    "load_bot_config",
    "load_yaml_config",
    "DexwatchError",
    "ConfigurationError",
    "StoreError",
    "VenueError",
    "setup_logging",
    "get_logger",
]
