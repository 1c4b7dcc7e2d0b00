"""
redisstash - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config, reset_config
from .schemas import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_STATS_KEY,
    AdapterConfig,
    LogLevel,
    StashConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "reset_config",
    # Models
    "StashConfig",
    "AdapterConfig",
    "LogLevel",
    # Defaults
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_STATS_KEY",
]
