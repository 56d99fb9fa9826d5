"""
guardstats.core - errors, settings, logging and collaborator protocols.
"""

from guardstats.core.errors import (
    ConfigError,
    ErrorCategory,
    GuardMisuseWarning,
    GuardStatsError,
    InvalidConfigError,
    InvalidTimeSinkError,
)
from guardstats.core.logging import configure_logging, get_logger
from guardstats.core.protocols import LevelCallback, TimeSink
from guardstats.core.settings import GuardStatsSettings, clear_settings_cache, get_settings

__all__ = [
    # Errors
    "ErrorCategory",
    "GuardStatsError",
    "ConfigError",
    "InvalidConfigError",
    "InvalidTimeSinkError",
    "GuardMisuseWarning",
    # Logging
    "configure_logging",
    "get_logger",
    # Protocols
    "TimeSink",
    "LevelCallback",
    # Settings
    "GuardStatsSettings",
    "get_settings",
    "clear_settings_cache",
]
