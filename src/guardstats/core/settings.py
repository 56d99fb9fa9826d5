"""
Environment-driven settings for guardstats.

All fields can be set via ``GUARDSTATS_*`` environment variables (e.g.
``GUARDSTATS_GRADES=20``) or a ``.env`` file. The bucket parameters only
matter when a tracker bins elapsed times itself, i.e. when no external time
sink is attached.

Fields
──────
log_base    : Base of the logarithmic time buckets
grades      : Buckets per power of ``log_base``
min_time    : Smallest resolvable time in seconds; shorter samples land in bucket 0
track_time  : Whether guards are timed by default
log_level   : structlog log level
log_format  : ``console`` or ``json``

Examples:
    >>> from guardstats.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.log_base
    10.0
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GuardStatsSettings(BaseSettings):
    """guardstats configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GUARDSTATS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Time buckets ─────────────────────────────────────────────
    log_base: float = Field(default=10.0, description="Base of the logarithmic time buckets")
    grades: int = Field(default=10, description="Buckets per power of log_base")
    min_time: float = Field(default=1e-6, description="Smallest resolvable time, seconds")
    track_time: bool = Field(default=False, description="Time guards by default")

    # ── Observability ────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"

    @field_validator("log_base")
    @classmethod
    def _check_log_base(cls, value: float) -> float:
        if value <= 1:
            raise ValueError("log_base must be greater than 1")
        return value

    @field_validator("grades")
    @classmethod
    def _check_grades(cls, value: int) -> int:
        if value < 1:
            raise ValueError("grades must be at least 1")
        return value

    @field_validator("min_time")
    @classmethod
    def _check_min_time(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("min_time must be positive")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, GuardStatsSettings] = {}


def get_settings(*, _force_reload: bool = False) -> GuardStatsSettings:
    """Load, validate, and cache a :class:`GuardStatsSettings` instance.

    Subsequent calls return the cached object; pass ``_force_reload=True``
    to re-read the environment (mostly useful in tests).
    """
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = GuardStatsSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings object."""
    _settings_cache.clear()
