"""
Structured error types for guardstats.

Tracker operations never raise once a tracker exists: counting must keep
going even when the host application misuses a guard. The only hard errors
are configuration mistakes, which surface at construction time.

Manifesto:
    - **Fail fast on configuration:** A sink without ``add_sample`` or a
      nonsensical bucket layout is a programming mistake, not a runtime
      condition.
    - **Warn on misuse:** Repeated ``finish()`` calls emit
      :class:`GuardMisuseWarning` and change nothing.
    - **Rich context:** Errors carry a category and the offending key/value.

Architecture:
    ::

        GuardStatsError (category)
        └── ConfigError (CONFIG)
            ├── InvalidConfigError     key, value
            └── InvalidTimeSinkError   sink

        UserWarning
        └── GuardMisuseWarning

Examples:
    >>> from guardstats.core.errors import InvalidConfigError
    >>> err = InvalidConfigError("grades", 0)
    >>> err.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> err.to_dict()["key"]
    'grades'
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification and routing."""

    CONFIG = "CONFIG"  # Invalid tracker or settings values
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


class GuardStatsError(Exception):
    """Base exception for all guardstats errors."""

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


class ConfigError(GuardStatsError):
    """
    Configuration error.

    Never recoverable at runtime - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["key"] = self.key
        result["value"] = repr(self.value)
        return result


class InvalidTimeSinkError(ConfigError):
    """Time sink object does not expose a callable ``add_sample()``."""

    def __init__(self, sink: Any):
        self.sink = sink
        super().__init__(f"time sink {sink!r} doesn't have add_sample() method")


class GuardMisuseWarning(UserWarning):
    """A guard was used in a way that is ignored, e.g. finished twice."""
