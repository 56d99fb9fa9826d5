"""
guardstats - count in-flight operations with lightweight guard objects.

A :class:`GuardTracker` hands out guards; each guard reports once when the
guarded operation finishes and once when the guard is reclaimed, so the
tracker can tell running, finished, leaked (broken) and lingering (zombie)
operations apart.

    >>> from guardstats import GuardTracker
    >>> tracker = GuardTracker(track_time=True)
    >>> with tracker.create_guard() as guard:
    ...     guard.finish("ok")
    >>> tracker.get_stats().complete
    1
"""

from guardstats.core.errors import (
    ConfigError,
    GuardMisuseWarning,
    GuardStatsError,
    InvalidConfigError,
    InvalidTimeSinkError,
)
from guardstats.core.protocols import TimeSink
from guardstats.guards import Guard, GuardState, GuardStats, GuardTracker, guard_callback, track_task
from guardstats.observability import LogBucketHistogram

__version__ = "0.1.0"

__all__ = [
    "Guard",
    "GuardState",
    "GuardStats",
    "GuardTracker",
    "guard_callback",
    "track_task",
    "LogBucketHistogram",
    "TimeSink",
    "GuardStatsError",
    "ConfigError",
    "InvalidConfigError",
    "InvalidTimeSinkError",
    "GuardMisuseWarning",
]
