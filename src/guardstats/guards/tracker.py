"""
GuardTracker - spawns guards and aggregates their lifecycle statistics.

Suppose a long-running, single-threaded service schedules lots of
callbacks and needs to know how many were executed, how many are still
waiting, and how many were dropped without ever running. Put a guard into
each callback and let the tracker count:

    >>> from guardstats.guards import GuardTracker
    >>> tracker = GuardTracker()
    >>> guard = tracker.create_guard()
    >>> def callback():
    ...     guard.finish("taken route 1")
    ...     # now do useful stuff
    >>> callback()
    >>> tracker.get_stats().running
    0

Counters:
    ::

                    reclaimed: *   no         yes
        finished: *            total+    alive      dead
        finished: no                     running    broken+
        finished: yes          finished+ zombie     complete+

    A "+" marks the counters measured directly; they are monotonic. The rest
    are derived on read:

        dead    = complete + broken
        zombie  = finished - complete
        alive   = total - dead
        running = alive - zombie = total - finished - broken

    Growing broken and/or zombie counts usually indicate something went wrong.

Level callbacks:
    ``on_level(n, callback)`` watches the running count. On guard creation
    the callback stored under the new running count fires; on finish the
    callback stored under the *negated* running count fires. So ``n > 0``
    fires when the count rises to ``n``, ``0`` fires when it falls to 0,
    and ``-n`` fires when it falls to ``n``. Callbacks are invoked inline as
    ``callback(running, tracker)``; exceptions propagate to the caller of
    ``create_guard()``/``finish()`` after the counters have been updated.

Time statistics:
    When guards are timed, the elapsed time from creation to finish (or to
    reclamation, for broken guards) is forwarded to the external time sink
    if one was given, otherwise counted in a built-in
    :class:`~guardstats.observability.histogram.LogBucketHistogram`.

Concurrency:
    No internal locking. All tracker calls, including garbage-collection
    driven reclamation, are expected on one thread (typically an event
    loop). Hosts with real parallelism must serialize access themselves.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

from guardstats.core.errors import InvalidConfigError, InvalidTimeSinkError
from guardstats.core.logging import get_logger
from guardstats.core.protocols import LevelCallback, TimeSink
from guardstats.core.settings import GuardStatsSettings, get_settings
from guardstats.guards.guard import Guard
from guardstats.observability.histogram import LogBucketHistogram

logger = get_logger(__name__)


@dataclass(frozen=True)
class GuardStats:
    """Snapshot of tracker counters, derived values computed at read time."""

    total: int = 0
    finished: int = 0
    complete: int = 0
    broken: int = 0
    zombie: int = 0
    running: int = 0
    alive: int = 0
    dead: int = 0
    result_tally: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_counters(
        cls,
        total: int,
        finished: int,
        complete: int,
        broken: int,
        result_tally: dict[str, int] | None = None,
    ) -> GuardStats:
        dead = complete + broken
        zombie = finished - complete
        alive = total - dead
        return cls(
            total=total,
            finished=finished,
            complete=complete,
            broken=broken,
            zombie=zombie,
            running=alive - zombie,
            alive=alive,
            dead=dead,
            result_tally=dict(result_tally or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _resolve_time_sink(time_sink: Any) -> TimeSink:
    """Accept a sink instance, or a class/factory producing one."""
    if isinstance(time_sink, type):
        if not callable(getattr(time_sink, "add_sample", None)):
            raise InvalidTimeSinkError(time_sink)
        time_sink = time_sink()
    elif not hasattr(time_sink, "add_sample") and callable(time_sink):
        time_sink = time_sink()

    if not callable(getattr(time_sink, "add_sample", None)):
        raise InvalidTimeSinkError(time_sink)
    return time_sink


class GuardTracker:
    """Creates guards and gathers statistics from them.

    Args:
        time_sink: Object with ``add_sample(seconds)``, or a class/factory
            producing one. Enables timing by default.
        log_base: Base of the built-in logarithmic time buckets
        grades: Buckets per power of ``log_base``
        min_time: Smallest resolvable time; shorter samples go to bucket 0
        track_time: Time guards by default. None means "only when a
            time sink is given".
        guard_class: Guard subclass to instantiate
        clock: Monotonic time source handed to guards
        name: Label used in log events

    Raises:
        InvalidTimeSinkError: ``time_sink`` has no callable ``add_sample``
        InvalidConfigError: bucket parameters or ``guard_class`` are invalid
    """

    def __init__(
        self,
        *,
        time_sink: Any = None,
        log_base: float = 10.0,
        grades: int = 10,
        min_time: float = 1e-6,
        track_time: bool | None = None,
        guard_class: type[Guard] = Guard,
        clock: Callable[[], float] = time.perf_counter,
        name: str | None = None,
    ):
        if not (isinstance(guard_class, type) and issubclass(guard_class, Guard)):
            raise InvalidConfigError("guard_class", guard_class, "guard_class must be a Guard subclass")

        self._time_sink: TimeSink | None = None
        self._histogram: LogBucketHistogram | None = None
        if time_sink is not None:
            self._time_sink = _resolve_time_sink(time_sink)
        else:
            self._histogram = LogBucketHistogram(log_base=log_base, grades=grades, min_time=min_time)

        self.track_time = bool(self._time_sink is not None if track_time is None else track_time)
        self.name = name
        self._guard_class = guard_class
        self._clock = clock

        self._total = 0
        self._finished = 0
        self._complete = 0
        self._broken = 0
        self._results: dict[str, int] = {}
        self._level_callbacks: dict[int, LevelCallback] = {}

        logger.debug(
            "tracker.created",
            tracker=name,
            track_time=self.track_time,
            external_sink=self._time_sink is not None,
        )

    @classmethod
    def from_settings(cls, settings: GuardStatsSettings | None = None, **overrides: Any) -> GuardTracker:
        """Build a tracker from :class:`GuardStatsSettings` (cached settings by default)."""
        settings = settings or get_settings()
        options: dict[str, Any] = {
            "log_base": settings.log_base,
            "grades": settings.grades,
            "min_time": settings.min_time,
            "track_time": settings.track_time,
        }
        options.update(overrides)
        return cls(**options)

    # ── Guards ───────────────────────────────────────────────────────────

    def create_guard(self, *, tag: Any = None, want_time: bool | None = None) -> Guard:
        """Create a guard and count it.

        The rising-level callback for the new running count fires before the
        guard is returned. If that callback raises, the exception propagates,
        the guard never reaches the caller and is counted as broken once it
        is reclaimed.

        Args:
            tag: Opaque identifier shown in misuse warnings
            want_time: Override the tracker's default for timing this guard
        """
        if want_time is None:
            want_time = self.track_time
        guard = self._guard_class(self, tag=tag, want_time=want_time, clock=self._clock)

        self._total += 1
        running = self.running
        callback = self._level_callbacks.get(running)
        if callback is not None:
            logger.debug("tracker.level.rise", tracker=self.name, running=running)
            callback(running, self)
        return guard

    def guard(self, *, tag: Any = None, want_time: bool | None = None) -> Guard:
        """Alias of :meth:`create_guard`."""
        return self.create_guard(tag=tag, want_time=want_time)

    def on_level(self, level: int, callback: LevelCallback | None) -> GuardTracker:
        """Set (or, with None, remove) the callback for ``level``.

        See the module docstring for the sign convention. Returns the
        tracker for chaining.
        """
        if callback is None:
            self._level_callbacks.pop(level, None)
        else:
            self._level_callbacks[level] = callback
        logger.debug("tracker.level.set", tracker=self.name, level=level, removed=callback is None)
        return self

    # ── Guard reports ────────────────────────────────────────────────────
    # Called by guards. Calling them directly fools the counters.

    def record_finish(self, result: str | None = None) -> None:
        if result is None:
            result = ""
        self._finished += 1
        self._results[result] = self._results.get(result, 0) + 1

        running = self.running
        callback = self._level_callbacks.get(-running)
        if callback is not None:
            logger.debug("tracker.level.fall", tracker=self.name, running=running)
            callback(running, self)

    def record_reclaim(self, was_finished: bool) -> None:
        if was_finished:
            self._complete += 1
        else:
            self._broken += 1

    def record_time(self, elapsed: float) -> None:
        if self._time_sink is not None:
            self._time_sink.add_sample(elapsed)
        elif self._histogram is not None:
            self._histogram.add_sample(elapsed)

    # ── Statistics ───────────────────────────────────────────────────────

    @property
    def total(self) -> int:
        """All guards ever created."""
        return self._total

    @property
    def finished(self) -> int:
        """finish() was called."""
        return self._finished

    @property
    def complete(self) -> int:
        """Finished, then reclaimed."""
        return self._complete

    @property
    def broken(self) -> int:
        """Reclaimed without finish()."""
        return self._broken

    @property
    def dead(self) -> int:
        return self._complete + self._broken

    @property
    def alive(self) -> int:
        return self._total - self._complete - self._broken

    @property
    def zombie(self) -> int:
        """Finished but not yet reclaimed."""
        return self._finished - self._complete

    @property
    def running(self) -> int:
        """Neither finished nor reclaimed."""
        return self._total - self._finished - self._broken

    def get_stats(self) -> GuardStats:
        """All counters as a single snapshot."""
        return GuardStats.from_counters(
            total=self._total,
            finished=self._finished,
            complete=self._complete,
            broken=self._broken,
            result_tally=self._results,
        )

    def get_result_tally(self) -> dict[str, int]:
        """Counts of the results passed to finish() (a copy)."""
        return dict(self._results)

    def get_time_distribution(self) -> dict[str, int]:
        """Bucket label to sample count; empty when an external sink is used."""
        if self._histogram is None:
            return {}
        return self._histogram.distribution()

    @property
    def time_sink(self) -> TimeSink | None:
        """Where time samples go: the external sink or the built-in histogram."""
        return self._time_sink if self._time_sink is not None else self._histogram

    @property
    def time_histogram(self) -> LogBucketHistogram | None:
        """The built-in histogram, None when an external sink is attached."""
        return self._histogram

    def __repr__(self) -> str:
        name = f"{self.name!r}, " if self.name else ""
        return (
            f"GuardTracker({name}total={self._total}, running={self.running}, "
            f"zombie={self.zombie}, broken={self._broken})"
        )
