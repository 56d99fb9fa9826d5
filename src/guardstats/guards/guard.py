"""
Guard - a single-use token for one in-flight operation.

A guard does nothing useful by itself. It keeps its tracker informed: once
when the guarded operation is finished, and once when the guard itself is
reclaimed.

State machine:
    ::

        RUNNING ──finish()──▶ FINISHED
           │                     │
        reclaim               reclaim
           ▼                     ▼
        BROKEN               COMPLETE          (terminal)

Reclamation happens on the first of:

- ``guard.close()``
- leaving a ``with guard:`` block
- garbage collection of the guard (``weakref.finalize``)

``weakref.finalize`` runs its callback at most once, so reclamation is
reported exactly once whichever path triggers it. Prefer explicit disposal:
garbage collection is timely in CPython thanks to reference counting, but
reference cycles delay it until the cyclic collector runs.

Examples:
    >>> from guardstats.guards import GuardTracker
    >>> tracker = GuardTracker()
    >>> with tracker.create_guard(tag="req-1") as guard:
    ...     guard.finish("ok")
    >>> tracker.complete
    1
"""

from __future__ import annotations

import time
import warnings
import weakref
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from guardstats.core.errors import GuardMisuseWarning
from guardstats.core.logging import get_logger

if TYPE_CHECKING:
    from guardstats.guards.tracker import GuardTracker

logger = get_logger(__name__)


class GuardState(str, Enum):
    """Lifecycle state of a guard."""

    RUNNING = "running"  # created, neither finished nor reclaimed
    FINISHED = "finished"  # finish() called, not yet reclaimed
    BROKEN = "broken"  # reclaimed without finish()
    COMPLETE = "complete"  # finished, then reclaimed


class _GuardRecord:
    """Mutable guard state, kept apart from the guard so the finalizer
    can reach it without keeping the guard alive."""

    __slots__ = ("owner_ref", "started_at", "state", "finish_calls", "tag", "clock")

    def __init__(
        self,
        owner_ref: weakref.ReferenceType | None,
        started_at: float | None,
        tag: Any,
        clock: Callable[[], float],
    ):
        self.owner_ref = owner_ref
        self.started_at = started_at
        self.state = GuardState.RUNNING
        self.finish_calls = 0
        self.tag = tag
        self.clock = clock

    def owner(self) -> GuardTracker | None:
        return self.owner_ref() if self.owner_ref is not None else None


def _reclaim(record: _GuardRecord) -> None:
    was_finished = record.state is GuardState.FINISHED
    record.state = GuardState.COMPLETE if was_finished else GuardState.BROKEN
    started_at, record.started_at = record.started_at, None

    owner = record.owner()
    if owner is None:
        return
    try:
        if started_at is not None:
            owner.record_time(record.clock() - started_at)
    finally:
        owner.record_reclaim(was_finished)


class Guard:
    """Lifecycle token reporting to a :class:`GuardTracker`.

    Guards are normally created with :meth:`GuardTracker.create_guard`,
    which also counts them. ``Guard()`` without an owner builds a detached
    guard that never reports anything, handy for manual testing.

    Args:
        owner: Tracker to report to (held by weak reference)
        tag: Opaque identifier shown in misuse warnings
        want_time: Record the time from creation to finish (or reclamation)
        clock: Monotonic time source, in seconds
    """

    __slots__ = ("_record", "_finalizer", "__weakref__")

    def __init__(
        self,
        owner: GuardTracker | None = None,
        *,
        tag: Any = None,
        want_time: bool = False,
        clock: Callable[[], float] = time.perf_counter,
    ):
        owner_ref = weakref.ref(owner) if owner is not None else None
        started_at = clock() if want_time else None
        self._record = _GuardRecord(owner_ref, started_at, tag, clock)
        self._finalizer = weakref.finalize(self, _reclaim, self._record)
        # Guards still alive at interpreter exit are not reported.
        self._finalizer.atexit = False

    @property
    def state(self) -> GuardState:
        return self._record.state

    @property
    def tag(self) -> Any:
        return self._record.tag

    @property
    def owner(self) -> GuardTracker | None:
        """The owning tracker, or None if detached or already collected."""
        return self._record.owner()

    @property
    def created_at(self) -> float | None:
        """Clock reading at creation; None when untimed or already reported."""
        return self._record.started_at

    @property
    def reclaimed(self) -> bool:
        return not self._finalizer.alive

    def is_done(self) -> bool:
        """True if finish() was ever called successfully."""
        return self._record.state in (GuardState.FINISHED, GuardState.COMPLETE)

    def finish(self, result: str | None = None) -> None:
        """Mark the guarded operation as finished.

        ``result`` is tallied by the tracker (None counts as ``""``). Only the
        first call counts; later calls issue a :class:`GuardMisuseWarning`
        and change nothing.
        """
        record = self._record
        record.finish_calls += 1

        if record.state is not GuardState.RUNNING:
            self._warn_repeated_finish()
            return

        record.state = GuardState.FINISHED
        started_at, record.started_at = record.started_at, None
        owner = record.owner()
        if owner is None:
            return

        elapsed = record.clock() - started_at if started_at is not None else None
        try:
            owner.record_finish(result)
        finally:
            if elapsed is not None:
                owner.record_time(elapsed)

    def close(self) -> None:
        """Reclaim the guard now. Safe to call any number of times."""
        self._finalizer()

    def __enter__(self) -> Guard:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _warn_repeated_finish(self) -> None:
        record = self._record
        if record.state is GuardState.BROKEN:
            message = "guardstats: finish() called on a guard reclaimed without finish"
        elif record.finish_calls == 2:
            message = "guardstats: finish() called more than once"
        else:
            message = "guardstats: finish() called more than twice"
        if record.tag is not None:
            message += f"; tag = {record.tag}"

        logger.warning(
            "guard.finish.repeated",
            calls=record.finish_calls,
            state=record.state.value,
            tag=record.tag,
        )
        warnings.warn(message, GuardMisuseWarning, stacklevel=3)

    def __repr__(self) -> str:
        tag = f", tag={self.tag!r}" if self.tag is not None else ""
        return f"{type(self).__name__}(state={self.state.value}{tag})"
