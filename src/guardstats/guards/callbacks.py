"""
Helpers that attach guards to callbacks and asyncio tasks.

Usage:
    from guardstats.guards import GuardTracker, guard_callback, track_task

    tracker = GuardTracker()

    # A callback that finishes its guard when it runs. If the callback is
    # dropped without running, the guard is reclaimed as broken.
    loop.call_later(5, guard_callback(tracker, on_timeout, result="timeout"))

    # A task whose outcome is tallied as "ok", "error" or "cancelled".
    task = track_task(tracker, fetch_page(url), tag=url)
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from guardstats.core.logging import get_logger
from guardstats.guards.tracker import GuardTracker

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

TASK_OK = "ok"
TASK_ERROR = "error"
TASK_CANCELLED = "cancelled"


def guard_callback(
    tracker: GuardTracker,
    func: F,
    *,
    result: str | None = None,
    tag: Any = None,
) -> F:
    """Wrap ``func`` so that calling it finishes a fresh guard first.

    The wrapper is the only owner of the guard (exposed as ``wrapper.guard``),
    so the guard lives exactly as long as the wrapper. Calling the wrapper a
    second time still calls ``func`` but only warns about the guard.
    """
    guard = tracker.create_guard(tag=tag)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        guard.finish(result)
        return func(*args, **kwargs)

    wrapper.guard = guard  # type: ignore[attr-defined]
    return wrapper  # type: ignore[return-value]


def track_task(
    tracker: GuardTracker,
    task: Awaitable[Any],
    *,
    tag: Any = None,
) -> asyncio.Future[Any]:
    """Guard an asyncio task (or coroutine, which is scheduled first).

    When the task completes the guard is finished with ``"ok"``, ``"error"``
    or ``"cancelled"`` and reclaimed right away. A task that never completes
    keeps its guard running. The task's exception, if any, is still raised
    to whoever awaits it.
    """
    future = asyncio.ensure_future(task)
    guard = tracker.create_guard(tag=tag)

    def _on_done(fut: asyncio.Future[Any]) -> None:
        if fut.cancelled():
            outcome = TASK_CANCELLED
        elif fut.exception() is not None:
            outcome = TASK_ERROR
            logger.debug("task.failed", tag=tag, error=repr(fut.exception()))
        else:
            outcome = TASK_OK
        with guard:
            guard.finish(outcome)

    future.add_done_callback(_on_done)
    return future
