"""Tests for guard_callback and track_task."""

import asyncio
import gc

import pytest

from guardstats.core.errors import GuardMisuseWarning
from guardstats.guards import guard_callback, track_task


class TestGuardCallback:
    """Tests for wrapping plain callbacks."""

    def test_call_finishes_guard(self, tracker):
        def add(a, b):
            return a + b

        wrapped = guard_callback(tracker, add, result="route-1")
        assert tracker.running == 1

        assert wrapped(2, b=3) == 5
        assert wrapped.guard.is_done()
        assert tracker.get_result_tally() == {"route-1": 1}
        assert tracker.running == 0

    def test_wraps_metadata(self, tracker):
        def on_timeout():
            """Handle a timeout."""

        wrapped = guard_callback(tracker, on_timeout)
        assert wrapped.__name__ == "on_timeout"
        assert wrapped.__doc__ == "Handle a timeout."

    def test_dropped_callback_is_broken(self, tracker):
        """A callback that is never invoked leaks its guard."""
        wrapped = guard_callback(tracker, lambda: None)
        del wrapped
        gc.collect()
        assert tracker.broken == 1
        assert tracker.running == 0

    def test_invoked_then_dropped_is_complete(self, tracker):
        wrapped = guard_callback(tracker, lambda: None)
        wrapped()
        del wrapped
        gc.collect()
        assert tracker.complete == 1
        assert tracker.zombie == 0

    def test_second_call_warns(self, tracker):
        calls = []
        wrapped = guard_callback(tracker, lambda: calls.append(1), tag="cb-1")
        wrapped()
        with pytest.warns(GuardMisuseWarning, match="tag = cb-1"):
            wrapped()
        assert calls == [1, 1]
        assert tracker.finished == 1


class TestTrackTask:
    """Tests for guarding asyncio tasks."""

    def test_successful_task(self, tracker):
        async def work():
            return 42

        async def main():
            task = track_task(tracker, work(), tag="work")
            assert tracker.running == 1
            result = await task
            await asyncio.sleep(0)
            return result

        assert asyncio.run(main()) == 42
        assert tracker.get_result_tally() == {"ok": 1}
        assert tracker.complete == 1

    def test_failed_task(self, tracker):
        async def work():
            raise KeyError("missing")

        async def main():
            task = track_task(tracker, work())
            with pytest.raises(KeyError):
                await task
            await asyncio.sleep(0)

        asyncio.run(main())
        assert tracker.get_result_tally() == {"error": 1}
        assert tracker.complete == 1

    def test_cancelled_task(self, tracker):
        async def main():
            task = track_task(tracker, asyncio.sleep(10))
            await asyncio.sleep(0)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            await asyncio.sleep(0)

        asyncio.run(main())
        assert tracker.get_result_tally() == {"cancelled": 1}
        assert tracker.running == 0
        assert tracker.dead == 1

    def test_existing_task_is_reused(self, tracker):
        async def main():
            task = asyncio.ensure_future(asyncio.sleep(0, result="done"))
            assert track_task(tracker, task) is task
            return await task

        assert asyncio.run(main()) == "done"
