"""Tests for running-count level callbacks."""

import gc

import pytest

from guardstats.guards import GuardTracker


class Recorder:
    """Level callback remembering its calls."""

    def __init__(self):
        self.calls: list[tuple[int, GuardTracker]] = []

    def __call__(self, running, tracker):
        self.calls.append((running, tracker))

    @property
    def levels(self) -> list[int]:
        return [running for running, _ in self.calls]


class TestRisingLevels:
    """Positive levels fire when guard creation raises the running count."""

    def test_fires_on_second_creation_only(self, tracker):
        recorder = Recorder()
        tracker.on_level(2, recorder)

        guards = [tracker.create_guard()]
        assert recorder.calls == []
        guards.append(tracker.create_guard())
        assert recorder.calls == [(2, tracker)]
        guards.append(tracker.create_guard())
        assert recorder.calls == [(2, tracker)]

    def test_not_fired_on_decrease(self, tracker):
        recorder = Recorder()
        tracker.on_level(2, recorder)
        guards = [tracker.create_guard() for _ in range(3)]
        assert recorder.levels == [2]

        guards[0].finish()
        assert tracker.running == 2
        assert recorder.levels == [2]

    def test_fires_again_after_falling_back(self, tracker):
        recorder = Recorder()
        tracker.on_level(2, recorder)
        first = tracker.create_guard()
        second = tracker.create_guard()
        second.finish()
        third = tracker.create_guard()
        assert recorder.levels == [2, 2]
        assert first is not third

    def test_on_level_chains(self, tracker):
        low, high = Recorder(), Recorder()
        assert tracker.on_level(1, low).on_level(3, high) is tracker

    def test_replacing_callback(self, tracker):
        old, new = Recorder(), Recorder()
        tracker.on_level(1, old)
        tracker.on_level(1, new)
        guard = tracker.create_guard()
        assert old.calls == []
        assert new.levels == [1]
        guard.finish()

    def test_removing_callback(self, tracker):
        recorder = Recorder()
        tracker.on_level(1, recorder).on_level(1, None)
        tracker.create_guard()
        assert recorder.calls == []

    def test_callback_error_propagates_after_counting(self, tracker):
        """Counters are updated before the callback runs. The lost guard ends up broken."""

        def explode(running, _tracker):
            raise RuntimeError(f"too many: {running}")

        tracker.on_level(1, explode)
        with pytest.raises(RuntimeError, match="too many: 1"):
            tracker.create_guard()
        assert tracker.total == 1

        gc.collect()
        assert tracker.broken == 1
        assert tracker.running == 0


class TestFallingLevels:
    """Zero and negative levels fire when finish() lowers the running count."""

    def test_zero_fires_when_drained(self, tracker):
        recorder = Recorder()
        tracker.on_level(0, recorder)
        guards = [tracker.create_guard() for _ in range(2)]

        guards[0].finish()
        assert recorder.calls == []
        guards[1].finish()
        assert recorder.calls == [(0, tracker)]

    def test_negative_level_watches_negated_count(self, tracker):
        """Level -n fires when the running count falls to n."""
        recorder = Recorder()
        tracker.on_level(-1, recorder)
        guards = [tracker.create_guard() for _ in range(3)]

        guards[0].finish()
        assert recorder.calls == []
        guards[1].finish()
        assert recorder.levels == [1]
        guards[2].finish()
        assert recorder.levels == [1]

    def test_reclaim_does_not_fire(self, tracker):
        """Only finish() dispatches falling levels; broken guards do not."""
        recorder = Recorder()
        tracker.on_level(0, recorder)
        guard = tracker.create_guard()
        guard.close()
        assert tracker.running == 0
        assert recorder.calls == []

    def test_finish_error_propagates_after_counting(self, tracker):
        def explode(running, _tracker):
            raise ValueError("drained")

        tracker.on_level(0, explode)
        guard = tracker.create_guard()
        with pytest.raises(ValueError):
            guard.finish("ok")
        assert tracker.finished == 1
        assert guard.is_done()
        assert tracker.get_result_tally() == {"ok": 1}

    def test_finish_error_still_records_time(self, timed_tracker, clock):
        def explode(running, _tracker):
            raise ValueError("drained")

        timed_tracker.on_level(0, explode)
        guard = timed_tracker.create_guard()
        clock.advance(1.0)
        with pytest.raises(ValueError):
            guard.finish()
        guard.close()
        assert timed_tracker.get_time_distribution() == {"1": 1}
