"""
Shared pytest fixtures for guardstats tests.

This module provides:
- Settings cache and environment isolation
- structlog reset between tests
- A controllable clock and a list-backed time sink
"""

import os
from collections.abc import Generator

import pytest
import structlog

from guardstats.core.settings import clear_settings_cache
from guardstats.guards import GuardTracker


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    """Hide GUARDSTATS_* variables and any .env file from each test."""
    for key in list(os.environ):
        if key.startswith("GUARDSTATS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo configure_logging() calls made by a test."""
    yield
    structlog.reset_defaults()


# =============================================================================
# Time helpers
# =============================================================================


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ListSink:
    """Time sink remembering every sample."""

    def __init__(self):
        self.samples: list[float] = []

    def add_sample(self, elapsed: float) -> None:
        self.samples.append(elapsed)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> ListSink:
    return ListSink()


@pytest.fixture
def tracker(clock: FakeClock) -> GuardTracker:
    """Untimed tracker with a fake clock."""
    return GuardTracker(clock=clock)


@pytest.fixture
def timed_tracker(clock: FakeClock) -> GuardTracker:
    """Tracker binning times in the built-in histogram (default buckets)."""
    return GuardTracker(track_time=True, clock=clock)
