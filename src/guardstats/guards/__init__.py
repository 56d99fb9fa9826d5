"""
guardstats.guards - guards and the tracker that counts them.
"""

from guardstats.guards.callbacks import guard_callback, track_task
from guardstats.guards.guard import Guard, GuardState
from guardstats.guards.tracker import GuardStats, GuardTracker

__all__ = [
    "Guard",
    "GuardState",
    "GuardStats",
    "GuardTracker",
    "guard_callback",
    "track_task",
]
