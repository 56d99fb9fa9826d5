"""
Structural protocols for guardstats collaborators.

The tracker only ever talks to a time sink through ``add_sample``. Anything
with that method works: the built-in
:class:`~guardstats.observability.histogram.LogBucketHistogram`, a
running-mean accumulator, or an adapter around an external metrics client.

Examples:
    >>> class ListSink:
    ...     def __init__(self):
    ...         self.samples = []
    ...     def add_sample(self, elapsed):
    ...         self.samples.append(elapsed)
    >>> isinstance(ListSink(), TimeSink)
    True
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class TimeSink(Protocol):
    """Receives elapsed-time samples, in seconds.

    The tracker never reads the sink back and treats failures raised from
    ``add_sample`` as the sink's own business.
    """

    def add_sample(self, elapsed: float) -> Any:
        """Record one elapsed-time sample."""
        ...


@runtime_checkable
class LevelCallback(Protocol):
    """Called as ``callback(running, tracker)`` when a watched level is hit."""

    def __call__(self, running: int, tracker: Any) -> Any: ...
