"""
Logarithmic time-bucket histogram.

Bins elapsed times into one bucket per multiplicative step of
``log_base ** (1 / grades)``, starting at ``min_time``. Bucket 0 collects
zero, negative and sub-floor samples. Memory grows with the logarithm of
the largest sample, never with the number of samples.

Bucketing:
    ::

        elapsed <= 0 or NaN       → bucket 0
        elapsed = inf             → bucket of the largest float
        raw = grades * log(elapsed / min_time) / log(log_base)
        r   = round_half_up(raw)
        r < 0                     → bucket 0
        otherwise                 → bucket r + 1

        representative(i) = log_base ** ((i - 1) / grades) * min_time   (i > 0)

Examples:
    >>> hist = LogBucketHistogram()
    >>> hist.add_sample(0.001)
    >>> hist.distribution()
    {'0.001': 1}
    >>> hist.bucket_index(0)
    0
"""

from __future__ import annotations

import math
import sys

from guardstats.core.errors import InvalidConfigError


class LogBucketHistogram:
    """Counts of elapsed-time samples per logarithmic bucket.

    Satisfies the :class:`~guardstats.core.protocols.TimeSink` protocol, so it
    can also be handed to a tracker explicitly, e.g. to share one histogram
    between several trackers.
    """

    def __init__(self, log_base: float = 10.0, grades: int = 10, min_time: float = 1e-6):
        if log_base <= 1:
            raise InvalidConfigError("log_base", log_base, "log_base must be greater than 1")
        if grades < 1:
            raise InvalidConfigError("grades", grades, "grades must be at least 1")
        if min_time <= 0:
            raise InvalidConfigError("min_time", min_time, "min_time must be positive")

        self.log_base = log_base
        self.grades = grades
        self.min_time = min_time
        self._log_base = math.log(log_base)
        self._log_min_time = math.log(min_time)
        self._counts: list[int] = []

    def bucket_index(self, elapsed: float) -> int:
        """Return the bucket a sample of ``elapsed`` seconds falls into."""
        if not elapsed or math.isnan(elapsed) or elapsed <= 0:
            return 0
        elapsed = min(elapsed, sys.float_info.max)
        raw = self.grades * (math.log(elapsed) - self._log_min_time) / self._log_base
        rounded = math.floor(raw + 0.5)
        if rounded < 0:
            return 0
        return rounded + 1

    def bucket_value(self, index: int) -> float:
        """Representative time of bucket ``index`` (0.0 for bucket 0)."""
        if index <= 0:
            return 0.0
        try:
            value = self.log_base ** ((index - 1) / self.grades) * self.min_time
        except OverflowError:
            return sys.float_info.max
        return min(value, sys.float_info.max)

    def bucket_label(self, index: int) -> str:
        """Label of bucket ``index``: ``"0"`` or the value to 3 significant figures."""
        if index <= 0:
            return "0"
        return f"{self.bucket_value(index):.3g}"

    def add_sample(self, elapsed: float) -> None:
        """Count one elapsed-time sample."""
        index = self.bucket_index(elapsed)
        if index >= len(self._counts):
            self._counts.extend([0] * (index + 1 - len(self._counts)))
        self._counts[index] += 1

    @property
    def counts(self) -> list[int]:
        """Per-bucket counts (a copy), indexed by bucket."""
        return list(self._counts)

    @property
    def count(self) -> int:
        """Total number of samples."""
        return sum(self._counts)

    def distribution(self) -> dict[str, int]:
        """Map bucket label to count, skipping empty buckets.

        Buckets whose labels coincide at 3 significant figures (possible with
        a large ``grades``) are merged under one label.
        """
        result: dict[str, int] = {}
        for index, count in enumerate(self._counts):
            if not count:
                continue
            label = self.bucket_label(index)
            result[label] = result.get(label, 0) + count
        return result

    def reset(self) -> None:
        """Forget all samples."""
        self._counts.clear()

    def __repr__(self) -> str:
        return (
            f"LogBucketHistogram(log_base={self.log_base}, grades={self.grades}, "
            f"min_time={self.min_time}, count={self.count})"
        )
