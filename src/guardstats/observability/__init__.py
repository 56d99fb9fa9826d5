"""Observability helpers for guardstats: the log-bucket time histogram."""

from guardstats.observability.histogram import LogBucketHistogram

__all__ = ["LogBucketHistogram"]
