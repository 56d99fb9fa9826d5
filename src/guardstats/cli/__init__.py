"""guardstats command-line interface (``guardstats``)."""
