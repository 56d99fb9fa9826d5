"""Allow ``python -m guardstats``."""

from guardstats.cli.app import app

app()
