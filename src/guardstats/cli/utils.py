"""
CLI utility helpers - output formatting.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from guardstats.guards import GuardStats

console = Console()


def print_json(data: Any) -> None:
    """Print plain JSON (no rich markup) to stdout."""
    console.print_json(json.dumps(data, default=str))


def stats_table(stats: GuardStats, title: str = "Guards") -> Table:
    """Render counters as a two-column table."""
    table = Table(title=title)
    table.add_column("Counter", style="cyan")
    table.add_column("Value", justify="right")
    for key in ("total", "running", "finished", "zombie", "complete", "broken", "alive", "dead"):
        table.add_row(key, str(getattr(stats, key)))
    return table


def mapping_table(data: dict[str, Any], title: str, key_header: str, value_header: str) -> Table:
    table = Table(title=title)
    table.add_column(key_header, style="cyan")
    table.add_column(value_header, justify="right")
    for key, value in data.items():
        table.add_row(repr(key) if key == "" else str(key), str(value))
    return table


def output_stats(stats: GuardStats, distribution: dict[str, int], *, as_json: bool = False) -> None:
    """Print stats plus the time distribution, as tables or JSON."""
    if as_json:
        print_json({"stats": stats.to_dict(), "time_distribution": distribution})
        return

    console.print(stats_table(stats))
    if stats.result_tally:
        console.print(mapping_table(stats.result_tally, "Results", "Result", "Count"))
    if distribution:
        console.print(mapping_table(distribution, "Time distribution (s)", "Bucket", "Count"))
