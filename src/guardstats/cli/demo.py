"""
CLI: ``guardstats demo`` - simulate pending callbacks on an asyncio loop.

Schedules ``--count`` callbacks with random delays. A ``--leak-rate``
fraction of them is dropped without ever being scheduled, which is what a
lost callback looks like to the tracker: its guard is reclaimed without
being finished and counts as broken.
"""

from __future__ import annotations

import asyncio
import gc
import random

import typer

from guardstats.cli.utils import console, mapping_table, output_stats, print_json
from guardstats.core.logging import get_logger
from guardstats.core.settings import get_settings
from guardstats.guards import GuardTracker, guard_callback

logger = get_logger(__name__)

ROUTES = ("route-a", "route-b")


async def simulate(
    tracker: GuardTracker,
    count: int,
    leak_rate: float,
    max_delay: float,
    rng: random.Random,
) -> None:
    """Run ``count`` guarded callbacks on the running loop and wait for them."""
    loop = asyncio.get_running_loop()

    def _work() -> None:
        pass

    for _ in range(count):
        callback = guard_callback(tracker, _work, result=rng.choice(ROUTES))
        if rng.random() < leak_rate:
            del callback
            continue
        loop.call_later(rng.uniform(0, max_delay), callback)
        del callback

    await asyncio.sleep(max_delay + 0.01)


def run_demo(
    count: int,
    leak_rate: float,
    max_delay: float,
    seed: int | None,
    warn_level: int | None,
) -> GuardTracker:
    tracker = GuardTracker.from_settings(track_time=True, name="demo")

    if warn_level is not None:

        def _on_high(running: int, _tracker: GuardTracker) -> None:
            logger.warning("demo.running.high", running=running)

        def _on_drained(running: int, _tracker: GuardTracker) -> None:
            logger.info("demo.running.drained", running=running)

        tracker.on_level(warn_level, _on_high).on_level(0, _on_drained)

    asyncio.run(simulate(tracker, count, leak_rate, max_delay, random.Random(seed)))
    # Timer handles released by the loop may sit in reference cycles.
    gc.collect()
    return tracker


def demo(
    count: int = typer.Option(100, "--count", "-n", min=0, help="Callbacks to schedule."),
    leak_rate: float = typer.Option(0.1, "--leak-rate", min=0.0, max=1.0, help="Fraction never scheduled."),
    max_delay: float = typer.Option(0.05, "--max-delay", min=0.0, help="Largest callback delay, seconds."),
    seed: int | None = typer.Option(None, "--seed", help="Random seed for a repeatable run."),
    warn_level: int | None = typer.Option(None, "--warn-level", min=1, help="Log when this many are running."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Simulate pending callbacks and print the guard statistics."""
    tracker = run_demo(count, leak_rate, max_delay, seed, warn_level)
    output_stats(tracker.get_stats(), tracker.get_time_distribution(), as_json=json_out)
    if not json_out and tracker.broken:
        console.print(f"[yellow]{tracker.broken} callbacks were dropped without running[/yellow]")


def show_config(json_out: bool = typer.Option(False, "--json")) -> None:
    """Show the effective settings."""
    data = get_settings().model_dump()
    if json_out:
        print_json(data)
    else:
        console.print(mapping_table(data, "Settings", "Setting", "Value"))
