"""
Root Typer application for the guardstats CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from guardstats.cli.demo import demo, show_config
from guardstats.core.logging import configure_logging
from guardstats.core.settings import get_settings

app = Typer(
    name="guardstats",
    help="guardstats - count in-flight operations with guard objects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("guardstats")
        except PackageNotFoundError:
            from guardstats import __version__ as v
        typer.echo(f"guardstats {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override GUARDSTATS_LOG_LEVEL."),
) -> None:
    """guardstats CLI - simulate guarded workloads and inspect settings."""
    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_format == "json",
    )


app.command("demo")(demo)
app.command("config")(show_config)


if __name__ == "__main__":
    app()
