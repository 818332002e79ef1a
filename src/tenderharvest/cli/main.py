"""
TenderHarvest CLI - Main entry point.

A terminal-first harvester that collects municipal procurement tenders
from many unrelated sites into one CSV layout.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.traceback import install as install_rich_traceback

from tenderharvest import __app_name__, __version__

load_dotenv()
install_rich_traceback(show_locals=False, width=120)

# Municipal names and tender text are not always cp1252-safe
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(encoding="utf-8", errors="replace")

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)

app = typer.Typer(
    name=__app_name__,
    help="Harvest municipal procurement tenders into one CSV layout",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(
        Path("configs/app.yaml"),
        "--config",
        "-c",
        help="Application config file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log at DEBUG level",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """TenderHarvest - Municipal tender harvester."""
    from tenderharvest.core.config import ConfigError, load_app_config
    from tenderharvest.core.logging import setup_logging

    try:
        app_config = load_app_config(config)
    except ConfigError as e:
        err_console.print(f"[red]Error loading app config:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    log_config = app_config.logging
    setup_logging(
        level="DEBUG" if verbose else log_config.level,
        log_file=log_config.file,
        json_format=log_config.json_format,
        rich_console=log_config.rich_console,
    )

    ctx.obj = app_config


# =============================================================================
# Subcommands
# =============================================================================

from .commands import scrape, sources  # noqa: E402

app.add_typer(sources.app, name="sources", help="Inspect and validate source configurations")
app.add_typer(scrape.app, name="scrape", help="Run harvests and merge results")


# =============================================================================
# Entry point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
