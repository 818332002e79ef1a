"""
Scrape commands for running source harvests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from tenderharvest.core.config import AppConfig, SourceConfig, UnknownSourceError

from .sources import load_registry

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)

app = typer.Typer(
    help="Run harvests and merge results",
    no_args_is_help=True,
)


@app.command("run")
def run_scrape(
    ctx: typer.Context,
    source: Optional[list[str]] = typer.Option(
        None,
        "--source",
        "-s",
        help="Source id to harvest (repeatable)",
    ),
    all_sources: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Harvest all enabled sources",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Maximum records per source (default: per-source limit)",
    ),
    html_only: bool = typer.Option(
        False,
        "--html-only",
        help="Skip linked documents for every source",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for CSV output (default: from app config)",
    ),
) -> None:
    """Harvest one or more sources and write a CSV per source.

    Examples:
        tenderharvest scrape run --source bergrivier
        tenderharvest scrape run --all --html-only
        tenderharvest scrape run -s matjhabeng -n 20
    """
    from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

    from tenderharvest.core.orchestrator import SourceIntegrityError, run_configured_sources
    from tenderharvest.output import CsvSink

    app_config: AppConfig = ctx.obj
    registry = load_registry(app_config)

    if not source and not all_sources:
        err_console.print("[red]Specify --source <id> or --all[/red]")
        if len(registry):
            err_console.print(f"[dim]Available sources: {', '.join(registry)}[/dim]")
        raise typer.Exit(1)

    if source and all_sources:
        err_console.print("[red]Cannot specify both --source and --all[/red]")
        raise typer.Exit(1)

    try:
        configs: list[SourceConfig] = (
            registry.enabled() if all_sources else [registry.get_source(s) for s in source]
        )
    except UnknownSourceError as e:
        err_console.print(f"[red]{e}[/red]")
        if e.available:
            err_console.print(f"[dim]Available: {', '.join(e.available)}[/dim]")
        raise typer.Exit(1)

    if not configs:
        err_console.print("[red]No enabled sources configured[/red]")
        raise typer.Exit(1)

    out_dir = output_dir or app_config.output_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    console.print()
    if len(configs) == 1:
        console.print(f"[bold]Starting harvest for source:[/bold] {configs[0].id}")
    else:
        console.print(f"[bold]Starting harvest for {len(configs)} sources[/bold]")
    if html_only:
        console.print("[yellow]HTML only - linked documents will not be fetched[/yellow]")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("[cyan]Harvesting...[/cyan]", total=None)
        try:
            results = run_configured_sources(
                configs,
                app_config,
                html_only=True if html_only else None,
                limit=limit,
            )
        except SourceIntegrityError as e:
            err_console.print(f"[bold red]Integrity error - batch rejected:[/bold red] {e}")
            err_console.print("[dim]No output was written.[/dim]")
            raise typer.Exit(2)

    sink = CsvSink(out_dir)
    for result in results:
        sink.write(result.records, result.config.effective_csv_filename)

    _show_summary(results, out_dir)


@app.command("merge")
def merge_results(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Combined CSV path (default: <output_dir>/<merged_filename>)",
    ),
) -> None:
    """Merge per-source CSVs into one file, in registry order."""
    from tenderharvest.output import merge_csv_files

    app_config: AppConfig = ctx.obj
    registry = load_registry(app_config)

    paths = [app_config.output_dir / config.effective_csv_filename for config in registry.values()]
    target = output or app_config.output_dir / app_config.merged_filename

    report = merge_csv_files(paths, target)

    for name in report.merged:
        console.print(f"[green]OK[/green] {name}")
    for name in report.skipped:
        console.print(f"[yellow]Skipped[/yellow] {name}")

    console.print()
    if report.rows == 0:
        console.print("[dim]No tender data to merge.[/dim]")
    console.print(f"[bold]Wrote {report.rows} rows to {report.output}[/bold]")


def _show_summary(results, out_dir: Path) -> None:
    """Display harvest summary table."""
    table = Table(title="Harvest Summary", show_header=True, header_style="bold magenta")
    table.add_column("Source", style="cyan")
    table.add_column("Pages", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Documents", justify="right")
    table.add_column("Records", justify="right", style="green")
    table.add_column("File")

    total_records = 0
    for result in results:
        stats = result.stats
        failed = str(stats.pages_failed) if stats.pages_failed else "[dim]0[/dim]"
        if not result.ok:
            failed = f"[red]{len(stats.errors)} error(s)[/red]"
        table.add_row(
            result.config.id,
            str(stats.pages_fetched),
            failed,
            f"{stats.documents_enriched}/{stats.documents_fetched}",
            str(stats.records_emitted),
            result.config.effective_csv_filename,
        )
        total_records += stats.records_emitted

    console.print(table)
    console.print()
    console.print(f"[bold]Total:[/bold] {total_records} records written to {out_dir}")
