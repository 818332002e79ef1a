"""
Source management commands.

Commands for listing, inspecting and validating source configurations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tenderharvest.core.config import (
    AppConfig,
    ConfigError,
    SourceRegistry,
    UnknownSourceError,
    source_config_files,
    validate_source_config_file,
)

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)

app = typer.Typer(
    help="Inspect and validate source configurations",
    no_args_is_help=True,
)


def load_registry(app_config: AppConfig) -> SourceRegistry:
    """Build the source registry or exit with a config error."""
    try:
        return SourceRegistry.from_directory(app_config.sources_dir)
    except ConfigError as e:
        err_console.print(f"[red]Error loading source configs:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)


@app.command("list")
def list_sources(
    ctx: typer.Context,
    enabled_only: bool = typer.Option(
        False,
        "--enabled",
        "-e",
        help="Show only enabled sources",
    ),
) -> None:
    """List all configured sources."""
    app_config: AppConfig = ctx.obj
    registry = load_registry(app_config)

    sources = registry.enabled() if enabled_only else list(registry.values())
    if not sources:
        console.print("[dim]No sources configured.[/dim]")
        console.print(f"[dim]Looked in: {app_config.sources_dir}[/dim]")
        return

    table = Table(title="Configured Sources", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Source")
    table.add_column("Province")
    table.add_column("URLs", justify="right")
    table.add_column("Documents", justify="center")
    table.add_column("Status", justify="center")

    for source in sources:
        status = "[green]+ Enabled[/green]" if source.enabled else "[red]x Disabled[/red]"
        documents = "[dim]-[/dim]" if source.html_only else "[green]yes[/green]"
        table.add_row(
            source.id,
            source.short_name,
            source.province or "[dim]-[/dim]",
            str(len(source.listing_urls)),
            documents,
            status,
        )

    console.print(table)


@app.command("show")
def show_source(
    ctx: typer.Context,
    source_id: str = typer.Argument(..., help="Source id"),
) -> None:
    """Show detailed source configuration."""
    registry = load_registry(ctx.obj)

    try:
        source = registry.get_source(source_id)
    except UnknownSourceError as e:
        err_console.print(f"[red]{e}[/red]")
        if e.available:
            err_console.print(f"[dim]Available: {', '.join(e.available)}[/dim]")
        raise typer.Exit(1)

    urls = "\n".join(f"  - {url}" for url in source.listing_urls)
    console.print()
    console.print(Panel.fit(
        f"[bold]Name:[/bold] {source.effective_name}\n"
        f"[bold]Short Name:[/bold] {source.short_name}\n"
        f"[bold]Organ Of State:[/bold] {source.organ_of_state}\n"
        f"[bold]Province:[/bold] {source.province or '-'}\n"
        f"[bold]Place:[/bold] {source.effective_place}\n"
        f"[bold]Base URL:[/bold] {source.base_url_str}\n"
        f"[bold]Listing URLs:[/bold]\n{urls}\n"
        f"[bold]Listing Style:[/bold] {source.listing_style.value}\n"
        f"[bold]Link Selector:[/bold] {source.link_selector}\n"
        f"[bold]Context Selector:[/bold] {source.context_selector}\n"
        f"[bold]Forced Source URL:[/bold] {source.force_source_url or '-'}\n"
        f"[bold]Insecure TLS:[/bold] {'Yes' if source.insecure_tls else 'No'}\n"
        f"[bold]HTML Only:[/bold] {'Yes' if source.html_only else 'No'}\n"
        f"[bold]Default Limit:[/bold] {source.default_limit}\n"
        f"[bold]CSV File:[/bold] {source.effective_csv_filename}\n"
        f"[bold]Enabled:[/bold] {'Yes' if source.enabled else 'No'}",
        title=f"[bold cyan]Source: {source.id}[/bold cyan]",
        border_style="cyan",
    ))


@app.command("validate")
def validate_sources(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(
        None,
        help="Source YAML file or directory (default: configured sources dir)",
    ),
) -> None:
    """Validate source configuration files."""
    app_config: AppConfig = ctx.obj
    target = path or app_config.sources_dir

    files = source_config_files(target) if target.is_dir() else [target]

    if not files:
        console.print(f"[dim]No source configurations found in {target}[/dim]")
        return

    failed = 0
    for config_file in files:
        errors = validate_source_config_file(config_file)
        if errors:
            failed += 1
            err_console.print(f"[red]x[/red] {config_file.name}")
            for error in errors:
                err_console.print(f"    [dim]{error}[/dim]")
        else:
            console.print(f"[green]OK[/green] {config_file.name}")

    if failed == 0 and target.is_dir():
        # Ids must also be unique across files
        load_registry(app_config.model_copy(update={"sources_dir": target}))

    console.print()
    console.print(f"[bold]{len(files) - failed}/{len(files)} valid[/bold]")

    if failed:
        raise typer.Exit(1)
