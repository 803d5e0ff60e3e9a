"""CLI interface for storagemeter."""

import json
from pathlib import Path
from typing import Optional

import typer

from storagemeter import __version__
from storagemeter.config import load_config, resolve_limit
from storagemeter.display import console, show_categories, show_report, show_scanning_progress
from storagemeter.engine import StorageReporter
from storagemeter.errors import ConfigurationError
from storagemeter.formatting import format_size, parse_size
from storagemeter.log import setup_logging
from storagemeter.models import DB_LABEL

# Create Typer app
app = typer.Typer(
    name="storagemeter",
    help="Report application storage usage by category against a soft limit",
    add_completion=False,
)

ConfigOption = typer.Option(
    None, "--config", "-c", help="Path to config.json (default: ~/.storagemeter/config.json)"
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"storagemeter version {__version__}")
        raise typer.Exit()


def _load_reporter(config_path: Optional[Path]) -> StorageReporter:
    try:
        return StorageReporter(load_config(config_path))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(2)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    """storagemeter - storage usage report."""
    setup_logging(verbose)
    # If no command specified, print the report
    if ctx.invoked_subcommand is None:
        report(config=None, as_json=False, strict=False, db_size=None)


@app.command()
def report(
    config: Optional[Path] = ConfigOption,
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with status 1 if any path could not be measured"
    ),
    db_size: Optional[str] = typer.Option(
        None, "--db-size", help="Database size to include, e.g. '120MB'"
    ),
) -> None:
    """Measure storage usage and show the report."""
    reporter = _load_reporter(config)

    extras = {}
    if db_size is not None:
        try:
            extras[DB_LABEL] = parse_size(db_size)
        except ConfigurationError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(2)

    if as_json:
        result = reporter.produce_report(extras=extras)
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        with show_scanning_progress() as progress:
            task = progress.add_task("Measuring...", total=None)

            def update_progress(path: str, current: int, total: int):
                progress.update(
                    task, completed=current, total=total, description=f"Measuring {path}"
                )

            result = reporter.produce_report(extras=extras, progress_callback=update_progress)

        show_report(result)

    if strict and result.partial:
        raise typer.Exit(1)


@app.command()
def categories(config: Optional[Path] = ConfigOption) -> None:
    """List configured categories and their paths."""
    reporter = _load_reporter(config)
    show_categories(reporter.catalog)


@app.command()
def limit(config: Optional[Path] = ConfigOption) -> None:
    """Show the configured soft limit."""
    try:
        size_limit = resolve_limit(load_config(config))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(2)

    if size_limit is None:
        console.print("Storage limit: [dim]unlimited[/dim]")
    else:
        console.print(f"Storage limit: [bold]{format_size(size_limit)}[/bold] ({size_limit} bytes)")


@app.command()
def tui(config: Optional[Path] = ConfigOption) -> None:
    """Launch the interactive storage view."""
    reporter = _load_reporter(config)
    try:
        from storagemeter.tui import run_tui
    except ImportError:
        console.print("[red]TUI not available.[/red]")
        console.print("Install with: [bold]pip install storagemeter[tui][/bold]")
        raise typer.Exit(1)

    run_tui(reporter)


if __name__ == "__main__":
    app()
