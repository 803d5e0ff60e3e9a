"""Rich terminal display for storagemeter."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from storagemeter.catalog import CategoryCatalog
from storagemeter.models import FREE_LABEL, LIMIT_LABEL, SYSTEM_LABEL, Report, UsageFigure

console = Console()

DERIVED_LABELS = (LIMIT_LABEL, SYSTEM_LABEL, FREE_LABEL)


def usage_color(percent: int | None) -> str:
    """Color for a percent of the limit."""
    if percent is None:
        return "white"
    if percent >= 90:
        return "red"
    elif percent >= 75:
        return "yellow"
    return "green"


def usage_bar(percent: int, width: int = 40) -> str:
    """Markup for a usage bar, capped at full width."""
    color = usage_color(percent)
    filled = min(width, int(width * percent / 100))
    empty = width - filled
    return f"[{color}]{'█' * filled}[/{color}][dim]{'░' * empty}[/dim]"


def format_percent(figure: UsageFigure | None) -> str:
    if figure is None or figure.percent_of_limit is None:
        return "-"
    color = usage_color(figure.percent_of_limit)
    return f"[{color}]{figure.percent_of_limit}%[/{color}]"


def show_report(report: Report) -> None:
    """Display a storage report."""
    table = Table(title="Storage Usage", show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("Of limit", justify="right")

    for label, figure in report.figures.items():
        if label in DERIVED_LABELS:
            continue
        name = f"[red]{label} ![/red]" if label in report.failures else label
        table.add_row(name, figure.formatted if figure else "unavailable", format_percent(figure))

    if SYSTEM_LABEL in report:
        figure = report[SYSTEM_LABEL]
        name = "[dim]system[/dim]"
        if SYSTEM_LABEL in report.incomplete:
            name += " [yellow]*[/yellow]"
        table.add_row(name, figure.formatted if figure else "unavailable", format_percent(figure))

    console.print(table)
    console.print()

    show_limit_summary(report)
    show_failures(report)


def show_limit_summary(report: Report) -> None:
    """Display the total against the soft limit."""
    if LIMIT_LABEL not in report:
        console.print("[dim]No storage limit configured[/dim]")
        return

    limit = report[LIMIT_LABEL]
    total = report.figures.get(report.total_label) if report.total_label else None
    free = report.figures.get(FREE_LABEL)

    lines = []
    if total is not None and total.percent_of_limit is not None:
        color = usage_color(total.percent_of_limit)
        lines.append(f"{usage_bar(total.percent_of_limit)} {total.percent_of_limit}%")
        lines.append(f"[bold]Used:[/bold] [{color}]{total.formatted}[/{color}] of {limit.formatted}")
    else:
        lines.append(f"[bold]Limit:[/bold] {limit.formatted}")

    if free is not None:
        lines.append(f"[bold]Free:[/bold] {free.formatted}")
    elif FREE_LABEL in report:
        lines.append("[bold red]Over limit[/bold red]")

    console.print(Panel("\n".join(lines), title="Storage Limit", border_style="blue"))


def show_failures(report: Report) -> None:
    """Display failed measurements and warnings."""
    if report.failures:
        console.print()
        console.print("[bold red]! Partial report - some paths could not be measured[/bold red]")
        for label, measurements in report.failures.items():
            for m in measurements:
                console.print(f"  [red]✗[/red] {label}: {m.path} ({m.error})")
        if report.incomplete:
            console.print(f"[dim]Affected derived figures: {', '.join(report.incomplete)}[/dim]")

    for warning in report.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


def show_categories(catalog: CategoryCatalog) -> None:
    """Display configured categories and their paths."""
    console.print("[bold]Configured Categories[/bold]\n")

    for category in catalog:
        marker = " [cyan](total)[/cyan]" if category.name == catalog.total_name else ""
        console.print(f"  • [bold]{category.name}[/bold]{marker}")
        for path in category.paths:
            console.print(f"      [dim]{path}[/dim]")
        if category.encloses and category.name != catalog.total_name:
            console.print(f"      [dim]encloses: {', '.join(category.encloses)}[/dim]")
        if not category.paths:
            console.print("      [dim](no paths)[/dim]")

    overlaps = catalog.overlapping_paths()
    if overlaps:
        console.print()
        for first, second in overlaps:
            console.print(f"[yellow]Warning:[/yellow] {first} and {second} have overlapping paths")


def show_scanning_progress() -> Progress:
    """Create progress bar for measuring."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
