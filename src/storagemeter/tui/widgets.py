"""Custom widgets for the storagemeter TUI."""

from textual.widgets import Static

from storagemeter.display import usage_bar, usage_color
from storagemeter.models import FREE_LABEL, LIMIT_LABEL, Report


class LimitBar(Static):
    """Total usage against the soft limit."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.report: Report | None = None

    def update_report(self, report: Report) -> None:
        """Show a new report."""
        self.report = report
        self.refresh()

    def render(self) -> str:
        """Render the limit bar."""
        if not self.report:
            return "[dim]Measuring storage...[/dim]"

        report = self.report
        if LIMIT_LABEL not in report:
            return "[bold]Storage:[/bold] [dim]no limit configured[/dim]"

        limit = report[LIMIT_LABEL]
        total = report.figures.get(report.total_label) if report.total_label else None
        if total is None or total.percent_of_limit is None:
            return f"[bold]Limit:[/bold] {limit.formatted}"

        percent = total.percent_of_limit
        color = usage_color(percent)
        free = report.figures.get(FREE_LABEL)
        free_text = free.formatted if free is not None else "[red]over limit[/red]"

        return (
            f"[bold]Storage:[/bold] [{color}]{total.formatted}[/{color}] of {limit.formatted}\n"
            f"{usage_bar(percent)} {percent}%\n"
            f"[dim]Free:[/dim] {free_text}"
        )
