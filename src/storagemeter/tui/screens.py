"""TUI screens for storagemeter."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Static

from storagemeter.models import LIMIT_LABEL, Report
from storagemeter.tui.widgets import LimitBar


class ReportScreen(Screen):
    """Storage report with a figure per category."""

    BINDINGS = [
        Binding("r", "refresh", "Refresh"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()

        with Container(id="main-container"):
            yield LimitBar(id="limit-bar")
            yield DataTable(id="figure-table")
            yield Static("", id="failure-info")

        yield Footer()

    def on_mount(self) -> None:
        """Initialize the screen."""
        table = self.query_one("#figure-table", DataTable)
        table.cursor_type = "row"
        table.add_columns("Category", "Size", "Of limit")

        self.refresh_data()

    def action_refresh(self) -> None:
        self.refresh_data()

    def refresh_data(self) -> None:
        """Measure and refresh the figures."""
        self.notify("Measuring storage...", timeout=2)
        # Measurement blocks, keep it off the UI thread
        self.run_worker(self._load_data, thread=True, exclusive=True)

    def _load_data(self) -> None:
        report = self.app.reporter.produce_report()
        self.app.call_from_thread(self._update_table, report)

    def _update_table(self, report: Report) -> None:
        """Store the new report and update the table. Runs on the UI thread."""
        self.app.report = report

        self.query_one("#limit-bar", LimitBar).update_report(report)

        table = self.query_one("#figure-table", DataTable)
        table.clear()
        for label, figure in report.figures.items():
            if label == LIMIT_LABEL:
                continue
            size = figure.formatted if figure is not None else "unavailable"
            percent = (
                f"{figure.percent_of_limit}%"
                if figure is not None and figure.percent_of_limit is not None
                else "-"
            )
            name = f"[red]{label} ![/red]" if label in report.failures else label
            table.add_row(name, size, percent, key=label)

        info = self.query_one("#failure-info", Static)
        if report.partial:
            failed = ", ".join(sorted(report.failures))
            info.update(f"[red]Could not measure all paths of: {failed}[/red]")
        else:
            info.update("")
