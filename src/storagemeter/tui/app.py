"""Main TUI application for storagemeter."""

from textual.app import App
from textual.binding import Binding

from storagemeter.engine import StorageReporter
from storagemeter.models import Report
from storagemeter.tui.screens import ReportScreen


class StorageMeterApp(App):
    """Interactive storage usage view."""

    TITLE = "storagemeter"
    SUB_TITLE = "Storage Usage"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("d", "toggle_dark", "Toggle Dark"),
    ]

    def __init__(self, reporter: StorageReporter):
        super().__init__()
        self.reporter = reporter
        self.report: Report | None = None

    def on_mount(self) -> None:
        """Called when the app is mounted."""
        self.push_screen(ReportScreen())

    def action_toggle_dark(self) -> None:
        """Toggle dark mode."""
        self.theme = "textual-light" if self.theme == "textual-dark" else "textual-dark"

    def action_refresh(self) -> None:
        """Measure again."""
        screen = self.screen
        if hasattr(screen, "refresh_data"):
            screen.refresh_data()


def run_tui(reporter: StorageReporter) -> None:
    """Run the interactive storage view.

    Args:
        reporter: Configured reporter to measure with
    """
    app = StorageMeterApp(reporter)
    app.run()
