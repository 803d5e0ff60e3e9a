"""Interactive storage view for storagemeter."""

from storagemeter.tui.app import StorageMeterApp, run_tui

__all__ = ["StorageMeterApp", "run_tui"]
