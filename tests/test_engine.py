"""Tests for the report engine."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from storagemeter.engine import StorageReporter
from storagemeter.errors import ConfigurationError, MeasurementFailure
from storagemeter.models import CategoryConfig, StorageConfig


def write_bytes(path: Path, size: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)


@pytest.fixture
def app_root():
    """Application tree: assets 100, cache 200, plugins 300, 400 elsewhere."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        write_bytes(root / "assets" / "image.png", 100)
        write_bytes(root / "cache" / "build" / "course.zip", 200)
        write_bytes(root / "plugins" / "adapt-text" / "index.js", 300)
        write_bytes(root / "app.log", 150)
        write_bytes(root / "lib" / "server.js", 250)
        yield root


def standard_config(root: Path, **kwargs) -> StorageConfig:
    return StorageConfig(
        root_dir=str(root),
        categories={
            "assets": CategoryConfig(paths=["assets"]),
            "cache": CategoryConfig(paths=["cache"]),
            "plugins": CategoryConfig(paths=["plugins"]),
            "total": CategoryConfig(paths=["."]),
        },
        **kwargs,
    )


class TestStorageReporter:
    def test_standard_scenario(self, app_root):
        reporter = StorageReporter(standard_config(app_root, storage_limit=None))
        report = reporter.produce_report()

        assert report["assets"].raw == 100
        assert report["cache"].raw == 200
        assert report["plugins"].raw == 300
        assert report["total"].raw == 1000
        assert report["system"].raw == 400
        assert not report.partial

    def test_limit_exceeded(self, app_root):
        reporter = StorageReporter(standard_config(app_root, storage_limit="500"))
        report = reporter.produce_report()

        assert report["free"] is None
        assert report["total"].percent_of_limit == 200
        assert report["limit"].formatted == "500 B"

    def test_no_limit(self, app_root):
        reporter = StorageReporter(standard_config(app_root, storage_limit=None))
        report = reporter.produce_report()

        assert reporter.limit is None
        assert "free" not in report
        assert all(f.percent_of_limit is None for f in report.figures.values())

    def test_zero_limit_is_unlimited(self, app_root):
        reporter = StorageReporter(standard_config(app_root, storage_limit="0"))
        assert reporter.limit is None

    def test_default_limit(self, app_root):
        reporter = StorageReporter(standard_config(app_root))
        report = reporter.produce_report()
        assert reporter.limit == 512 * 1024**2
        assert report["free"].raw == 512 * 1024**2 - 1000
        assert report["limit"].formatted == "512 MB"

    def test_db_figure_merged(self, app_root):
        reporter = StorageReporter(standard_config(app_root, storage_limit=None))
        report = reporter.produce_report(extras={"db": 2048})
        assert report["db"].raw == 2048
        assert report["db"].formatted == "2 KB"

    def test_extra_clashing_with_category_rejected(self, app_root):
        reporter = StorageReporter(standard_config(app_root))
        with pytest.raises(ValueError):
            reporter.produce_report(extras={"assets": 1})

    def test_negative_extra_rejected(self, app_root):
        reporter = StorageReporter(standard_config(app_root))
        with pytest.raises(ValueError):
            reporter.produce_report(extras={"db": -1})

    def test_missing_path_is_partial_not_silent_zero(self, app_root):
        config = StorageConfig(
            root_dir=str(app_root),
            storage_limit=None,
            categories={
                "assets": CategoryConfig(paths=["assets", "missing"]),
                "total": CategoryConfig(paths=["."]),
            },
        )
        report = StorageReporter(config).produce_report()

        assert report.partial
        assert report["assets"].raw == 100
        assert report.failures["assets"][0].path == str(app_root / "missing")
        with pytest.raises(MeasurementFailure) as exc_info:
            report.raise_for_failures()
        assert exc_info.value.path == str(app_root / "missing")

    def test_reserved_category_name_rejected(self, app_root):
        config = StorageConfig(
            root_dir=str(app_root),
            categories={"free": CategoryConfig(paths=["assets"])},
        )
        with pytest.raises(ConfigurationError):
            StorageReporter(config)

    def test_bad_limit_rejected(self, app_root):
        with pytest.raises(ConfigurationError):
            StorageReporter(standard_config(app_root, storage_limit="huge"))

    def test_injected_measurer(self, app_root):
        measurer = MagicMock()
        measurer.measure.return_value = 10
        reporter = StorageReporter(standard_config(app_root, storage_limit=None), measurer=measurer)
        report = reporter.produce_report()

        assert measurer.measure.call_count == 4
        assert report["total"].raw == 10
        # 10 - 30 is clamped
        assert report["system"].raw == 0
        assert report.warnings

    def test_reports_are_independent(self, app_root):
        reporter = StorageReporter(standard_config(app_root, storage_limit=None))
        first = reporter.produce_report()
        write_bytes(app_root / "assets" / "more.png", 50)
        second = reporter.produce_report()

        assert first["assets"].raw == 100
        assert second["assets"].raw == 150
