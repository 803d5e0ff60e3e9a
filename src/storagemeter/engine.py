"""The storage report engine."""

import logging
from typing import Callable, Optional

from storagemeter.aggregator import aggregate
from storagemeter.catalog import CategoryCatalog
from storagemeter.config import build_catalog, resolve_limit
from storagemeter.errors import ConfigurationError
from storagemeter.models import FREE_LABEL, LIMIT_LABEL, SYSTEM_LABEL, Report, StorageConfig
from storagemeter.probe import PathMeasurer, get_measurer
from storagemeter.report import build_report

logger = logging.getLogger(__name__)

RESERVED_LABELS = {LIMIT_LABEL, SYSTEM_LABEL, FREE_LABEL}


class StorageReporter:
    """
    Produces storage reports for one configured application.

    The catalog, limit and measurer are fixed at construction and only read
    afterwards, so one reporter can serve concurrent callers.
    """

    def __init__(self, config: StorageConfig, measurer: Optional[PathMeasurer] = None):
        self.config = config
        self.limit = resolve_limit(config)
        self.catalog: CategoryCatalog = build_catalog(config)
        self.measurer = measurer or get_measurer(config.measurer)
        self.max_workers = config.max_workers

        clashes = self.catalog.names() & RESERVED_LABELS
        if clashes:
            raise ConfigurationError(f"Reserved category names: {', '.join(sorted(clashes))}")

        for first, second in self.catalog.overlapping_paths():
            logger.warning("Categories %s and %s have overlapping paths", first, second)

        logger.debug(
            "Reporter ready: %d categories, limit=%s", len(self.catalog), self.limit
        )

    def produce_report(
        self,
        extras: Optional[dict[str, Optional[int]]] = None,
        progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> Report:
        """
        Measure every category and build a fresh report.

        Args:
            extras: Opaque figures to include verbatim, such as {"db": size}
            progress_callback: Optional callback(path, current, total)

        Returns:
            Report; failed paths are listed in Report.failures
        """
        extras = dict(extras or {})
        for label, value in extras.items():
            if label in self.catalog or label in RESERVED_LABELS:
                raise ValueError(f"Extra figure {label!r} clashes with a report label")
            if value is not None and value < 0:
                raise ValueError(f"Extra figure {label!r} cannot be negative")

        raw = aggregate(
            self.catalog,
            self.limit,
            self.measurer,
            extras=extras,
            max_workers=self.max_workers,
            progress_callback=progress_callback,
        )
        report = build_report(raw, self.limit)

        if report.partial:
            logger.warning("Partial report: %s could not be fully measured",
                           ", ".join(sorted(report.failures)))
        logger.debug("Report produced at %s", report.timestamp.isoformat())
        return report
