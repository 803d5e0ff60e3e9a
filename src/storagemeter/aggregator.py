"""Concurrent aggregation of category sizes."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Callable, Optional

from storagemeter.catalog import CategoryCatalog
from storagemeter.models import CategoryUsage, PathMeasurement, RawReport
from storagemeter.probe import PathMeasurer, measure_path

logger = logging.getLogger(__name__)


def sum_measurements(name: str, measurements: list[PathMeasurement]) -> CategoryUsage:
    """
    Reduce path measurements to one category figure.

    Failed paths contribute zero and stay on the result so the failure is
    visible in the report.
    """
    raw = sum(m.size_bytes for m in measurements if m.size_bytes is not None)
    return CategoryUsage(name=name, raw=raw, measurements=measurements)


def measure_categories(
    catalog: CategoryCatalog,
    measurer: PathMeasurer,
    max_workers: int = 8,
    progress_callback: Callable[[str, int, int], None] | None = None,
) -> dict[str, CategoryUsage]:
    """
    Measure every path of every category in parallel.

    Args:
        catalog: Categories to measure
        measurer: Path measurement primitive
        max_workers: Number of parallel workers
        progress_callback: Optional callback(path, current, total)

    Returns:
        CategoryUsage per category name
    """
    jobs = [
        (category.name, index, path)
        for category in catalog
        for index, path in enumerate(category.paths)
    ]
    slots: dict[str, list[Optional[PathMeasurement]]] = {
        category.name: [None] * len(category.paths) for category in catalog
    }

    if jobs:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_job = {
                executor.submit(measure_path, measurer, path): (name, index, path)
                for name, index, path in jobs
            }

            for i, future in enumerate(as_completed(future_to_job)):
                name, index, path = future_to_job[future]
                if progress_callback:
                    progress_callback(path, i + 1, len(jobs))
                slots[name][index] = future.result()

    return {
        name: sum_measurements(name, [m for m in measurements if m is not None])
        for name, measurements in slots.items()
    }


def derive_system(
    catalog: CategoryCatalog, usages: dict[str, CategoryUsage]
) -> tuple[Optional[int], bool]:
    """
    Usage inside total that no enclosed category accounts for.

    Returns:
        Tuple of (system bytes, overlap flag). System is None without a total
        category or when total could not be fully measured. When the enclosed
        categories add up to more than total the figure is clamped to zero and
        the overlap flag is set.
    """
    total_name = catalog.total_name
    if total_name is None or usages[total_name].failed:
        return None, False

    total = usages[total_name].raw
    attributed = sum(usages[name].raw for name in catalog.top_level())
    system = total - attributed
    if system < 0:
        logger.warning(
            "Categories account for %d bytes but total is %d; clamping system usage to 0",
            attributed,
            total,
        )
        return 0, True
    return system, False


def derive_free(total: Optional[int], limit: Optional[int]) -> Optional[int]:
    """Space left under the limit, or None when there is no limit or it is exceeded."""
    if limit is None or total is None:
        return None
    free = limit - total
    return free if free >= 0 else None


def aggregate(
    catalog: CategoryCatalog,
    limit: Optional[int],
    measurer: PathMeasurer,
    extras: Optional[dict[str, Optional[int]]] = None,
    max_workers: int = 8,
    progress_callback: Callable[[str, int, int], None] | None = None,
) -> RawReport:
    """
    Measure all categories and derive the synthetic figures.

    Args:
        catalog: Categories to measure
        limit: Soft limit in bytes, None for unlimited
        measurer: Path measurement primitive
        extras: Externally supplied figures passed through unchanged (e.g. db)
        max_workers: Number of parallel workers
        progress_callback: Optional callback(path, current, total)

    Returns:
        RawReport with unformatted figures
    """
    timestamp = datetime.now()
    usages = measure_categories(
        catalog, measurer, max_workers=max_workers, progress_callback=progress_callback
    )

    system, overlap = derive_system(catalog, usages)
    total = None
    if catalog.total_name and not usages[catalog.total_name].failed:
        total = usages[catalog.total_name].raw

    return RawReport(
        timestamp=timestamp,
        limit=limit,
        categories=usages,
        total_name=catalog.total_name,
        system=system,
        free=derive_free(total, limit),
        extras=dict(extras or {}),
        overlap=overlap,
    )
