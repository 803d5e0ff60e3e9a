"""Report assembly for storagemeter."""

from typing import Optional

from storagemeter.formatting import format_size, percent_of_limit
from storagemeter.models import (
    FREE_LABEL,
    LIMIT_LABEL,
    SYSTEM_LABEL,
    RawReport,
    Report,
    UsageFigure,
)


def make_figure(raw: Optional[int], limit: Optional[int]) -> UsageFigure:
    """Decorate a raw byte count with its formatted size and percent of limit."""
    return UsageFigure(
        raw=raw,
        formatted=format_size(raw),
        percent_of_limit=percent_of_limit(raw, limit),
    )


def build_report(raw: RawReport, limit: Optional[int]) -> Report:
    """
    Turn an aggregation result into a Report.

    Categories come first, then limit, system, free and the extras. free is
    only present when a limit is configured and is None when total exceeds it.
    system and free are unavailable figures when total could not be measured.
    """
    figures: dict[str, Optional[UsageFigure]] = {}
    failures = {}
    warnings = []

    for name, usage in raw.categories.items():
        figures[name] = make_figure(usage.raw, limit)
        if usage.failed:
            failures[name] = [m for m in usage.measurements if m.failed]

    if limit is not None:
        figures[LIMIT_LABEL] = make_figure(limit, limit)

    incomplete = []
    total_failed = raw.total_name in failures
    if raw.total_name is not None:
        # None when total itself failed, shown as unavailable
        figures[SYSTEM_LABEL] = make_figure(raw.system, limit)
        if failures:
            incomplete.append(SYSTEM_LABEL)
    if raw.overlap:
        warnings.append(
            "Tracked categories add up to more than the total; system usage clamped to 0"
        )

    if limit is not None and raw.total_name is not None:
        if total_failed:
            figures[FREE_LABEL] = make_figure(None, limit)
            incomplete.append(FREE_LABEL)
        elif raw.free is not None:
            figures[FREE_LABEL] = make_figure(raw.free, limit)
        else:
            figures[FREE_LABEL] = None

    for label, value in raw.extras.items():
        figures[label] = make_figure(value, limit)

    return Report(
        timestamp=raw.timestamp,
        figures=figures,
        total_label=raw.total_name,
        failures=failures,
        incomplete=incomplete,
        warnings=warnings,
    )
