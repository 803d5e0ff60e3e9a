"""Data models for storagemeter."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from storagemeter.errors import MeasurementFailure

# Labels of the synthetic figures
LIMIT_LABEL = "limit"
SYSTEM_LABEL = "system"
FREE_LABEL = "free"
DB_LABEL = "db"


class MeasurerKind(str, Enum):
    """Mechanism used to measure a path."""

    SCANDIR = "scandir"  # Native os.scandir walk (apparent size)
    DU = "du"  # Shell out to du (allocated blocks)


class Category(BaseModel):
    """A named group of paths whose sizes are reported together."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique category name")
    paths: tuple[str, ...] = Field(
        default_factory=tuple, description="Paths to measure, in order"
    )
    encloses: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Categories whose paths lie inside this category's paths",
    )


class PathMeasurement(BaseModel):
    """Result of measuring a single path."""

    path: str = Field(..., description="Path that was measured")
    size_bytes: Optional[int] = Field(None, ge=0, description="Size in bytes, None if failed")
    error: Optional[str] = Field(None, description="Failure cause if measurement failed")

    @property
    def failed(self) -> bool:
        return self.error is not None


class CategoryUsage(BaseModel):
    """Summed measurement of every path in one category."""

    name: str
    raw: int = Field(..., ge=0, description="Sum of the successfully measured paths")
    measurements: list[PathMeasurement] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        """Whether any path of this category could not be measured."""
        return any(m.failed for m in self.measurements)

    @property
    def errors(self) -> list[str]:
        return [f"{m.path}: {m.error}" for m in self.measurements if m.failed]


class RawReport(BaseModel):
    """Unformatted output of one aggregation pass."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    limit: Optional[int] = None
    categories: dict[str, CategoryUsage] = Field(default_factory=dict)
    total_name: Optional[str] = Field(None, description="Name of the enclosing category")
    system: Optional[int] = Field(None, ge=0, description="Usage not attributed to a category")
    free: Optional[int] = Field(None, ge=0, description="Limit minus total, None if exceeded")
    extras: dict[str, Optional[int]] = Field(default_factory=dict)
    overlap: bool = Field(False, description="Enclosed categories summed to more than total")

    @property
    def total(self) -> Optional[int]:
        if self.total_name is None:
            return None
        return self.categories[self.total_name].raw

    @property
    def partial(self) -> bool:
        return any(c.failed for c in self.categories.values())


class UsageFigure(BaseModel):
    """A single reported figure."""

    model_config = ConfigDict(frozen=True)

    raw: Optional[int] = Field(None, ge=0, description="Size in bytes")
    formatted: str = Field(..., description="Human-readable size")
    percent_of_limit: Optional[int] = Field(None, description="Percent of the soft limit")


class Report(BaseModel):
    """Complete storage report from one point-in-time measurement."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    figures: dict[str, Optional[UsageFigure]] = Field(default_factory=dict)
    total_label: Optional[str] = Field(None, description="Label of the enclosing category")
    failures: dict[str, list[PathMeasurement]] = Field(
        default_factory=dict, description="Failed path measurements, by category"
    )
    incomplete: list[str] = Field(
        default_factory=list, description="Derived labels computed from failed categories"
    )
    warnings: list[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        """Whether any figure is based on a failed measurement."""
        return bool(self.failures)

    def __getitem__(self, label: str) -> Optional[UsageFigure]:
        return self.figures[label]

    def __contains__(self, label: object) -> bool:
        return label in self.figures

    def raise_for_failures(self) -> None:
        """Raise the first measurement failure, if any."""
        for measurements in self.failures.values():
            for m in measurements:
                raise MeasurementFailure(m.path, m.error or "unknown error")

    def to_dict(self) -> dict[str, Any]:
        """Serializable view; percent_of_limit is dropped when no limit is set."""
        figures: dict[str, Any] = {}
        for label, figure in self.figures.items():
            if figure is None:
                figures[label] = None
            else:
                figures[label] = figure.model_dump(exclude_none=True)
        result: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "partial": self.partial,
            "figures": figures,
        }
        if self.failures:
            result["failures"] = {
                label: [{"path": m.path, "error": m.error} for m in measurements]
                for label, measurements in self.failures.items()
            }
        if self.incomplete:
            result["incomplete"] = list(self.incomplete)
        if self.warnings:
            result["warnings"] = list(self.warnings)
        return result


# =============================================================================
# Configuration models
# =============================================================================


class CategoryConfig(BaseModel):
    """Configured paths of one category."""

    paths: list[str] = Field(default_factory=list)
    encloses: list[str] = Field(default_factory=list)


class AppLayout(BaseModel):
    """Directories configured by the application's other subsystems."""

    upload_dir: str = Field(..., description="Uploaded assets")
    upload_temp_dir: str = Field(..., description="Temporary upload area")
    build_dir: str = Field(..., description="Course build output")
    framework_dir: str = Field(..., description="Framework checkout; plugins live in its src/")
    plugin_install_dir: str = Field(..., description="Installed plugin packages")


class StorageConfig(BaseModel):
    """Engine configuration, built once at startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    storage_limit: Optional[Union[int, str]] = Field(
        "0.5GB", description="Soft limit on storage size"
    )
    root_dir: str = Field(".", description="Application root; relative paths resolve here")
    measurer: MeasurerKind = MeasurerKind.SCANDIR
    max_workers: int = Field(8, ge=1, description="Parallel path measurements")
    total_category: str = Field("total", description="Category enclosing all others")
    categories: Optional[dict[str, CategoryConfig]] = None
    layout: Optional[AppLayout] = None
