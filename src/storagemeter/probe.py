"""Path size measurement for storagemeter."""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Protocol, Union

from storagemeter.errors import ConfigurationError, MeasurementFailure
from storagemeter.models import MeasurerKind, PathMeasurement

logger = logging.getLogger(__name__)

DU_TIMEOUT = 120  # seconds


def expand_path(path: Union[str, Path], root: Union[str, Path, None] = None) -> Path:
    """Expand ~ and environment variables, resolving relative paths against root."""
    expanded = Path(os.path.expanduser(os.path.expandvars(str(path))))
    if root is not None and not expanded.is_absolute():
        expanded = expand_path(root) / expanded
    return expanded


class PathMeasurer(Protocol):
    """Measures the total size of a path, including everything below it."""

    def measure(self, path: Path) -> int:
        """Return the size in bytes, or raise MeasurementFailure."""
        ...


class ScandirMeasurer:
    """Native recursive walk summing apparent file sizes. Symlinks are not followed."""

    def measure(self, path: Path) -> int:
        path = Path(path)
        try:
            st = path.lstat()
        except OSError as e:
            raise MeasurementFailure(str(path), e.strerror or str(e)) from e

        if not path.is_dir() or path.is_symlink():
            return st.st_size
        return self._scan(path)

    def _scan(self, path: Path) -> int:
        # Explicit stack so tree depth is not bounded by the recursion limit
        total_size = 0
        stack = [str(path)]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as entries:
                    for entry in entries:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        else:
                            total_size += entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                raise MeasurementFailure(current, e.strerror or str(e)) from e
        return total_size


class DuMeasurer:
    """Measures with `du -s -B1`, counting allocated blocks like the system tool."""

    def __init__(self, executable: str = "du", timeout: int = DU_TIMEOUT):
        self.executable = executable
        self.timeout = timeout

    def measure(self, path: Path) -> int:
        path = Path(path)
        try:
            result = subprocess.run(
                [self.executable, "-s", "-B1", str(path)],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise MeasurementFailure(str(path), f"{self.executable} not found") from e
        except subprocess.TimeoutExpired as e:
            raise MeasurementFailure(
                str(path), f"{self.executable} timed out after {self.timeout} seconds"
            ) from e

        if result.returncode != 0:
            cause = result.stderr.strip() or f"{self.executable} exited with {result.returncode}"
            raise MeasurementFailure(str(path), cause)

        return _parse_du_output(str(path), result.stdout)


def _parse_du_output(path: str, output: str) -> int:
    """Take the leading byte count of the last non-empty line of du output."""
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        raise MeasurementFailure(path, "no output from du")
    first = lines[-1].split()[0]
    try:
        return int(first)
    except ValueError as e:
        raise MeasurementFailure(path, f"unexpected du output: {lines[-1]!r}") from e


def get_measurer(kind: Union[MeasurerKind, str]) -> PathMeasurer:
    """Create a measurer by name ("scandir" or "du")."""
    try:
        kind = MeasurerKind(kind)
    except ValueError as e:
        raise ConfigurationError(f"Unknown measurer: {kind}") from e

    if kind == MeasurerKind.DU:
        if shutil.which("du") is None:
            raise ConfigurationError("du measurer selected but du is not installed")
        return DuMeasurer()
    return ScandirMeasurer()


def measure_path(measurer: PathMeasurer, path: str) -> PathMeasurement:
    """
    Measure one path and record the outcome.

    A MeasurementFailure is kept on the result instead of being raised; the
    caller decides what a failed path means for its figures.
    """
    try:
        size = measurer.measure(Path(path))
    except MeasurementFailure as e:
        logger.warning("Could not measure %s: %s", e.path, e.cause)
        return PathMeasurement(path=path, size_bytes=None, error=e.cause)

    if size < 0:
        logger.warning("Measurer returned negative size %d for %s", size, path)
        return PathMeasurement(path=path, size_bytes=None, error=f"negative size {size}")

    logger.debug("Measured %s: %d bytes", path, size)
    return PathMeasurement(path=path, size_bytes=size)
