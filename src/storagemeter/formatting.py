"""Byte count formatting and parsing."""

import math
import re
from typing import Optional

from storagemeter.errors import ConfigurationError

UNAVAILABLE = "unavailable"

# Binary units, smallest first
UNITS = ["B", "KB", "MB", "GB", "TB", "PB"]
UNIT_MAP = {unit.lower(): 1024**i for i, unit in enumerate(UNITS)}

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(b|kb|mb|gb|tb|pb)?\s*$", re.IGNORECASE)


def format_size(size_bytes: Optional[int], decimals: int = 2, separator: str = " ") -> str:
    """
    Format bytes to a human-readable string.

    Picks the largest binary unit for which the magnitude is at least 1 and
    drops trailing zeros, so 1536 becomes "1.5 KB" and 1024 becomes "1 KB".

    Args:
        size_bytes: Size in bytes, or None when the figure is unavailable
        decimals: Maximum number of decimal places
        separator: Text between the number and the unit

    Returns:
        Formatted size, or "unavailable" for None
    """
    if size_bytes is None:
        return UNAVAILABLE
    if size_bytes < 0:
        raise ValueError(f"Size cannot be negative: {size_bytes}")

    unit_index = 0
    for i in range(len(UNITS) - 1, 0, -1):
        if size_bytes >= 1024**i:
            unit_index = i
            break

    if unit_index == 0:
        return f"{int(size_bytes)}{separator}B"

    value = f"{size_bytes / 1024**unit_index:.{decimals}f}"
    if "." in value:
        value = value.rstrip("0").rstrip(".")
    return f"{value}{separator}{UNITS[unit_index]}"


def parse_size(text: Optional[str]) -> Optional[int]:
    """
    Parse a size string such as "0.5GB", "100 mb" or "2048" into bytes.

    Returns None for None or an empty string. A bare number is bytes.

    Raises:
        ConfigurationError: If the text is not a valid size
    """
    if text is None:
        return None
    if isinstance(text, int):
        if text < 0:
            raise ConfigurationError(f"Invalid size: {text}")
        return text

    text = str(text).strip()
    if not text:
        return None

    match = _SIZE_RE.match(text)
    if not match:
        raise ConfigurationError(f"Invalid size: {text!r}")

    number, unit = match.groups()
    multiplier = UNIT_MAP[(unit or "b").lower()]
    return int(math.floor(float(number) * multiplier))


def percent_of_limit(size_bytes: Optional[int], limit: Optional[int]) -> Optional[int]:
    """
    Percentage of the limit used, rounded half up.

    Returns None when there is no limit or no size.
    """
    if limit is None or size_bytes is None or limit <= 0:
        return None
    # round(size / limit * 100) in exact integer arithmetic
    return (size_bytes * 200 + limit) // (2 * limit)
