"""Column type inference.

Types are discovered from a bounded window of each column (the first
``sample_size`` rows) so wide or long uploads profile in bounded time. A
column whose early rows are unrepresentative can therefore be typed
differently from its tail; this is accepted rather than corrected.
"""

import logging
import math
from typing import Any, Optional, Sequence

from dateutil import parser as date_parser

from schemas import ColumnProfile

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 100
DEFAULT_SAMPLE_VALUES = 5
DEFAULT_TYPE_THRESHOLD = 0.8


def parse_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None if it is not fully numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def is_date(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        date_parser.parse(value)
    except (ValueError, OverflowError):
        return False
    return True


def is_null(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def profile_column(
    name: str,
    values: Sequence[Any],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    sample_values: int = DEFAULT_SAMPLE_VALUES,
    threshold: float = DEFAULT_TYPE_THRESHOLD,
) -> ColumnProfile:
    sample = [v for v in values[:sample_size] if v is not None and v != ""]

    numeric_count = sum(1 for v in sample if parse_number(v) is not None)
    date_count = sum(1 for v in sample if is_date(v))

    # strict comparison: an empty sample or an exact threshold hit is text
    if numeric_count > threshold * len(sample):
        inferred = "number"
    elif date_count > threshold * len(sample):
        inferred = "date"
    else:
        inferred = "text"

    null_count = sum(1 for v in values if is_null(v))
    logger.debug(
        "Profiled column %r as %s (sample=%d, numeric=%d, date=%d, nulls=%d)",
        name, inferred, len(sample), numeric_count, date_count, null_count,
    )
    return ColumnProfile(
        name=name,
        inferred_type=inferred,
        sample_values=sample[:sample_values],
        null_count=null_count,
    )
