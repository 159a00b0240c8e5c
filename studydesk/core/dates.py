"""Date and percentage helpers shared by the trackers."""

from __future__ import annotations

import math
from datetime import UTC, date, datetime, timedelta


def utc_now() -> datetime:
    return datetime.now(UTC)


def iso_date(value: date) -> str:
    return value.isoformat()


def iso_timestamp(value: datetime) -> str:
    """Millisecond ISO timestamp with a ``Z`` suffix for UTC values."""
    text = value.isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def days_back(today: date, days: int) -> list[str]:
    """ISO dates of the ``days``-long window ending at ``today``, oldest first."""
    return [iso_date(today - timedelta(days=offset)) for offset in range(days - 1, -1, -1)]


def percent(part: float, whole: float) -> int:
    """Whole-number percentage, halves rounded up; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return math.floor(100 * part / whole + 0.5)
