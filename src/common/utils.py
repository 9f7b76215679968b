"""
Common utilities shared across all modules.
"""

import math
from datetime import date, datetime, time, timezone

MS_PER_DAY = 24 * 60 * 60 * 1000

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def ensure_utc(ts: datetime) -> datetime:
    """
    Naive datetimes are taken as UTC.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)

def month_start_utc(day: date) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)

def epoch_ms(ts: datetime) -> int:
    return int(ensure_utc(ts).timestamp() * 1000)

def whole_days_between(start: datetime, end: datetime) -> int:
    """Floor of elapsed days, negative when end precedes start."""
    return math.floor((epoch_ms(end) - epoch_ms(start)) / MS_PER_DAY)

def iso_timestamp(ts: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a Z suffix."""
    return ensure_utc(ts).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def round_half_up(value: float, digits: int = 0) -> float:
    """Rounds halves upward instead of to the nearest even digit."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
