"""
Money and time helpers
"""
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """
    Coerce a numeric value to a 2-place Decimal.

    None (an empty SUM) becomes 0.00. Floats are routed through ``str`` so
    a driver that hands back binary floats does not leak their noise.
    """
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def utcnow() -> datetime:
    """Current time as a UTC-naive datetime (the storage convention)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to UTC and drop the offset; naive values are taken as UTC"""
    if value is None or value.utcoffset() is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utctoday() -> date:
    return utcnow().date()


def month_bounds(day: date) -> Tuple[datetime, datetime]:
    """[first instant of the month, first instant of the next month)"""
    start = date(day.year, day.month, 1)
    if day.month == 12:
        end = date(day.year + 1, 1, 1)
    else:
        end = date(day.year, day.month + 1, 1)
    return datetime.combine(start, time.min), datetime.combine(end, time.min)


def day_range(start: Optional[date], end: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Turn an inclusive [start, end] date range into datetime bounds
    usable as ``col >= lower`` and ``col < upper``.
    """
    lower = datetime.combine(start, time.min) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lower, upper
