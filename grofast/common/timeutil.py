"""UTC helpers.

SQLite hands back naive datetimes for ``DateTime(timezone=True)`` columns
while PostgreSQL returns aware ones; arithmetic goes through ``as_utc``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today() -> date:
    return utcnow().date()


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive datetime; convert an aware one to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_between(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    """Whole minutes from ``start`` to ``end``, clamped at zero.

    ``None`` when either end is missing.
    """
    if start is None or end is None:
        return None
    delta = as_utc(end) - as_utc(start)
    return max(0, int(delta / timedelta(minutes=1)))


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """``[00:00:00, 23:59:59.999999]`` of ``day`` in UTC."""
    start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)
