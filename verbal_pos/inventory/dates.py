"""Local calendar-day boundaries.

A "day" is a calendar day in the configured store time zone, expressed as a half-open interval:
`[local midnight, next local midnight)`. Bounds are timezone-aware and compare correctly against
UTC timestamps stored in the database.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current UTC time."""

    return datetime.now(UTC)


def day_to_half_open(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Convert a calendar day in `tz` into a half-open aware datetime interval."""

    start_dt = datetime.combine(day, time.min, tzinfo=tz)
    end_dt = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start_dt, end_dt


def local_today_bounds(now: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the half-open interval of the local day that contains `now`."""

    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return day_to_half_open(now.astimezone(tz).date(), tz)
