"""
Facility clock helpers.

The facility runs on a fixed UTC offset (no DST). Every conversion between
local wall-clock times and stored UTC instants goes through this module.
"""

from datetime import date, datetime, time, timedelta, tzinfo
import re
from typing import Optional, Tuple

import pytz

from .config import settings

TIME_OF_DAY_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
MINUTES_PER_DAY = 24 * 60


def facility_timezone(offset_minutes: Optional[int] = None) -> tzinfo:
    """
    Get the facility's fixed-offset timezone.

    Args:
        offset_minutes: Override for the configured offset

    Returns:
        pytz fixed offset timezone
    """
    if offset_minutes is None:
        offset_minutes = settings.facility_utc_offset_minutes
    return pytz.FixedOffset(offset_minutes)


def is_valid_time_of_day(value: str) -> bool:
    """Check that a string is an ``HH:mm`` time with hour 0-23 and minute 0-59."""
    if not isinstance(value, str):
        return False
    return TIME_OF_DAY_PATTERN.match(value) is not None


def parse_time_of_day(value: str) -> int:
    """
    Parse ``HH:mm`` into minutes since midnight.

    Raises:
        ValueError: If the string is not a valid time of day
    """
    match = TIME_OF_DAY_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time of day: {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive values are treated as UTC; SQLite hands timestamps back without
    tzinfo.
    """
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def to_utc_instant(
    target_date: date, local_time_of_day: str, offset_minutes: Optional[int] = None
) -> datetime:
    """
    Convert a local wall-clock time on a calendar date to a UTC instant.

    Args:
        target_date: Calendar date in the facility's local calendar
        local_time_of_day: ``HH:mm`` string
        offset_minutes: Facility offset from UTC

    Returns:
        Aware UTC datetime
    """
    minutes = parse_time_of_day(local_time_of_day)
    tz = facility_timezone(offset_minutes)
    local = tz.localize(datetime.combine(target_date, time(minutes // 60, minutes % 60)))
    return local.astimezone(pytz.utc)


def to_local_datetime(instant: datetime, offset_minutes: Optional[int] = None) -> datetime:
    """Express a stored instant in the facility's local clock."""
    return as_utc(instant).astimezone(facility_timezone(offset_minutes))


def to_local_minutes(instant: datetime, offset_minutes: Optional[int] = None) -> int:
    """
    Minutes since local midnight for an instant, in [0, 1440).

    Args:
        instant: Any datetime (naive values are UTC)
        offset_minutes: Facility offset from UTC

    Returns:
        Local minute-of-day
    """
    local = to_local_datetime(instant, offset_minutes)
    return local.hour * 60 + local.minute


def local_today(now: Optional[datetime] = None, offset_minutes: Optional[int] = None) -> date:
    """Today's date in the facility calendar."""
    return to_local_datetime(now or utc_now(), offset_minutes).date()


def local_day_bounds(
    target_date: date, offset_minutes: Optional[int] = None
) -> Tuple[datetime, datetime]:
    """UTC instants bounding a local calendar day as ``[start, end)``."""
    start = to_utc_instant(target_date, "00:00", offset_minutes)
    return start, start + timedelta(days=1)


def next_local_hour(now: datetime, offset_minutes: Optional[int] = None) -> datetime:
    """The first whole local hour strictly after ``now``, as a UTC instant."""
    local = to_local_datetime(now, offset_minutes)
    floored = local.replace(minute=0, second=0, microsecond=0)
    return (floored + timedelta(hours=1)).astimezone(pytz.utc)


def format_local_iso(instant: datetime, offset_minutes: Optional[int] = None) -> str:
    """ISO-8601 string of an instant in the facility offset, e.g. ``2025-01-10T14:00:00+04:00``."""
    return to_local_datetime(instant, offset_minutes).isoformat()
