"""
Hourly slot generation for a studio day.

Pure functions: output depends only on the arguments (and on ``now`` when
the target date is today).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Protocol

from ..core.config import settings
from ..core.time_utils import as_utc, local_today, next_local_hour, to_utc_instant, utc_now
from ..models.booking import BookingStatus


class Reservation(Protocol):
    start_time: datetime
    end_time: datetime
    status: str


@dataclass(frozen=True)
class TimeSlot:
    start: datetime
    end: datetime
    available: bool


def intervals_overlap(a: datetime, b: datetime, c: datetime, d: datetime) -> bool:
    """Half-open overlap test for ``[a, b)`` and ``[c, d)``."""
    return a < d and c < b


def _blocking(reservations: Iterable[Reservation]) -> List[tuple[datetime, datetime]]:
    return [
        (as_utc(r.start_time), as_utc(r.end_time))
        for r in reservations
        if r.status != BookingStatus.CANCELLED.value
    ]


def generate_slots(
    open_local: str,
    close_local: str,
    reservations: Iterable[Reservation],
    target_date: date,
    now: Optional[datetime] = None,
    *,
    offset_minutes: Optional[int] = None,
    slot_minutes: Optional[int] = None,
) -> List[TimeSlot]:
    """
    Build the ordered bookable slots for one studio day.

    Only whole slots ending at or before closing are emitted. For today the
    walk starts at the next whole local hour after ``now`` (never before
    opening), and slots starting at or before ``now`` are dropped, so past
    dates yield nothing.

    Args:
        open_local: Opening time ``HH:mm`` (local)
        close_local: Closing time ``HH:mm`` (local)
        reservations: Existing bookings; cancelled ones never block
        target_date: Local calendar date
        now: Current instant, defaults to the wall clock

    Returns:
        Slots in chronological order
    """
    now = as_utc(now) if now is not None else utc_now()
    step = timedelta(minutes=slot_minutes or settings.slot_length_minutes)
    day_start = to_utc_instant(target_date, open_local, offset_minutes)
    day_end = to_utc_instant(target_date, close_local, offset_minutes)

    cursor = day_start
    if target_date == local_today(now, offset_minutes):
        cursor = max(day_start, next_local_hour(now, offset_minutes))

    blocking = _blocking(reservations)
    slots: List[TimeSlot] = []
    while cursor + step <= day_end:
        slot_end = cursor + step
        if cursor > now:
            available = not any(
                intervals_overlap(cursor, slot_end, start, end) for start, end in blocking
            )
            slots.append(TimeSlot(start=cursor, end=slot_end, available=available))
        cursor = slot_end
    return slots
