"""
Overlap validator used as the gatekeeper before a booking is persisted.

``is_bookable`` must run inside the transaction that inserts the booking,
after the studio row lock is taken (see ``BookingService``).
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Optional

from ..core.time_utils import as_utc, parse_time_of_day, to_local_minutes
from ..repositories.booking_repository import BookingRepository

logger = logging.getLogger(__name__)


def fits_operating_hours(
    start: datetime,
    end: datetime,
    open_local: str,
    close_local: str,
    offset_minutes: Optional[int] = None,
) -> bool:
    """
    Whether ``[start, end)`` lies inside opening hours on its start day.

    The local end is measured from the local start, so an interval that
    crosses local midnight always ends past closing.
    """
    local_start = to_local_minutes(start, offset_minutes)
    duration = int((as_utc(end) - as_utc(start)).total_seconds() // 60)
    local_end = local_start + duration
    return not (
        local_start < parse_time_of_day(open_local) or local_end > parse_time_of_day(close_local)
    )


class OverlapValidator:
    """Operating-hours and double-booking check for a proposed interval."""

    def __init__(self, booking_repository: BookingRepository):
        self.booking_repository = booking_repository

    def is_bookable(
        self,
        studio_id: str,
        start: datetime,
        end: datetime,
        open_local: str,
        close_local: str,
        *,
        exclude_booking_id: Optional[str] = None,
        offset_minutes: Optional[int] = None,
    ) -> bool:
        if not fits_operating_hours(start, end, open_local, close_local, offset_minutes):
            logger.info(
                "Interval outside operating hours",
                extra={"studio_id": studio_id, "start": start.isoformat(), "end": end.isoformat()},
            )
            return False

        conflicts = self.booking_repository.count_overlapping(
            studio_id, as_utc(start), as_utc(end), exclude_booking_id=exclude_booking_id
        )
        if conflicts > 0:
            logger.info(
                "Interval overlaps existing bookings",
                extra={"studio_id": studio_id, "conflicts": conflicts},
            )
            return False
        return True
