# backend/studiobook/services/availability_service.py
"""
Availability Service for the studio booking platform.

Rolls hourly slots (see ``slot_generator``) up into day, month and
look-ahead summaries. Reservations are loaded once per request and every
day is computed from that single snapshot, so repeated calls with the same
data return identical results.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..core.time_utils import as_utc, local_day_bounds, local_today, utc_now
from ..models.booking import Booking, BookingStatus
from ..models.studio import Studio
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .slot_generator import TimeSlot, generate_slots, intervals_overlap

logger = logging.getLogger(__name__)


class DayStatus(str, Enum):
    PAST = "past"
    AVAILABLE = "available"
    PARTIALLY_BOOKED = "partially-booked"
    FULLY_BOOKED = "fully-booked"


@dataclass(frozen=True)
class DaySummary:
    date: date
    status: str
    available_slots: int
    total_slots: int
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WindowSummary:
    available_slots: int
    total_slots: int

    @property
    def is_fully_booked(self) -> bool:
        return self.available_slots == 0


def classify_day(target_date: date, today: date, slots: Sequence[TimeSlot]) -> str:
    """
    Status of one calendar day, first matching rule wins.

    A day with no slots at all that is not in the past counts as available.
    """
    if target_date < today:
        return DayStatus.PAST.value
    available = sum(1 for slot in slots if slot.available)
    if available == len(slots):
        return DayStatus.AVAILABLE.value
    if available > 0:
        return DayStatus.PARTIALLY_BOOKED.value
    return DayStatus.FULLY_BOOKED.value


def reservations_touching_day(
    reservations: Sequence[Booking], target_date: date, offset_minutes: Optional[int] = None
) -> List[Booking]:
    """Non-cancelled reservations intersecting the local calendar day."""
    day_start, day_end = local_day_bounds(target_date, offset_minutes)
    return [
        r
        for r in reservations
        if r.status != BookingStatus.CANCELLED.value
        and intervals_overlap(as_utc(r.start_time), as_utc(r.end_time), day_start, day_end)
    ]


def summarize_day(
    studio: Studio,
    target_date: date,
    reservations: Sequence[Booking],
    now: datetime,
    offset_minutes: Optional[int] = None,
) -> DaySummary:
    today = local_today(now, offset_minutes)
    touching = reservations_touching_day(reservations, target_date, offset_minutes)
    metadata = {"is_weekend": target_date.weekday() >= 5, "bookings": len(touching)}

    if target_date < today:
        return DaySummary(target_date, DayStatus.PAST.value, 0, 0, metadata)

    slots = generate_slots(
        studio.opening_time,
        studio.closing_time,
        touching,
        target_date,
        now,
        offset_minutes=offset_minutes,
    )
    return DaySummary(
        date=target_date,
        status=classify_day(target_date, today, slots),
        available_slots=sum(1 for slot in slots if slot.available),
        total_slots=len(slots),
        metadata=metadata,
    )


def month_range(year: int, month: int) -> Tuple[date, date]:
    """First day of the month and first day of the following month."""
    if not 1 <= month <= 12:
        raise ValidationException("Month must be between 1 and 12")
    first = date(year, month, 1)
    days = calendar.monthrange(year, month)[1]
    return first, first + timedelta(days=days)


class AvailabilityService(BaseService):
    """Day, month and look-ahead availability for studios."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.studio_repository = RepositoryFactory.create_studio_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    def _get_studio(self, studio_id: str) -> Studio:
        studio = self.studio_repository.get_by_id(studio_id)
        if studio is None:
            raise NotFoundException("Studio not found", details={"studio_id": studio_id})
        return studio

    def _reservations(
        self, studios: Sequence[Studio], first_day: date, end_day: date
    ) -> List[Booking]:
        window_start, _ = local_day_bounds(first_day)
        window_end, _ = local_day_bounds(end_day)
        return self.booking_repository.list_reservations(
            [s.id for s in studios], window_start, window_end
        )

    @BaseService.measure_operation("get_day_availability")
    def get_day_availability(
        self, studio_id: str, target_date: date, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Hourly slots of one studio day."""
        now = as_utc(now) if now else utc_now()
        studio = self._get_studio(studio_id)
        reservations = self._reservations([studio], target_date, target_date + timedelta(days=1))
        slots = generate_slots(
            studio.opening_time, studio.closing_time, reservations, target_date, now
        )
        return {"studio_id": studio.id, "date": target_date, "time_slots": slots}

    @BaseService.measure_operation("get_month_availability")
    def get_month_availability(
        self, studio_id: str, year: int, month: int, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Per-day rollup for a calendar month."""
        now = as_utc(now) if now else utc_now()
        studio = self._get_studio(studio_id)
        first_day, end_day = month_range(year, month)
        reservations = self._reservations([studio], first_day, end_day)

        days: List[DaySummary] = []
        current = first_day
        while current < end_day:
            days.append(summarize_day(studio, current, reservations, now))
            current += timedelta(days=1)

        return {"studio_id": studio.id, "month": first_day, "availability": days}

    def summarize_window(
        self,
        studio: Studio,
        reservations: Sequence[Booking],
        start_day: date,
        days: int,
        now: datetime,
    ) -> WindowSummary:
        available = total = 0
        own = [r for r in reservations if r.studio_id == studio.id]
        for offset in range(days):
            slots = generate_slots(
                studio.opening_time,
                studio.closing_time,
                own,
                start_day + timedelta(days=offset),
                now,
            )
            total += len(slots)
            available += sum(1 for slot in slots if slot.available)
        return WindowSummary(available_slots=available, total_slots=total)

    @BaseService.measure_operation("list_studios_with_availability")
    def list_studios_with_availability(
        self, now: Optional[datetime] = None
    ) -> List[Tuple[Studio, WindowSummary]]:
        """Every studio with slot counts over the configured look-ahead window."""
        now = as_utc(now) if now else utc_now()
        studios = self.studio_repository.list_studios()
        days = settings.availability_lookahead_days
        today = local_today(now)
        reservations = self._reservations(studios, today, today + timedelta(days=days))
        return [
            (studio, self.summarize_window(studio, reservations, today, days, now))
            for studio in studios
        ]
