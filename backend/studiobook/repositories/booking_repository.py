# backend/studiobook/repositories/booking_repository.py
"""
Booking repository.

Holds the interval queries used by availability and by the overlap check.
Intervals are half-open: ``[start, end)`` overlaps ``[a, b)`` iff
``start < b and a < end``.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, selectinload

from ..models.booking import Booking, BookingAdditionalService, BookingStatus
from ..models.lead import Lead
from ..models.studio import Package
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Data access for bookings."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            selectinload(Booking.studio),
            selectinload(Booking.package).selectinload(Package.perks),
            selectinload(Booking.lead),
            selectinload(Booking.discount_code),
            selectinload(Booking.additional_services).selectinload(
                BookingAdditionalService.additional_service
            ),
        )

    def _active_overlap_query(self, studio_id: str, start: datetime, end: datetime) -> Query:
        return self._build_query().filter(
            Booking.studio_id == studio_id,
            Booking.status != BookingStatus.CANCELLED.value,
            Booking.start_time < end,
            Booking.end_time > start,
        )

    def count_overlapping(
        self,
        studio_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> int:
        """Count non-cancelled bookings of a studio intersecting ``[start, end)``."""
        query = self._active_overlap_query(studio_id, start, end)
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_scalar(query.with_entities(func.count(Booking.id))) or 0

    def list_reservations(
        self, studio_ids: Iterable[str], window_start: datetime, window_end: datetime
    ) -> List[Booking]:
        """Non-cancelled bookings of the given studios touching ``[window_start, window_end)``."""
        ids = list(studio_ids)
        if not ids:
            return []
        query = (
            self._build_query()
            .filter(
                Booking.studio_id.in_(ids),
                Booking.status != BookingStatus.CANCELLED.value,
                Booking.start_time < window_end,
                Booking.end_time > window_start,
            )
            .order_by(Booking.start_time)
        )
        return self._execute_query(query)

    def count_for_lead_email(self, email: str, exclude_booking_id: Optional[str] = None) -> int:
        """Bookings of any status made by the lead with this email."""
        query = (
            self.db.query(func.count(Booking.id))
            .join(Lead, Lead.id == Booking.lead_id)
            .filter(func.lower(Lead.email) == email.strip().lower())
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_scalar(query) or 0

    def get_for_update(self, booking_id: str) -> Optional[Booking]:
        return (
            self._build_query()
            .filter(Booking.id == booking_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def count_referencing_service(self, additional_service_id: str) -> int:
        query = self.db.query(func.count(BookingAdditionalService.id)).filter(
            BookingAdditionalService.additional_service_id == additional_service_id
        )
        return self._execute_scalar(query) or 0

    def count_referencing_discount(self, discount_code_id: str) -> int:
        query = self.db.query(func.count(Booking.id)).filter(
            Booking.discount_code_id == discount_code_id
        )
        return self._execute_scalar(query) or 0


class BookingAdditionalServiceRepository(BaseRepository[BookingAdditionalService]):
    """Line items attached to bookings."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, BookingAdditionalService)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(BookingAdditionalService.additional_service))

    def list_for_booking(self, booking_id: str) -> List[BookingAdditionalService]:
        query = (
            self._apply_eager_loading(self._build_query())
            .filter(BookingAdditionalService.booking_id == booking_id)
            .order_by(BookingAdditionalService.created_at)
        )
        return self._execute_query(query)

    def find_line(
        self, booking_id: str, additional_service_id: str
    ) -> Optional[BookingAdditionalService]:
        return self.find_one_by(
            booking_id=booking_id, additional_service_id=additional_service_id
        )
