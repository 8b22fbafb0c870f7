"""Repositories for payments and payment links."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.payment import Payment, PaymentLink, PaymentStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    """Data access for payments."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Payment)

    def latest_for_booking(self, booking_id: str) -> Optional[Payment]:
        query = (
            self._build_query()
            .filter(Payment.booking_id == booking_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
        )
        return query.first()


class PaymentLinkRepository(BaseRepository[PaymentLink]):
    """Data access for hosted payment links."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, PaymentLink)

    def find_reusable_for_booking(self, booking_id: str) -> Optional[PaymentLink]:
        """Most recent link for a booking that has not failed."""
        query = (
            self._build_query()
            .filter(
                PaymentLink.booking_id == booking_id,
                PaymentLink.status != PaymentStatus.FAILED.value,
            )
            .order_by(PaymentLink.created_at.desc(), PaymentLink.id.desc())
        )
        return query.first()
