"""Lead repository with search and pagination."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from ..models.booking import Booking
from ..models.lead import Lead
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Lead.created_at,
    "full_name": Lead.full_name,
    "email": Lead.email,
}


class LeadRepository(BaseRepository[Lead]):
    """Data access for leads."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Lead)

    def find_by_email(self, email: str) -> Optional[Lead]:
        query = self._build_query().filter(func.lower(Lead.email) == email.strip().lower())
        return query.first()

    def get_with_bookings(self, lead_id: str) -> Optional[Lead]:
        query = (
            self._build_query()
            .options(selectinload(Lead.bookings).selectinload(Booking.studio))
            .filter(Lead.id == lead_id)
        )
        return query.first()

    def search(
        self,
        *,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Lead], int]:
        """
        Page through leads matching a free-text search on name, email or phone.

        Returns:
            Tuple of (leads on the page, total matching leads)
        """
        query = self._build_query()
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(Lead.full_name).like(pattern),
                    func.lower(Lead.email).like(pattern),
                    Lead.phone_number.like(pattern),
                )
            )

        total = self._execute_scalar(query.with_entities(func.count(Lead.id))) or 0

        column = SORTABLE_FIELDS.get(sort_by, Lead.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()
        query = (
            query.options(selectinload(Lead.bookings))
            .order_by(ordering, Lead.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return self._execute_query(query), int(total)
