"""Lead management: upsert by email, search and detail."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import NotFoundException
from ..models.lead import Lead
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

LEAD_FIELDS = ("full_name", "phone_number", "whatsapp_number", "recording_location")


class LeadService(BaseService):
    """Customer records."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_lead_repository(db)

    def upsert(self, data: Dict[str, Any]) -> Lead:
        """
        Match on email when present and refresh contact details, else create.

        Does not commit; callers own the transaction.
        """
        email = (data.get("email") or "").strip().lower() or None
        if email:
            existing = self.repository.find_by_email(email)
            if existing is not None:
                for key in LEAD_FIELDS:
                    if data.get(key) is not None:
                        setattr(existing, key, data[key])
                self.repository.flush()
                return existing

        return self.repository.create(
            email=email, **{key: data.get(key) for key in LEAD_FIELDS}
        )

    @BaseService.measure_operation("create_lead")
    def create_or_update_lead(self, data: Dict[str, Any]) -> Lead:
        with self.transaction():
            lead = self.upsert(data)
        self.log_operation("create_lead", lead_id=lead.id)
        return lead

    def get_lead(self, lead_id: str) -> Lead:
        lead = self.repository.get_with_bookings(lead_id)
        if lead is None:
            raise NotFoundException("Lead not found", details={"lead_id": lead_id})
        return lead

    @BaseService.measure_operation("list_leads")
    def list_leads(
        self,
        *,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        leads, total = self.repository.search(
            search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
        return {
            "leads": leads,
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": math.ceil(total / limit) if total else 0,
            },
        }
