"""Repository helpers for the webhook event ledger."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging

from sqlalchemy.orm import Session

from ..models.webhook_event import WebhookEvent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class WebhookEventRepository(BaseRepository[WebhookEvent]):
    """Repository for webhook ledger queries."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, WebhookEvent)

    @staticmethod
    def _cutoff(since_hours: int) -> datetime:
        return _now_utc() - timedelta(hours=since_hours)

    def list_events(
        self,
        *,
        provider: str | None = None,
        status: str | None = None,
        event_type: str | None = None,
        booking_id: str | None = None,
        since_hours: int = 24,
        limit: int = 50,
    ) -> list[WebhookEvent]:
        """Return recent webhook events filtered by criteria."""
        query = self._build_query().filter(WebhookEvent.received_at >= self._cutoff(since_hours))
        if provider:
            query = query.filter(WebhookEvent.provider == provider)
        if status:
            query = query.filter(WebhookEvent.status == status)
        if event_type:
            query = query.filter(WebhookEvent.event_type == event_type)
        if booking_id:
            query = query.filter(WebhookEvent.booking_id == booking_id)
        query = query.order_by(WebhookEvent.received_at.desc()).limit(limit)
        return self._execute_query(query)

