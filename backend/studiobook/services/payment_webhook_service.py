"""Processing of inbound payment provider webhooks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import PAYMENT_PROVIDER_MAMOPAY
from ..core.exceptions import (
    DomainException,
    NotFoundException,
    ServiceException,
    ValidationException,
)
from ..integrations.mamopay_client import map_provider_status
from ..models.payment import PaymentStatus
from ..models.webhook_event import WebhookEvent, WebhookEventStatus
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import build_booking_snapshot
from .payment_service import PaymentService

logger = logging.getLogger(__name__)

CHARGE_COMPLETED_EVENTS = frozenset({"charge.succeeded", "charge.completed"})
CHARGE_FAILED_EVENTS = frozenset({"charge.failed"})


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class WebhookOutcome:
    event_id: str
    status: str
    booking_id: Optional[str] = None
    # Snapshot of a booking that just became CONFIRMED
    confirmed_booking: Optional[Dict[str, Any]] = None


class PaymentWebhookService(BaseService):
    """Logs every webhook to the ledger, then applies charge events."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.repository = RepositoryFactory.create_webhook_event_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.payment_service = PaymentService(db)

    @BaseService.measure_operation("payment_webhook.log_received")
    def log_received(self, payload: Dict[str, Any]) -> WebhookEvent:
        """Persist the raw event before any processing."""
        with self.transaction():
            event = self.repository.create(
                provider=PAYMENT_PROVIDER_MAMOPAY,
                event_type=payload.get("event_type") or "unknown",
                event_id=str(payload["id"]) if payload.get("id") is not None else None,
                payload=payload,
                status=WebhookEventStatus.RECEIVED.value,
                received_at=_now_utc(),
            )
        return event

    def _finish(
        self,
        event: WebhookEvent,
        status: WebhookEventStatus,
        started: float,
        *,
        error: Optional[str] = None,
        booking_id: Optional[str] = None,
    ) -> None:
        event.status = status.value
        event.processing_error = error
        event.processed_at = _now_utc()
        event.processing_duration_ms = int((time.monotonic() - started) * 1000)
        if booking_id:
            event.booking_id = booking_id
        self.repository.flush()

    @staticmethod
    def resolve_booking_id(payload: Dict[str, Any]) -> Optional[str]:
        custom_data = payload.get("custom_data") or {}
        return custom_data.get("bookingId") or payload.get("external_id") or None

    @BaseService.measure_operation("payment_webhook.handle")
    def handle_event(self, payload: Dict[str, Any]) -> WebhookOutcome:
        """
        Apply a provider event.

        Every logged event ends as processed, acknowledged, failed or error.
        Only a charge without a booking reference is marked failed.

        Raises:
            ValidationException: Charge event without a booking reference
            NotFoundException: Referenced booking does not exist
            ServiceException: Unexpected processing failure
        """
        started = time.monotonic()
        event = self.log_received(payload)
        event_type = event.event_type

        if event_type not in CHARGE_COMPLETED_EVENTS | CHARGE_FAILED_EVENTS:
            with self.transaction():
                self._finish(event, WebhookEventStatus.ACKNOWLEDGED, started)
            logger.info("Acknowledged webhook event", extra={"event_type": event_type})
            return WebhookOutcome(event_id=event.id, status=event.status)

        booking_id = self.resolve_booking_id(payload)
        if not booking_id:
            with self.transaction():
                self._finish(
                    event, WebhookEventStatus.FAILED, started, error="Missing booking ID"
                )
            raise ValidationException(
                "Missing booking ID in webhook payload", code="WEBHOOK_MISSING_BOOKING"
            )

        try:
            with self.transaction():
                confirmed = self._apply_charge(payload, event_type, booking_id)
                self._finish(event, WebhookEventStatus.PROCESSED, started, booking_id=booking_id)
        except (ServiceException, NotFoundException) as exc:
            # Unknown booking included
            self._record_failure(event, WebhookEventStatus.ERROR, started, exc, booking_id)
            raise
        except DomainException as exc:
            self._record_failure(event, WebhookEventStatus.FAILED, started, exc, booking_id)
            raise
        except Exception as exc:
            logger.error(
                "Error processing payment webhook",
                extra={"event_id": event.id, "booking_id": booking_id},
                exc_info=True,
            )
            self._record_failure(event, WebhookEventStatus.ERROR, started, exc, booking_id)
            raise ServiceException(
                "Webhook processing failed", code="WEBHOOK_PROCESSING_FAILED"
            ) from exc

        snapshot = None
        if confirmed:
            snapshot = build_booking_snapshot(self.booking_repository.get_by_id(booking_id))
        return WebhookOutcome(
            event_id=event.id,
            status=event.status,
            booking_id=booking_id,
            confirmed_booking=snapshot,
        )

    def _record_failure(
        self,
        event: WebhookEvent,
        status: WebhookEventStatus,
        started: float,
        exc: Exception,
        booking_id: Optional[str],
    ) -> None:
        event_id = event.id
        with self.transaction():
            stored = self.repository.get_by_id(event_id)
            if stored is not None:
                self._finish(stored, status, started, error=str(exc), booking_id=booking_id)

    def _apply_charge(self, payload: Dict[str, Any], event_type: str, booking_id: str) -> bool:
        """Update payment and booking; True when the booking became CONFIRMED."""
        booking = self.booking_repository.get_for_update(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})

        if event_type in CHARGE_FAILED_EVENTS:
            status = PaymentStatus.FAILED.value
        else:
            status = map_provider_status(payload.get("status"))

        payment = self.payment_repository.latest_for_booking(booking.id)
        if payment is None:
            logger.warning("No payment record for webhook", extra={"booking_id": booking.id})
        elif payload.get("id"):
            payment.transaction_id = str(payload["id"])
        return self.payment_service.apply_status(booking, payment, status)

    def list_events(
        self,
        *,
        status: Optional[str] = None,
        event_type: Optional[str] = None,
        booking_id: Optional[str] = None,
        since_hours: int = 24,
        limit: int = 50,
    ) -> List[WebhookEvent]:
        return self.repository.list_events(
            provider=PAYMENT_PROVIDER_MAMOPAY,
            status=status,
            event_type=event_type,
            booking_id=booking_id,
            since_hours=since_hours,
            limit=limit,
        )
