# backend/studiobook/services/payment_service.py
"""
Payment link lifecycle for bookings.

A booking is paid through a hosted MamoPay link. The link and a PENDING
payment are stored locally; the provider's webhook (or a status poll)
later moves the payment to COMPLETED, FAILED or REFUNDED. A completed payment
confirms the booking; a failed or refunded one cancels it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BRAND_NAME, PAYMENT_PROVIDER_MAMOPAY
from ..core.exceptions import (
    NotFoundException,
    PaymentProviderException,
    ServiceException,
    ValidationException,
)
from ..core.time_utils import utc_now
from ..integrations.mamopay_client import MamoPayClient, MamoPayError
from ..models.booking import TERMINAL_STATUSES, Booking, BookingStatus
from ..models.payment import Payment, PaymentLink, PaymentStatus
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def build_mamopay_client() -> Optional[MamoPayClient]:
    """Client from settings, or None when no API key is configured."""
    if not settings.mamopay_api_key.get_secret_value():
        return None
    return MamoPayClient(
        api_key=settings.mamopay_api_key,
        base_url=settings.mamopay_base_url,
        timeout=settings.mamopay_timeout_seconds,
    )


class PaymentService(BaseService):
    """Creates payment links, polls status and issues refunds."""

    def __init__(self, db: Session, client: Optional[MamoPayClient] = None):
        super().__init__(db)
        self._client = client
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.link_repository = RepositoryFactory.create_payment_link_repository(db)

    @property
    def client(self) -> MamoPayClient:
        if self._client is None:
            self._client = build_mamopay_client()
        if self._client is None:
            raise ServiceException(
                "Payment provider is not configured", code="PAYMENT_PROVIDER_NOT_CONFIGURED"
            )
        return self._client

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    @BaseService.measure_operation("create_payment_link")
    def create_payment_link_for_booking(self, booking_id: str) -> Tuple[PaymentLink, bool]:
        """
        Issue (or reuse) the hosted payment link of a booking.

        Returns:
            ``(link, created)``; ``created`` is False when an existing link
            that has not failed was returned
        """
        booking = self._get_booking(booking_id)
        existing = self.link_repository.find_reusable_for_booking(booking.id)
        if existing is not None:
            return existing, False
        if booking.status in TERMINAL_STATUSES:
            raise ValidationException(
                "Cannot create a payment link for a closed booking",
                code="BOOKING_CLOSED",
                details={"status": booking.status},
            )

        lead = booking.lead
        try:
            response = self.client.create_payment_link(
                title=settings.payment_link_title or f"{BRAND_NAME} booking",
                amount=booking.total_cost,
                currency=booking.currency,
                external_id=booking.id,
                return_url=settings.payment_return_url,
                failure_return_url=settings.payment_failure_return_url,
                custom_data={"bookingId": booking.id},
                first_name=lead.first_name or None,
                last_name=lead.last_name or None,
                email=lead.email,
            )
        except MamoPayError as exc:
            raise PaymentProviderException(
                "Failed to create payment link",
                code="PAYMENT_LINK_FAILED",
                details={"provider_status": exc.status_code},
            ) from exc

        with self.transaction():
            link = self.link_repository.create(
                booking=booking,
                external_id=str(response.get("id") or ""),
                url=response.get("payment_url") or response.get("url") or "",
                amount=booking.total_cost,
                currency=booking.currency,
                status=PaymentStatus.PENDING.value,
                provider_response=response,
            )
            payment = self.payment_repository.latest_for_booking(booking.id)
            if payment is None or payment.status != PaymentStatus.PENDING.value:
                self.payment_repository.create(
                    booking=booking,
                    provider=PAYMENT_PROVIDER_MAMOPAY,
                    external_id=link.external_id,
                    amount=booking.total_cost,
                    currency=booking.currency,
                    status=PaymentStatus.PENDING.value,
                )
            else:
                payment.external_id = link.external_id
                payment.amount = booking.total_cost

        self.log_operation("create_payment_link", booking_id=booking.id, link_id=link.id)
        return link, True

    def _require_payment(self, booking_id: str) -> Payment:
        payment = self.payment_repository.latest_for_booking(booking_id)
        if payment is None:
            raise NotFoundException(
                "No payment found for this booking", details={"booking_id": booking_id}
            )
        return payment

    def apply_status(self, booking: Booking, payment: Optional[Payment], status: str) -> bool:
        """
        Move a payment to ``status`` and derive the booking status from it.

        Returns True when the booking became CONFIRMED. Does not commit.
        """
        if payment is not None:
            payment.status = status
            for link in booking.payment_links:
                if link.external_id == payment.external_id:
                    link.status = status

        if booking.status in TERMINAL_STATUSES:
            if status == PaymentStatus.COMPLETED.value:
                logger.warning(
                    "Payment completed for a closed booking",
                    extra={"booking_id": booking.id, "booking_status": booking.status},
                )
            return False
        if status == PaymentStatus.COMPLETED.value:
            if booking.status == BookingStatus.CONFIRMED.value:
                return False
            booking.confirm()
            return True
        if status == PaymentStatus.FAILED.value and booking.status == BookingStatus.PENDING.value:
            booking.cancel()
        elif status == PaymentStatus.REFUNDED.value:
            booking.cancel()
        return False

    @BaseService.measure_operation("get_payment_status")
    def get_payment_status(self, booking_id: str) -> Dict[str, Any]:
        """
        Current payment status, refreshed from the provider while unsettled.

        Provider errors keep the stored status.
        """
        booking = self._get_booking(booking_id)
        payment = self._require_payment(booking.id)
        reference = payment.transaction_id or payment.external_id
        settled = {PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value}

        if reference and payment.status not in settled:
            try:
                latest = self.client.get_payment_status(reference)
            except (MamoPayError, ServiceException) as exc:
                logger.warning(
                    "Could not refresh payment status",
                    extra={"booking_id": booking.id, "error": str(exc)},
                )
            else:
                if latest != payment.status:
                    with self.transaction():
                        self.apply_status(booking, payment, latest)

        return {
            "booking_id": booking.id,
            "booking_status": booking.status,
            "payment_id": payment.id,
            "status": payment.status,
            "amount": payment.amount,
            "currency": payment.currency,
            "payment_link": self._latest_link_url(booking),
        }

    @staticmethod
    def _latest_link_url(booking: Booking) -> Optional[str]:
        if not booking.payment_links:
            return None
        return max(booking.payment_links, key=lambda link: link.id).url

    @BaseService.measure_operation("refund_payment")
    def refund_booking_payment(self, booking_id: str, reason: Optional[str] = None) -> Payment:
        """Refund a completed payment in full and cancel the booking."""
        booking = self._get_booking(booking_id)
        payment = self._require_payment(booking.id)
        if payment.status != PaymentStatus.COMPLETED.value:
            raise ValidationException(
                "Only completed payments can be refunded",
                code="PAYMENT_NOT_REFUNDABLE",
                details={"status": payment.status},
            )
        reference = payment.transaction_id or payment.external_id
        if not reference:
            raise ValidationException("Payment has no provider reference to refund")

        try:
            self.client.refund(reference, payment.amount, reason)
        except MamoPayError as exc:
            raise PaymentProviderException(
                "Refund was rejected by the payment provider",
                code="REFUND_FAILED",
                details={"provider_status": exc.status_code},
            ) from exc

        with self.transaction():
            payment.status = PaymentStatus.REFUNDED.value
            payment.refund_amount = payment.amount
            payment.refund_reason = reason
            payment.refunded_at = utc_now()
            if booking.status not in TERMINAL_STATUSES:
                booking.cancel()

        self.log_operation("refund_payment", booking_id=booking.id, payment_id=payment.id)
        return payment
