"""Inbound payment webhook handling and the event ledger."""

import httpx
import pytest

from studiobook.core.exceptions import NotFoundException, ValidationException
from studiobook.models.booking import BookingStatus
from studiobook.models.payment import PaymentStatus
from studiobook.models.webhook_event import WebhookEvent, WebhookEventStatus
from studiobook.services.payment_service import PaymentService
from studiobook.services.payment_webhook_service import PaymentWebhookService


@pytest.fixture
def service(db, mamopay_client) -> PaymentWebhookService:
    service = PaymentWebhookService(db)
    service.payment_service = PaymentService(db, mamopay_client)
    return service


@pytest.fixture
def linked_booking(service, make_booking, mamopay_handler):
    mamopay_handler["POST /links"] = lambda request: httpx.Response(
        201, json={"id": "MB-LINK-9", "payment_url": "https://pay.test/MB-LINK-9"}
    )
    booking = make_booking()
    service.payment_service.create_payment_link_for_booking(booking.id)
    return booking


def _charge(event_type, booking_id, status="captured"):
    return {
        "event_type": event_type,
        "id": "MPB-CHRG-1",
        "status": status,
        "custom_data": {"bookingId": booking_id},
    }


def test_unrelated_event_is_acknowledged(db, service):
    outcome = service.handle_event({"event_type": "subscription.created", "id": "evt_1"})

    assert outcome.status == WebhookEventStatus.ACKNOWLEDGED.value
    stored = db.get(WebhookEvent, outcome.event_id)
    assert stored.status == WebhookEventStatus.ACKNOWLEDGED.value
    assert stored.payload["id"] == "evt_1"
    assert stored.processed_at is not None


def test_missing_booking_reference_is_rejected(db, service):
    with pytest.raises(ValidationException) as exc_info:
        service.handle_event({"event_type": "charge.succeeded", "id": "evt_2"})

    assert exc_info.value.code == "WEBHOOK_MISSING_BOOKING"
    stored = db.query(WebhookEvent).one()
    assert stored.status == WebhookEventStatus.FAILED.value
    assert stored.processing_error == "Missing booking ID"


def test_unknown_booking_marks_event_error(db, service):
    with pytest.raises(NotFoundException):
        service.handle_event(_charge("charge.succeeded", "01UNKNOWNBOOKING0000000000"))

    stored = db.query(WebhookEvent).one()
    assert stored.status == WebhookEventStatus.ERROR.value
    assert stored.booking_id == "01UNKNOWNBOOKING0000000000"
    assert stored.processing_error == "Booking not found"


def test_charge_succeeded_confirms_booking(db, service, linked_booking):
    outcome = service.handle_event(_charge("charge.succeeded", linked_booking.id))

    assert outcome.status == WebhookEventStatus.PROCESSED.value
    assert outcome.booking_id == linked_booking.id
    assert outcome.confirmed_booking["id"] == linked_booking.id
    assert outcome.confirmed_booking["status"] == BookingStatus.CONFIRMED.value

    payment = service.payment_repository.latest_for_booking(linked_booking.id)
    assert payment.status == PaymentStatus.COMPLETED.value
    assert payment.transaction_id == "MPB-CHRG-1"
    db.refresh(linked_booking)
    assert linked_booking.status == BookingStatus.CONFIRMED.value


def test_booking_reference_falls_back_to_external_id(service, linked_booking):
    payload = {"event_type": "charge.completed", "status": "captured"}
    payload["external_id"] = linked_booking.id

    outcome = service.handle_event(payload)

    assert outcome.booking_id == linked_booking.id
    assert outcome.confirmed_booking is not None


def test_repeated_success_confirms_once(service, linked_booking):
    service.handle_event(_charge("charge.succeeded", linked_booking.id))

    outcome = service.handle_event(_charge("charge.succeeded", linked_booking.id))

    assert outcome.status == WebhookEventStatus.PROCESSED.value
    assert outcome.confirmed_booking is None


def test_charge_failed_cancels_pending_booking(db, service, linked_booking):
    outcome = service.handle_event(_charge("charge.failed", linked_booking.id, "failed"))

    assert outcome.confirmed_booking is None
    db.refresh(linked_booking)
    assert linked_booking.status == BookingStatus.CANCELLED.value
    payment = service.payment_repository.latest_for_booking(linked_booking.id)
    assert payment.status == PaymentStatus.FAILED.value


def test_list_events_filters(service, linked_booking):
    service.handle_event({"event_type": "link.viewed", "id": "evt_3"})
    service.handle_event(_charge("charge.succeeded", linked_booking.id))

    processed = service.list_events(status=WebhookEventStatus.PROCESSED.value)
    by_booking = service.list_events(booking_id=linked_booking.id)
    everything = service.list_events(limit=10)

    assert [event.event_type for event in processed] == ["charge.succeeded"]
    assert len(by_booking) == 1
    assert len(everything) == 2
