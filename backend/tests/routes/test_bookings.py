"""Booking endpoints and the error envelope."""

import pytest

from studiobook.models.booking import BookingStatus


@pytest.fixture
def booking_body(studio, default_package, booking_day):
    return {
        "studio_id": studio.id,
        "package_id": default_package.id,
        "date": booking_day.isoformat(),
        "start_time": "14:00",
        "duration_hours": 2,
        "number_of_seats": 2,
        "lead": {"full_name": "Omar Saeed", "email": "Omar@Example.com"},
    }


class TestCreateBookingRoute:
    def test_creates_pending_booking(self, client, booking_body, mock_notifier):
        response = client.post("/api/v1/bookings", json=booking_body)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == BookingStatus.PENDING.value
        assert data["base_cost"] == 1200.0
        assert data["vat_amount"] == 60.0
        assert data["total_cost"] == 1260.0
        assert data["lead"]["email"] == "omar@example.com"
        assert data["studio"]["name"] == "Podcast Room"

        mock_notifier.notify_booking_created.assert_called_once()
        (snapshot,) = mock_notifier.notify_booking_created.call_args.args
        assert snapshot["id"] == data["id"]
        assert snapshot["start_time"].endswith("T14:00:00+04:00")

    def test_with_services_and_discount(
        self, client, booking_body, additional_service, make_discount
    ):
        make_discount(code="SAVE5")
        booking_body["additional_services"] = [{"id": additional_service.id, "quantity": 2}]
        booking_body["discount_code"] = "SAVE5"

        response = client.post("/api/v1/bookings", json=booking_body)

        assert response.status_code == 201
        data = response.json()
        assert data["services_cost"] == 300.0
        assert data["discount_amount"] == 75.0
        assert data["vat_amount"] == 71.25
        assert data["total_cost"] == 1496.25
        assert data["discount_code"]["code"] == "SAVE5"
        assert data["additional_services"][0]["line_total"] == 300.0

    def test_overlap_returns_error_envelope(
        self, client, booking_body, make_booking, mock_notifier
    ):
        make_booking(start="15:00", hours=1)

        response = client.post("/api/v1/bookings", json=booking_body)

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "SLOT_UNAVAILABLE"
        assert body["status"] == 400
        assert body["title"] == "Bad Request"
        assert body["instance"] == "/api/v1/bookings"
        mock_notifier.notify_booking_created.assert_not_called()

    def test_capacity_exceeded(self, client, booking_body):
        booking_body["number_of_seats"] = 9

        response = client.post("/api/v1/bookings", json=booking_body)

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "CAPACITY_EXCEEDED"
        assert body["errors"] == {"requested": 9, "capacity": 4}

    def test_malformed_start_time(self, client, booking_body):
        booking_body["start_time"] = "2pm"

        response = client.post("/api/v1/bookings", json=booking_body)

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

    def test_unexpected_fields_are_rejected(self, client, booking_body):
        booking_body["status"] = "CONFIRMED"

        response = client.post("/api/v1/bookings", json=booking_body)

        assert response.status_code == 422

    def test_datetime_is_not_a_date(self, client, booking_body, booking_day):
        booking_body["date"] = f"{booking_day.isoformat()}T14:00:00"

        response = client.post("/api/v1/bookings", json=booking_body)

        assert response.status_code == 422


class TestBookingDiscountRoutes:
    def test_apply_discount(self, client, make_booking, make_discount):
        booking = make_booking()
        make_discount(code="SAVE5")

        response = client.post(
            "/api/v1/bookings/apply-discount", json={"booking_id": booking.id, "code": "SAVE5"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["discount_amount"] == 60.0
        assert data["total_cost"] == 1197.0

    def test_apply_unknown_code(self, client, make_booking):
        booking = make_booking()

        response = client.post(
            "/api/v1/bookings/apply-discount", json={"booking_id": booking.id, "code": "NOPE"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid discount code"

    def test_validate_discount_with_amount(self, client, make_discount):
        make_discount(code="SAVE5")

        response = client.get(
            "/api/v1/bookings/validate-discount", params={"code": "SAVE5", "amount": "1200"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["discount_amount"] == 60.0

    def test_validate_inactive_discount(self, client, make_discount):
        make_discount(code="OLD", is_active=False)

        response = client.get("/api/v1/bookings/validate-discount", params={"code": "OLD"})

        assert response.status_code == 400
        assert response.json()["code"] == "DISCOUNT_INELIGIBLE"


def test_get_booking(client, make_booking):
    booking = make_booking()

    response = client.get(f"/api/v1/bookings/{booking.id}")

    assert response.status_code == 200
    assert response.json()["id"] == booking.id


def test_get_unknown_booking(client):
    response = client.get("/api/v1/bookings/01UNKNOWNBOOKING0000000000")

    assert response.status_code == 404
