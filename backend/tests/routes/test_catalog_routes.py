"""Lead, discount code and additional service endpoints."""

from datetime import datetime, timedelta, timezone

from studiobook.models.booking import BookingStatus


class TestLeadRoutes:
    def test_create_lead_notifies_crm(self, client, mock_notifier):
        response = client.post(
            "/api/v1/leads",
            json={"full_name": "Sara Ali", "email": "SARA@example.com", "phone_number": "+9715"},
        )

        assert response.status_code == 201
        assert response.json()["email"] == "sara@example.com"
        (snapshot,) = mock_notifier.notify_lead_created.call_args.args
        assert snapshot["full_name"] == "Sara Ali"

    def test_create_lead_upserts_by_email(self, client, lead):
        response = client.post(
            "/api/v1/leads", json={"full_name": "Layla H.", "email": "layla@example.com"}
        )

        assert response.status_code == 201
        assert response.json()["id"] == lead.id
        assert response.json()["full_name"] == "Layla H."

    def test_list_leads_paginates(self, client, lead):
        for index in range(3):
            client.post(
                "/api/v1/leads",
                json={"full_name": f"Guest {index}", "email": f"guest{index}@example.com"},
            )

        response = client.get("/api/v1/leads", params={"page": 2, "limit": 3})

        assert response.status_code == 200
        data = response.json()
        assert data["pagination"] == {"total": 4, "page": 2, "limit": 3, "pages": 2}
        assert len(data["leads"]) == 1

    def test_search_leads(self, client, lead):
        response = client.get("/api/v1/leads", params={"search": "haddad"})

        assert [item["id"] for item in response.json()["leads"]] == [lead.id]

    def test_invalid_sort_field(self, client):
        response = client.get("/api/v1/leads", params={"sort_by": "password"})

        assert response.status_code == 422

    def test_lead_detail_lists_bookings(self, client, lead, make_booking):
        booking = make_booking()

        response = client.get(f"/api/v1/leads/{lead.id}")

        assert response.status_code == 200
        assert [b["id"] for b in response.json()["bookings"]] == [booking.id]


class TestDiscountRoutes:
    def _body(self, **overrides):
        now = datetime.now(timezone.utc)
        body = {
            "code": "SUMMER20",
            "type": "PERCENTAGE",
            "value": 20,
            "start_date": (now - timedelta(days=1)).isoformat(),
            "end_date": (now + timedelta(days=30)).isoformat(),
        }
        body.update(overrides)
        return body

    def test_crud_flow(self, client):
        created = client.post("/api/v1/discounts", json=self._body())
        assert created.status_code == 201
        discount_id = created.json()["id"]
        assert created.json()["used_count"] == 0

        updated = client.put(f"/api/v1/discounts/{discount_id}", json={"is_active": False})
        assert updated.status_code == 200
        assert updated.json()["is_active"] is False
        assert updated.json()["value"] == 20.0

        listed = client.get("/api/v1/discounts", params={"active": "false"})
        assert [d["id"] for d in listed.json()] == [discount_id]

        deleted = client.delete(f"/api/v1/discounts/{discount_id}")
        assert deleted.status_code == 204
        assert client.get(f"/api/v1/discounts/{discount_id}").status_code == 404

    def test_duplicate_code_conflicts(self, client):
        client.post("/api/v1/discounts", json=self._body())

        response = client.post("/api/v1/discounts", json=self._body())

        assert response.status_code == 409
        assert response.json()["code"] == "DISCOUNT_CODE_EXISTS"

    def test_percentage_over_100_is_rejected(self, client):
        response = client.post("/api/v1/discounts", json=self._body(value=150))

        assert response.status_code in (400, 422)

    def test_referenced_code_cannot_be_deleted(self, client, db, make_booking, make_discount):
        discount = make_discount()
        booking = make_booking()
        booking.discount_code = discount
        db.commit()

        response = client.delete(f"/api/v1/discounts/{discount.id}")

        assert response.status_code == 400
        assert response.json()["code"] == "DISCOUNT_CODE_IN_USE"


class TestAdditionalServiceRoutes:
    def test_create_and_list(self, client):
        response = client.post(
            "/api/v1/additional-services",
            json={"title": "Subtitles", "type": "SUBTITLES", "price": 99.5},
        )

        assert response.status_code == 201
        assert response.json()["price"] == 99.5
        titles = [s["title"] for s in client.get("/api/v1/additional-services").json()]
        assert titles == ["Subtitles"]

    def test_unknown_type_is_rejected(self, client):
        response = client.post(
            "/api/v1/additional-services",
            json={"title": "Catering", "type": "CATERING", "price": 10},
        )

        assert response.status_code == 422

    def test_update_price(self, client, additional_service):
        response = client.put(
            f"/api/v1/additional-services/{additional_service.id}", json={"price": 175}
        )

        assert response.status_code == 200
        assert response.json()["price"] == 175.0

    def test_delete_unreferenced_service(self, client, additional_service):
        response = client.delete(f"/api/v1/additional-services/{additional_service.id}")

        assert response.json() == {"deleted": True, "deactivated": False}
        assert client.get(f"/api/v1/additional-services/{additional_service.id}").status_code == 404

    def test_booking_line_items(self, client, make_booking, additional_service):
        booking = make_booking()
        base = f"/api/v1/additional-services/booking/{booking.id}"

        added = client.post(
            base, json={"additional_service_id": additional_service.id, "quantity": 2}
        )
        assert added.status_code == 201
        assert added.json()["services_cost"] == 300.0
        assert added.json()["total_cost"] == 1575.0

        lines = client.get(base).json()
        assert [(line["quantity"], line["line_total"]) for line in lines] == [(2, 300.0)]

        removed = client.delete(f"{base}/{additional_service.id}")
        assert removed.status_code == 200
        assert removed.json()["total_cost"] == 1260.0

        deleted = client.delete(f"/api/v1/additional-services/{additional_service.id}")
        assert deleted.json() == {"deleted": True, "deactivated": False}

    def test_line_items_locked_after_confirmation(self, client, make_booking, additional_service):
        booking = make_booking(status=BookingStatus.CONFIRMED.value)

        response = client.post(
            f"/api/v1/additional-services/booking/{booking.id}",
            json={"additional_service_id": additional_service.id},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "BOOKING_NOT_PENDING"
