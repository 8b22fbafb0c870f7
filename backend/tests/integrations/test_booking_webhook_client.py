"""Outbound booking webhook delivery."""

import json

import httpx
import pytest

from studiobook.integrations.booking_webhook_client import BookingWebhookClient


def test_send_wraps_payload_with_bearer_token():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    client = BookingWebhookClient(
        url="https://hooks.test/bookings",
        token="tok_123",
        transport=httpx.MockTransport(handler),
    )

    assert client.send({"id": "01BOOKING"}) == 202
    assert seen[0].headers["Authorization"] == "Bearer tok_123"
    assert json.loads(seen[0].content) == {"payload": {"id": "01BOOKING"}}


def test_no_authorization_header_without_token():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    BookingWebhookClient(
        url="https://hooks.test/bookings", token="", transport=httpx.MockTransport(handler)
    ).send({"id": "01BOOKING"})

    assert "Authorization" not in seen[0].headers


def test_error_status_raises():
    client = BookingWebhookClient(
        url="https://hooks.test/bookings",
        token="tok_123",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        client.send({"id": "01BOOKING"})


def test_url_is_required():
    with pytest.raises(ValueError):
        BookingWebhookClient(url="", token="tok_123")
