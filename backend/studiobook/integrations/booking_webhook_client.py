"""Outbound webhook carrying booking snapshots to the automation endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class BookingWebhookClient:
    """POSTs ``{"payload": <booking>}`` with a bearer token."""

    def __init__(
        self,
        *,
        url: str,
        token: str | SecretStr,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("Booking webhook URL must be provided")
        self._url = url
        self._token = token.get_secret_value() if isinstance(token, SecretStr) else token
        self._timeout = timeout
        self._transport = transport

    def send(self, booking: Dict[str, Any]) -> int:
        """Deliver a booking snapshot; returns the HTTP status code."""
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            response = client.post(self._url, json={"payload": booking}, headers=headers)
            response.raise_for_status()
        logger.info(
            "Booking webhook delivered",
            extra={"booking_id": booking.get("id"), "status_code": response.status_code},
        )
        return response.status_code
