"""Minimal MamoPay Business API client for hosted payment links."""

from __future__ import annotations

from decimal import Decimal
import json
import logging
from typing import Any, Dict, Optional, cast

import httpx
from pydantic import SecretStr

from ..models.payment import PaymentStatus

logger = logging.getLogger(__name__)

# Provider vocabulary -> local payment status
STATUS_MAP: Dict[str, str] = {
    "created": PaymentStatus.PENDING.value,
    "processing": PaymentStatus.PENDING.value,
    "pending": PaymentStatus.PENDING.value,
    "captured": PaymentStatus.COMPLETED.value,
    "completed": PaymentStatus.COMPLETED.value,
    "succeeded": PaymentStatus.COMPLETED.value,
    "failed": PaymentStatus.FAILED.value,
    "cancelled": PaymentStatus.FAILED.value,
    "refunded": PaymentStatus.REFUNDED.value,
}


def map_provider_status(provider_status: Optional[str]) -> str:
    """Map a MamoPay status onto PENDING/COMPLETED/FAILED/REFUNDED (unknown -> PENDING)."""
    return STATUS_MAP.get((provider_status or "").strip().lower(), PaymentStatus.PENDING.value)


class MamoPayError(RuntimeError):
    """Raised when the MamoPay API responds with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        error_body: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_body = error_body


class MamoPayClient:
    """Thin client for the MamoPay REST API."""

    def __init__(
        self,
        *,
        api_key: str | SecretStr,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        secret_value = api_key.get_secret_value() if isinstance(api_key, SecretStr) else api_key
        if not secret_value:
            raise ValueError("MamoPay API key must be provided")

        self._api_key = secret_value
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def create_payment_link(
        self,
        *,
        title: str,
        amount: Decimal,
        currency: str,
        external_id: str,
        return_url: str,
        failure_return_url: str,
        custom_data: Dict[str, Any] | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
    ) -> Dict[str, Any]:
        """Create a one-off hosted payment link."""
        body: Dict[str, Any] = {
            "title": title,
            "amount": float(amount),
            "amount_currency": currency,
            "return_url": return_url,
            "failure_return_url": failure_return_url,
            "external_id": external_id,
            "is_widget": False,
            "enable_tabby": False,
            "enable_message": False,
            "enable_tips": False,
            "save_card": "off",
            "enable_customer_details": False,
            "enable_quantity": False,
            "enable_qr_code": False,
            "send_customer_receipt": bool(email),
            "custom_data": custom_data or {},
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
        }
        payload = {key: value for key, value in body.items() if value is not None}
        return self.request("POST", "/links", json_body=payload)

    def get_transaction(self, transaction_id: str) -> Dict[str, Any]:
        """Fetch a charge/transaction by provider id."""
        if not transaction_id:
            raise ValueError("transaction_id must be provided")
        return self.request("GET", f"/transactions/{transaction_id}")

    def get_payment_status(self, transaction_id: str) -> str:
        """Local payment status for a provider transaction."""
        return map_provider_status(self.get_transaction(transaction_id).get("status"))

    def refund(
        self, transaction_id: str, amount: Decimal, reason: str | None = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"amount": float(amount)}
        if reason:
            body["reason"] = reason
        return self.request("POST", f"/transactions/{transaction_id}/refund", json_body=body)

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Dict[str, Any] | None = None,
        params: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Perform a raw MamoPay API request and return the parsed JSON payload."""
        url = f"{self._base_url}{path}"
        with httpx.Client(
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        ) as client:
            try:
                response = client.request(method, url, json=json_body, params=params)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                error_payload: Any | None
                try:
                    error_payload = exc.response.json()
                except json.JSONDecodeError:
                    error_payload = exc.response.text
                logger.error(
                    "MamoPay API error %s for %s %s: %s",
                    status,
                    method,
                    path,
                    exc.response.text[:500],
                )
                raise MamoPayError(
                    f"MamoPay API responded with status {status}",
                    status_code=status,
                    error_body=error_payload,
                ) from exc
            except httpx.RequestError as exc:
                logger.error("MamoPay request failure for %s %s: %s", method, path, str(exc))
                raise MamoPayError("Failed to reach MamoPay API") from exc

        try:
            return cast(Dict[str, Any], response.json())
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from MamoPay for %s %s: %s", method, path, response.text)
            raise MamoPayError("Received malformed JSON from MamoPay") from exc
