"""Notion pages client used to mirror bookings and leads into the CRM."""

from __future__ import annotations

import logging
from typing import Any, Dict, cast

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)

NOTION_API_URL = "https://api.notion.com/v1"


class NotionError(RuntimeError):
    """Raised when Notion rejects a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotionClient:
    """Creates database pages through the Notion REST API."""

    def __init__(
        self,
        *,
        api_key: str | SecretStr,
        api_version: str = "2022-06-28",
        base_url: str = NOTION_API_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        secret_value = api_key.get_secret_value() if isinstance(api_key, SecretStr) else api_key
        if not secret_value:
            raise ValueError("Notion API key must be provided")
        self._headers = {
            "Authorization": f"Bearer {secret_value}",
            "Notion-Version": api_version,
            "Content-Type": "application/json",
        }
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def create_page(self, database_id: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        body = {"parent": {"database_id": database_id}, "properties": properties}
        with httpx.Client(
            timeout=self._timeout, transport=self._transport, headers=self._headers
        ) as client:
            try:
                response = client.post(f"{self._base_url}/pages", json=body)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "Notion API error %s: %s",
                    exc.response.status_code,
                    exc.response.text[:500],
                )
                raise NotionError(
                    f"Notion API responded with status {exc.response.status_code}",
                    status_code=exc.response.status_code,
                ) from exc
            except httpx.RequestError as exc:
                raise NotionError("Failed to reach Notion API") from exc
        return cast(Dict[str, Any], response.json())


def title(value: str) -> Dict[str, Any]:
    return {"title": [{"text": {"content": value}}]}


def rich_text(value: str) -> Dict[str, Any]:
    return {"rich_text": [{"text": {"content": value}}]}


def select(value: str) -> Dict[str, Any]:
    return {"select": {"name": value}}


def number(value: float | int | None) -> Dict[str, Any]:
    return {"number": value}


def date_range(start: str, end: str | None = None) -> Dict[str, Any]:
    return {"date": {"start": start, "end": end}}


def email(value: str | None) -> Dict[str, Any]:
    return {"email": value}


def phone(value: str | None) -> Dict[str, Any]:
    return {"phone_number": value}
