# backend/studiobook/services/notification_service.py
"""
Best-effort notifications fired after a booking commits.

Two collaborators are involved:
- the CRM (a Notion database) receives a page per booking and per lead
- the automation endpoint receives the booking snapshot as a webhook

Both run as background tasks on a plain-dict snapshot taken while the
session was still open. Failures are logged and swallowed; a committed
booking is never affected by a notifier.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core.config import settings
from ..core.time_utils import format_local_iso
from ..integrations import notion_client as notion
from ..integrations.booking_webhook_client import BookingWebhookClient
from ..integrations.notion_client import NotionClient
from ..models.booking import Booking
from ..models.lead import Lead

logger = logging.getLogger(__name__)


def build_lead_snapshot(lead: Lead) -> Dict[str, Any]:
    return {
        "id": lead.id,
        "full_name": lead.full_name,
        "email": lead.email,
        "phone_number": lead.phone_number,
        "whatsapp_number": lead.whatsapp_number,
        "recording_location": lead.recording_location,
    }


def build_booking_snapshot(booking: Booking) -> Dict[str, Any]:
    """
    Serialize a booking for notifiers.

    Instants are expressed in the facility offset, money as floats.
    """
    snapshot = booking.to_dict()
    snapshot["start_time"] = format_local_iso(booking.start_time)
    snapshot["end_time"] = format_local_iso(booking.end_time)
    snapshot["price_per_hour"] = float(booking.price_per_hour)
    snapshot["studio"] = {
        "id": booking.studio.id,
        "name": booking.studio.name,
        "location": booking.studio.location,
    }
    snapshot["package"] = {
        "id": booking.package.id,
        "name": booking.package.name,
        "price_per_hour": float(booking.package.price_per_hour),
    }
    snapshot["lead"] = build_lead_snapshot(booking.lead)
    snapshot["discount_code"] = booking.discount_code.code if booking.discount_code else None
    snapshot["additional_services"] = [
        {
            "id": item.additional_service_id,
            "title": item.additional_service.title,
            "quantity": item.quantity,
            "price": float(item.price),
        }
        for item in booking.additional_services
    ]
    return snapshot


class NotificationService:
    """Fan-out to the CRM and the outbound booking webhook."""

    def __init__(
        self,
        notion_client: Optional[NotionClient] = None,
        webhook_client: Optional[BookingWebhookClient] = None,
        *,
        booking_database_id: Optional[str] = None,
        leads_database_id: Optional[str] = None,
    ):
        self.notion_client = notion_client
        self.webhook_client = webhook_client
        self.booking_database_id = booking_database_id
        self.leads_database_id = leads_database_id

    @classmethod
    def from_settings(cls) -> "NotificationService":
        """Build collaborators for whichever credentials are configured."""
        notion_client = None
        if settings.notion_api_key.get_secret_value():
            notion_client = NotionClient(
                api_key=settings.notion_api_key,
                api_version=settings.notion_api_version,
                timeout=settings.notification_timeout_seconds,
            )
        webhook_client = None
        if settings.booking_webhook_url:
            webhook_client = BookingWebhookClient(
                url=settings.booking_webhook_url,
                token=settings.booking_webhook_token,
                timeout=settings.notification_timeout_seconds,
            )
        return cls(
            notion_client,
            webhook_client,
            booking_database_id=settings.notion_database_id or None,
            leads_database_id=settings.notion_leads_database_id or None,
        )

    def create_booking_entry(self, booking: Dict[str, Any]) -> bool:
        if self.notion_client is None or not self.booking_database_id:
            logger.debug("CRM booking entry skipped: not configured")
            return False
        lead = booking.get("lead") or {}
        properties = {
            "Name": notion.title(lead.get("full_name") or ""),
            "bookingID": notion.rich_text(str(booking["id"])),
            "location": notion.rich_text(lead.get("recording_location") or ""),
            "Number of guests": notion.number(booking.get("number_of_seats")),
            "Booking Date": notion.date_range(booking["start_time"], booking.get("end_time")),
            "Customer Email": notion.email(lead.get("email")),
            "Phone Number": notion.phone(lead.get("phone_number")),
            "Setup": notion.select((booking.get("studio") or {}).get("name") or ""),
            "Package": notion.select(
                (booking.get("package") or {}).get("name") or "Recording Only"
            ),
            "Whatsapp": notion.phone(lead.get("whatsapp_number") or lead.get("phone_number")),
        }
        try:
            self.notion_client.create_page(self.booking_database_id, properties)
        except Exception as exc:
            logger.error(
                "Failed to create CRM booking entry",
                extra={"booking_id": booking.get("id"), "error": str(exc)},
                exc_info=True,
            )
            return False
        return True

    def create_lead_entry(self, lead: Dict[str, Any]) -> bool:
        if self.notion_client is None or not self.leads_database_id:
            logger.debug("CRM lead entry skipped: not configured")
            return False
        properties = {
            "Name": notion.title(lead.get("full_name") or ""),
            "Email": notion.email(lead.get("email")),
            "Phone Number": notion.phone(lead.get("phone_number")),
            "Whatsapp": notion.phone(lead.get("whatsapp_number") or lead.get("phone_number")),
            "location": notion.rich_text(lead.get("recording_location") or ""),
        }
        try:
            self.notion_client.create_page(self.leads_database_id, properties)
        except Exception as exc:
            logger.error(
                "Failed to create CRM lead entry",
                extra={"lead_id": lead.get("id"), "error": str(exc)},
                exc_info=True,
            )
            return False
        return True

    def send_booking_webhook(self, booking: Dict[str, Any]) -> bool:
        if self.webhook_client is None:
            logger.debug("Booking webhook skipped: not configured")
            return False
        try:
            self.webhook_client.send(booking)
        except Exception as exc:
            logger.warning(
                "Booking webhook delivery failed",
                extra={"booking_id": booking.get("id"), "error": str(exc)},
            )
            return False
        return True

    def notify_booking_created(self, booking: Dict[str, Any]) -> None:
        """Background task scheduled once a booking commits."""
        self.create_booking_entry(booking)
        self.send_booking_webhook(booking)

    def notify_payment_completed(self, booking: Dict[str, Any]) -> None:
        self.send_booking_webhook(booking)

    def notify_lead_created(self, lead: Dict[str, Any]) -> None:
        self.create_lead_entry(lead)
