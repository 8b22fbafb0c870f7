"""Third-party HTTP clients."""

from .booking_webhook_client import BookingWebhookClient
from .mamopay_client import MamoPayClient, MamoPayError, map_provider_status
from .notion_client import NotionClient, NotionError

__all__ = [
    "BookingWebhookClient",
    "MamoPayClient",
    "MamoPayError",
    "NotionClient",
    "NotionError",
    "map_provider_status",
]
