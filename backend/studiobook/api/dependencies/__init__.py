"""FastAPI dependencies."""

from .database import get_db
from .services import (
    get_additional_services_service,
    get_availability_service,
    get_booking_service,
    get_discount_service,
    get_lead_service,
    get_notification_service,
    get_package_service,
    get_payment_client,
    get_payment_service,
    get_payment_webhook_service,
    get_studio_service,
)

__all__ = [
    "get_additional_services_service",
    "get_availability_service",
    "get_booking_service",
    "get_db",
    "get_discount_service",
    "get_lead_service",
    "get_notification_service",
    "get_package_service",
    "get_payment_client",
    "get_payment_service",
    "get_payment_webhook_service",
    "get_studio_service",
]
