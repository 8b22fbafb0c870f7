# backend/studiobook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each factory builds a request-scoped service around the request's session.
Notification and payment collaborators are process-wide and can be swapped
through ``app.dependency_overrides`` in tests.
"""

from functools import lru_cache
import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from ...integrations.mamopay_client import MamoPayClient
from ...services.additional_services_service import AdditionalServicesService
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.discount_service import DiscountService
from ...services.lead_service import LeadService
from ...services.notification_service import NotificationService
from ...services.payment_service import PaymentService, build_mamopay_client
from ...services.payment_webhook_service import PaymentWebhookService
from ...services.studio_service import PackageService, StudioService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """Process-wide notifier built from settings."""
    return NotificationService.from_settings()


def get_payment_client() -> Optional[MamoPayClient]:
    return build_mamopay_client()


def get_studio_service(db: Session = Depends(get_db)) -> StudioService:
    return StudioService(db)


def get_package_service(db: Session = Depends(get_db)) -> PackageService:
    return PackageService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_lead_service(db: Session = Depends(get_db)) -> LeadService:
    return LeadService(db)


def get_discount_service(db: Session = Depends(get_db)) -> DiscountService:
    return DiscountService(db)


def get_additional_services_service(
    db: Session = Depends(get_db),
) -> AdditionalServicesService:
    return AdditionalServicesService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_payment_service(
    db: Session = Depends(get_db),
    client: Optional[MamoPayClient] = Depends(get_payment_client),
) -> PaymentService:
    return PaymentService(db, client)


def get_payment_webhook_service(
    db: Session = Depends(get_db),
    client: Optional[MamoPayClient] = Depends(get_payment_client),
) -> PaymentWebhookService:
    service = PaymentWebhookService(db)
    service.payment_service = PaymentService(db, client)
    return service
