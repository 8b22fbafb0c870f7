"""
SQLAlchemy models for the studio booking platform.

Importing this package registers every table on ``Base.metadata``.
"""

from .additional_service import AdditionalService, AdditionalServiceType
from .booking import Booking, BookingAdditionalService, BookingCreationPhase, BookingStatus
from .discount_code import DiscountCode, DiscountType
from .lead import Lead
from .payment import Payment, PaymentLink, PaymentStatus
from .studio import Package, PackagePerk, Studio, studio_package_links
from .webhook_event import WebhookEvent, WebhookEventStatus

__all__ = [
    "AdditionalService",
    "AdditionalServiceType",
    "Booking",
    "BookingAdditionalService",
    "BookingCreationPhase",
    "BookingStatus",
    "DiscountCode",
    "DiscountType",
    "Lead",
    "Package",
    "PackagePerk",
    "Payment",
    "PaymentLink",
    "PaymentStatus",
    "Studio",
    "WebhookEvent",
    "WebhookEventStatus",
    "studio_package_links",
]
