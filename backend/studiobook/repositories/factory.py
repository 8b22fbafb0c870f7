# backend/studiobook/repositories/factory.py
"""
Repository Factory for the studio booking platform.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingAdditionalServiceRepository, BookingRepository
    from .catalog_repository import AdditionalServiceRepository, DiscountCodeRepository
    from .lead_repository import LeadRepository
    from .payment_repository import PaymentLinkRepository, PaymentRepository
    from .studio_repository import PackageRepository, StudioRepository
    from .webhook_event_repository import WebhookEventRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services never construct
    repositories by hand.
    """

    @staticmethod
    def create_base_repository(db: Session, model: Any) -> BaseRepository:
        return BaseRepository(db, model)

    @staticmethod
    def create_studio_repository(db: Session) -> "StudioRepository":
        from .studio_repository import StudioRepository

        return StudioRepository(db)

    @staticmethod
    def create_package_repository(db: Session) -> "PackageRepository":
        from .studio_repository import PackageRepository

        return PackageRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_booking_line_item_repository(db: Session) -> "BookingAdditionalServiceRepository":
        from .booking_repository import BookingAdditionalServiceRepository

        return BookingAdditionalServiceRepository(db)

    @staticmethod
    def create_additional_service_repository(db: Session) -> "AdditionalServiceRepository":
        from .catalog_repository import AdditionalServiceRepository

        return AdditionalServiceRepository(db)

    @staticmethod
    def create_discount_code_repository(db: Session) -> "DiscountCodeRepository":
        from .catalog_repository import DiscountCodeRepository

        return DiscountCodeRepository(db)

    @staticmethod
    def create_lead_repository(db: Session) -> "LeadRepository":
        from .lead_repository import LeadRepository

        return LeadRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> "PaymentRepository":
        from .payment_repository import PaymentRepository

        return PaymentRepository(db)

    @staticmethod
    def create_payment_link_repository(db: Session) -> "PaymentLinkRepository":
        from .payment_repository import PaymentLinkRepository

        return PaymentLinkRepository(db)

    @staticmethod
    def create_webhook_event_repository(db: Session) -> "WebhookEventRepository":
        from .webhook_event_repository import WebhookEventRepository

        return WebhookEventRepository(db)
