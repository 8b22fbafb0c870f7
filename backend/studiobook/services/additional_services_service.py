"""
Additional services catalog and the line items attached to bookings.

Line items snapshot the service's price when attached; every change to a
booking's line items re-prices the booking.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..models.additional_service import AdditionalService
from ..models.booking import Booking, BookingAdditionalService, BookingStatus
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .pricing_service import reprice_booking

logger = logging.getLogger(__name__)


class AdditionalServicesService(BaseService):
    """Catalog CRUD and booking line items."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_additional_service_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.line_repository = RepositoryFactory.create_booking_line_item_repository(db)

    # Catalog

    def list_services(self, active: Optional[bool] = None) -> List[AdditionalService]:
        return self.repository.list_services(active)

    def get_service(self, service_id: str) -> AdditionalService:
        service = self.repository.get_by_id(service_id)
        if service is None:
            raise NotFoundException(
                "Additional service not found", details={"additional_service_id": service_id}
            )
        return service

    @BaseService.measure_operation("create_additional_service")
    def create_service(self, data: Dict[str, Any]) -> AdditionalService:
        with self.transaction():
            service = self.repository.create(**data)
        self.log_operation("create_additional_service", additional_service_id=service.id)
        return service

    @BaseService.measure_operation("update_additional_service")
    def update_service(self, service_id: str, data: Dict[str, Any]) -> AdditionalService:
        self.get_service(service_id)
        with self.transaction():
            service = self.repository.update(service_id, **data)
        return service

    @BaseService.measure_operation("delete_additional_service")
    def delete_service(self, service_id: str) -> Dict[str, Any]:
        """
        Delete a service, or deactivate it when bookings reference it.

        Returns:
            ``{"deleted": bool, "deactivated": bool}``
        """
        service = self.get_service(service_id)
        referenced = self.booking_repository.count_referencing_service(service.id) > 0
        with self.transaction():
            if referenced:
                service.is_active = False
            else:
                self.repository.delete(service.id)
        self.log_operation(
            "delete_additional_service", additional_service_id=service_id, deactivated=referenced
        )
        return {"deleted": not referenced, "deactivated": referenced}

    # Booking line items

    def _require_pending_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        if booking.status != BookingStatus.PENDING.value:
            raise ValidationException(
                "Additional services can only be changed on pending bookings",
                code="BOOKING_NOT_PENDING",
                details={"status": booking.status},
            )
        return booking

    @BaseService.measure_operation("add_service_to_booking")
    def add_service_to_booking(
        self, booking_id: str, service_id: str, quantity: int = 1
    ) -> Booking:
        """Attach a service (or replace its quantity) and re-price the booking."""
        if quantity < 1:
            raise ValidationException("Quantity must be at least 1")
        booking = self._require_pending_booking(booking_id)
        service = self.get_service(service_id)
        if not service.is_active:
            raise ValidationException(
                f"Additional service '{service.title}' is not available",
                code="ADDITIONAL_SERVICE_INACTIVE",
            )

        with self.transaction():
            line = self.line_repository.find_line(booking.id, service.id)
            if line is None:
                booking.additional_services.append(
                    BookingAdditionalService(
                        additional_service_id=service.id, quantity=quantity, price=service.price
                    )
                )
            else:
                line.quantity = quantity
                line.price = service.price
            self.db.flush()
            reprice_booking(booking)

        self.log_operation(
            "add_service_to_booking",
            booking_id=booking_id,
            additional_service_id=service_id,
            quantity=quantity,
        )
        return booking

    @BaseService.measure_operation("remove_service_from_booking")
    def remove_service_from_booking(self, booking_id: str, service_id: str) -> Booking:
        booking = self._require_pending_booking(booking_id)
        line = self.line_repository.find_line(booking.id, service_id)
        if line is None:
            raise NotFoundException(
                "Additional service is not attached to this booking",
                details={"booking_id": booking_id, "additional_service_id": service_id},
            )
        with self.transaction():
            booking.additional_services.remove(line)
            self.db.flush()
            reprice_booking(booking)
        return booking

    def list_booking_services(self, booking_id: str) -> List[BookingAdditionalService]:
        if not self.booking_repository.exists(id=booking_id):
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return self.line_repository.list_for_booking(booking_id)
