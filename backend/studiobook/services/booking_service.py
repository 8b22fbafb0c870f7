# backend/studiobook/services/booking_service.py
"""
Booking Service for the studio booking platform.

Creation runs through VALIDATING -> PRICING -> PERSISTING -> COMMITTED, or
ABORTED on the first failure. The overlap check and the insert share one
transaction holding a row lock on the studio, so two requests for the same
studio interval cannot both commit.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, timedelta
from decimal import Decimal
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import MIN_BOOKING_HOURS
from ..core.exceptions import (
    BookingTimeoutException,
    CapacityExceededException,
    DiscountIneligibleException,
    DomainException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    SlotUnavailableException,
    ValidationException,
)
from ..core.time_utils import to_utc_instant, utc_now
from ..database.session_utils import set_local_statement_timeout
from ..models.additional_service import AdditionalService
from ..models.booking import Booking, BookingAdditionalService, BookingCreationPhase, BookingStatus
from ..models.discount_code import DiscountCode
from ..models.studio import Package, Studio
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .booking_validator import OverlapValidator, fits_operating_hours
from .discount_service import DiscountService, discount_terms
from .lead_service import LeadService
from .pricing_service import BookingPrice, PriceLine, price_booking, reprice_booking

logger = logging.getLogger(__name__)

ServiceLine = Tuple[AdditionalService, int]


class BookingService(BaseService):
    """Booking creation, retrieval and discount application."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.studio_repository = RepositoryFactory.create_studio_repository(db)
        self.package_repository = RepositoryFactory.create_package_repository(db)
        self.service_repository = RepositoryFactory.create_additional_service_repository(db)
        self.discount_repository = RepositoryFactory.create_discount_code_repository(db)
        self.discount_service = DiscountService(db)
        self.lead_service = LeadService(db)
        self.validator = OverlapValidator(self.repository)

    def _log_phase(self, phase: BookingCreationPhase, studio_id: str, **context: Any) -> None:
        self.logger.info(
            f"Booking creation phase: {phase.value}",
            extra={"booking_phase": phase.value, "studio_id": studio_id, **context},
        )

    @contextmanager
    def _booking_transaction(self, studio_id: str) -> Iterator[Session]:
        """
        Transaction for the persisting phase.

        Lock waits and statement timeouts surface as a retryable
        BookingTimeoutException; other store failures as ServiceException.
        """
        try:
            yield self.db
            self.db.commit()
        except OperationalError as exc:
            self.db.rollback()
            self.logger.error(f"Booking transaction timed out: {str(exc)}")
            raise BookingTimeoutException(details={"studio_id": studio_id}) from exc
        except (SQLAlchemyError, RepositoryException) as exc:
            self.db.rollback()
            self.logger.error(f"Booking transaction failed: {str(exc)}")
            raise ServiceException(
                "Booking could not be saved, please retry",
                code="BOOKING_PERSIST_FAILED",
                details={"retryable": True},
            ) from exc
        except Exception:
            self.db.rollback()
            raise

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking")
    def create_booking(self, data: Dict[str, Any], now: Optional[datetime] = None) -> Booking:
        """
        Create a PENDING booking.

        Args:
            data: studio_id, package_id, booking_date, start_time (``HH:mm`` local),
                duration_hours, number_of_seats, lead, additional_services
                (``[{"id", "quantity"}]``) and an optional discount_code
            now: Clock override

        Returns:
            The committed booking with studio, package, lead and line items

        Raises:
            NotFoundException: Studio, package or additional service missing
            ValidationException: Capacity, duration, slot or discount problems
            BookingTimeoutException: Lock or statement timeout, retryable
        """
        studio_id = data["studio_id"]
        now = now or utc_now()
        self._log_phase(BookingCreationPhase.VALIDATING, studio_id)
        try:
            # 1. Validate references and inputs
            studio, package = self._load_studio_and_package(
                studio_id, data["package_id"], int(data.get("number_of_seats") or 1)
            )
            start, end = self._resolve_interval(data, now)
            service_lines = self._resolve_service_lines(data.get("additional_services") or [])

            # 2. Price, including discount eligibility
            self._log_phase(BookingCreationPhase.PRICING, studio_id)
            if not fits_operating_hours(start, end, studio.opening_time, studio.closing_time):
                raise SlotUnavailableException(
                    "Selected time is outside studio operating hours",
                    details={
                        "opening_time": studio.opening_time,
                        "closing_time": studio.closing_time,
                    },
                )
            lead_data = dict(data["lead"])
            discount, price = self._price(
                package,
                data["duration_hours"],
                service_lines,
                data.get("discount_code"),
                lead_data.get("email"),
            )

            # 3. Persist under the studio lock
            self._log_phase(BookingCreationPhase.PERSISTING, studio_id)
            booking = self._persist(
                studio, package, data, start, end, service_lines, discount, price, lead_data
            )
        except DomainException as exc:
            self._log_phase(BookingCreationPhase.ABORTED, studio_id, code=exc.code)
            raise

        self._log_phase(BookingCreationPhase.COMMITTED, studio_id, booking_id=booking.id)
        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            studio_id=studio_id,
            total_cost=str(booking.total_cost),
        )
        return self.get_booking(booking.id)

    def _load_studio_and_package(
        self, studio_id: str, package_id: str, seats: int
    ) -> Tuple[Studio, Package]:
        studio = self.studio_repository.get_by_id(studio_id)
        if studio is None:
            raise NotFoundException("Studio not found", details={"studio_id": studio_id})
        if seats < 1:
            raise ValidationException("At least one seat must be booked")
        if seats > studio.total_seats:
            raise CapacityExceededException(seats, studio.total_seats)

        package = self.package_repository.get_by_id(package_id)
        if package is None:
            raise NotFoundException("Package not found", details={"package_id": package_id})
        if not self.package_repository.is_offered_by_studio(package.id, studio.id):
            raise ValidationException(
                "Package is not offered by this studio",
                code="PACKAGE_NOT_OFFERED",
                details={"package_id": package_id, "studio_id": studio_id},
            )
        return studio, package

    def _resolve_interval(self, data: Dict[str, Any], now: datetime) -> Tuple[datetime, datetime]:
        duration = data.get("duration_hours")
        if not isinstance(duration, int) or not (
            MIN_BOOKING_HOURS <= duration <= settings.max_booking_hours
        ):
            raise ValidationException(
                f"Duration must be between {MIN_BOOKING_HOURS} and "
                f"{settings.max_booking_hours} whole hours",
                code="INVALID_DURATION",
            )
        booking_date: date = data["booking_date"]
        try:
            start = to_utc_instant(booking_date, data["start_time"])
        except ValueError as exc:
            raise ValidationException(str(exc), code="INVALID_START_TIME") from exc
        if start <= now:
            raise ValidationException("Booking start time must be in the future")
        return start, start + timedelta(hours=duration)

    def _resolve_service_lines(self, requested: List[Dict[str, Any]]) -> List[ServiceLine]:
        """Merge duplicate ids, then require every service to exist and be active."""
        quantities: Dict[str, int] = {}
        for line in requested:
            quantity = int(line.get("quantity") or 1)
            if quantity < 1:
                raise ValidationException("Additional service quantity must be at least 1")
            quantities[line["id"]] = quantities.get(line["id"], 0) + quantity
        if not quantities:
            return []

        services = {s.id: s for s in self.service_repository.get_many(quantities)}
        lines: List[ServiceLine] = []
        for service_id, quantity in quantities.items():
            service = services.get(service_id)
            if service is None:
                raise NotFoundException(
                    "Additional service not found", details={"additional_service_id": service_id}
                )
            if not service.is_active:
                raise ValidationException(
                    f"Additional service '{service.title}' is not available",
                    code="ADDITIONAL_SERVICE_INACTIVE",
                    details={"additional_service_id": service_id},
                )
            lines.append((service, quantity))
        return lines

    def _price(
        self,
        package: Package,
        duration_hours: int,
        service_lines: List[ServiceLine],
        code: Optional[str],
        email: Optional[str],
    ) -> Tuple[Optional[DiscountCode], BookingPrice]:
        lines = [PriceLine(unit_price=s.price, quantity=q) for s, q in service_lines]
        undiscounted = price_booking(package.price_per_hour, duration_hours, lines)
        if not code:
            return None, undiscounted
        discount = self.discount_service.get_redeemable(code, undiscounted.pre_discount, email)
        return discount, price_booking(
            package.price_per_hour, duration_hours, lines, discount_terms(discount)
        )

    def _persist(
        self,
        studio: Studio,
        package: Package,
        data: Dict[str, Any],
        start: datetime,
        end: datetime,
        service_lines: List[ServiceLine],
        discount: Optional[DiscountCode],
        price: BookingPrice,
        lead_data: Dict[str, Any],
    ) -> Booking:
        with self._booking_transaction(studio.id):
            set_local_statement_timeout(self.db, settings.booking_transaction_timeout_ms)
            locked = self.studio_repository.get_for_update(studio.id)
            if locked is None:
                raise NotFoundException("Studio not found", details={"studio_id": studio.id})

            if not self.validator.is_bookable(
                locked.id, start, end, locked.opening_time, locked.closing_time
            ):
                raise SlotUnavailableException(
                    details={"start_time": start.isoformat(), "end_time": end.isoformat()}
                )

            lead = self.lead_service.upsert(lead_data)
            booking = self.repository.create(
                studio_id=locked.id,
                package_id=package.id,
                lead_id=lead.id,
                discount_code_id=discount.id if discount else None,
                start_time=start,
                end_time=end,
                duration_hours=data["duration_hours"],
                number_of_seats=int(data.get("number_of_seats") or 1),
                price_per_hour=package.price_per_hour,
                base_cost=price.base_cost,
                services_cost=price.services_cost,
                discount_amount=price.discount_amount,
                vat_amount=price.vat_amount,
                total_cost=price.total_cost,
                currency=package.currency or settings.default_currency,
                status=BookingStatus.PENDING.value,
                additional_services=[
                    BookingAdditionalService(
                        additional_service_id=service.id, quantity=quantity, price=service.price
                    )
                    for service, quantity in service_lines
                ],
            )

            if discount is not None and not self.discount_repository.increment_usage(discount.id):
                raise DiscountIneligibleException(
                    "Discount code has reached its usage limit", details={"code": discount.code}
                )
        return booking

    # ------------------------------------------------------------------
    # Retrieval and discounts
    # ------------------------------------------------------------------

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    def validate_discount(
        self, code: str, amount: Optional[Decimal] = None, email: Optional[str] = None
    ) -> Dict[str, Any]:
        return self.discount_service.validate_code(code, amount, email)

    @BaseService.measure_operation("apply_discount")
    def apply_discount(self, booking_id: str, code: str) -> Booking:
        """Attach a discount code to a pending booking and re-price it."""
        booking = self.get_booking(booking_id)
        if booking.status != BookingStatus.PENDING.value:
            raise ValidationException(
                "Discounts can only be applied to pending bookings",
                code="BOOKING_NOT_PENDING",
                details={"status": booking.status},
            )
        if booking.discount_code_id:
            raise ValidationException(
                "A discount code has already been applied to this booking",
                code="DISCOUNT_ALREADY_APPLIED",
            )
        discount = self.discount_service.get_redeemable(
            code,
            booking.pre_discount_cost,
            booking.lead.email if booking.lead else None,
            exclude_booking_id=booking.id,
        )

        with self.transaction():
            locked = self.repository.get_for_update(booking.id)
            if locked is None or locked.discount_code_id:
                raise ValidationException(
                    "A discount code has already been applied to this booking",
                    code="DISCOUNT_ALREADY_APPLIED",
                )
            if not self.discount_repository.increment_usage(discount.id):
                raise DiscountIneligibleException(
                    "Discount code has reached its usage limit", details={"code": discount.code}
                )
            locked.discount_code = discount
            reprice_booking(locked)

        self.log_operation(
            "apply_discount",
            booking_id=booking_id,
            code=discount.code,
            total=str(locked.total_cost),
        )
        return locked
