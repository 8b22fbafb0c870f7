# backend/studiobook/models/booking.py
"""
Booking model for the studio booking platform.

A booking reserves one studio for a half-open interval ``[start_time, end_time)``
stored in UTC. Price inputs are snapshotted at booking time (package hourly
rate, additional service unit prices) so later catalog edits never change a
booking's totals.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .additional_service import AdditionalService
    from .discount_code import DiscountCode
    from .lead import Lead
    from .payment import Payment, PaymentLink
    from .studio import Package, Studio

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Default - awaiting payment
    CONFIRMED = "CONFIRMED"  # Payment completed
    CANCELLED = "CANCELLED"  # Payment failed or refunded
    COMPLETED = "COMPLETED"  # Session took place


TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value})


class BookingCreationPhase(str, Enum):
    """Phases of the booking creation protocol, used in logs."""

    VALIDATING = "VALIDATING"
    PRICING = "PRICING"
    PERSISTING = "PERSISTING"
    COMMITTED = "COMMITTED"
    ABORTED = "ABORTED"


class Booking(Base):
    """
    Self-contained reservation of a studio.

    Invariants:
    - end_time = start_time + duration_hours
    - no two non-cancelled bookings of a studio overlap (enforced by the
      booking service under a studio row lock)
    - number_of_seats never exceeds the studio's capacity
    """

    __tablename__ = "bookings"

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_booking_time_order"),
        CheckConstraint("number_of_seats > 0", name="check_booking_seats_positive"),
        CheckConstraint("total_cost >= 0", name="check_booking_total_non_negative"),
        Index("ix_bookings_studio_window", "studio_id", "start_time", "end_time"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Core relationships
    studio_id: Mapped[str] = mapped_column(String(26), ForeignKey("studios.id"), nullable=False)
    package_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("studio_packages.id"), nullable=False
    )
    lead_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("leads.id"), nullable=False, index=True
    )
    discount_code_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("discount_codes.id"), nullable=True
    )

    # Reserved interval (UTC)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_seats: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Price snapshot
    price_per_hour: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    base_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    services_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    vat_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="AED")

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING.value, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=_now_utc
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    studio: Mapped["Studio"] = relationship("Studio", back_populates="bookings")
    package: Mapped["Package"] = relationship("Package")
    lead: Mapped["Lead"] = relationship("Lead", back_populates="bookings")
    discount_code: Mapped[Optional["DiscountCode"]] = relationship("DiscountCode")
    additional_services: Mapped[List["BookingAdditionalService"]] = relationship(
        "BookingAdditionalService",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingAdditionalService.created_at",
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment", back_populates="booking", cascade="all, delete-orphan"
    )
    payment_links: Mapped[List["PaymentLink"]] = relationship(
        "PaymentLink", back_populates="booking", cascade="all, delete-orphan"
    )

    def confirm(self) -> None:
        """Mark booking as paid."""
        self.status = BookingStatus.CONFIRMED.value
        self.confirmed_at = _now_utc()

    def cancel(self) -> None:
        """Cancel booking, releasing its interval."""
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = _now_utc()

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    @property
    def pre_discount_cost(self) -> Decimal:
        return Decimal(self.base_cost or 0) + Decimal(self.services_cost or 0)

    def to_dict(self) -> Dict[str, Any]:
        """Flat snapshot used by notifiers."""
        return {
            "id": self.id,
            "studio_id": self.studio_id,
            "package_id": self.package_id,
            "lead_id": self.lead_id,
            "discount_code_id": self.discount_code_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_hours": self.duration_hours,
            "number_of_seats": self.number_of_seats,
            "base_cost": float(self.base_cost or 0),
            "services_cost": float(self.services_cost or 0),
            "discount_amount": float(self.discount_amount or 0),
            "vat_amount": float(self.vat_amount or 0),
            "total_cost": float(self.total_cost or 0),
            "currency": self.currency,
            "status": self.status,
        }

    def __repr__(self) -> str:
        return f"<Booking {self.id} studio={self.studio_id} {self.start_time} {self.status}>"


class BookingAdditionalService(Base):
    """Frozen price/quantity snapshot of an add-on attached to a booking."""

    __tablename__ = "booking_additional_services"

    __table_args__ = (
        UniqueConstraint(
            "booking_id", "additional_service_id", name="uq_booking_additional_service"
        ),
        CheckConstraint("quantity > 0", name="check_line_item_quantity_positive"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    booking_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    additional_service_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("additional_services.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )

    booking: Mapped[Booking] = relationship("Booking", back_populates="additional_services")
    additional_service: Mapped["AdditionalService"] = relationship("AdditionalService")

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.price) * self.quantity
