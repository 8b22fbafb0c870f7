"""Lead (customer) model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .booking import Booking


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Lead(Base):
    """
    Customer contact captured from bookings and enquiry forms.

    Email is the natural identity: leads with an email are upserted on it,
    leads without one are always created fresh.
    """

    __tablename__ = "leads"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    recording_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=_now_utc
    )

    bookings: Mapped[List["Booking"]] = relationship(
        "Booking", back_populates="lead", order_by="Booking.created_at.desc()"
    )

    @property
    def first_name(self) -> str:
        return (self.full_name or "").split(" ")[0]

    @property
    def last_name(self) -> str:
        parts = (self.full_name or "").split(" ", 1)
        return parts[1] if len(parts) > 1 else ""
