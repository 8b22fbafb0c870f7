"""
Studio and package models.

A studio is a bookable room with fixed local operating hours and a seat
capacity. Packages price studio time per hour; packages without an owning
studio are shared defaults attached to every new studio.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

if TYPE_CHECKING:
    from .booking import Booking


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


studio_package_links = sa.Table(
    "studio_package_links",
    Base.metadata,
    sa.Column(
        "studio_id", String(26), ForeignKey("studios.id", ondelete="CASCADE"), primary_key=True
    ),
    sa.Column(
        "package_id",
        String(26),
        ForeignKey("studio_packages.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Studio(Base):
    """Bookable studio with operating hours stored as local ``HH:mm`` strings."""

    __tablename__ = "studios"

    __table_args__ = (
        CheckConstraint("total_seats > 0", name="check_studio_total_seats_positive"),
        CheckConstraint("opening_time < closing_time", name="check_studio_hours_order"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    opening_time: Mapped[str] = mapped_column(String(5), nullable=False)
    closing_time: Mapped[str] = mapped_column(String(5), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=_now_utc
    )

    packages: Mapped[List["Package"]] = relationship(
        "Package", secondary=studio_package_links, back_populates="studios", order_by="Package.name"
    )
    bookings: Mapped[List["Booking"]] = relationship("Booking", back_populates="studio")

    def __repr__(self) -> str:
        return f"<Studio {self.name} {self.opening_time}-{self.closing_time}>"


class Package(Base):
    """Hourly price plan offered in one or more studios."""

    __tablename__ = "studio_packages"

    __table_args__ = (
        CheckConstraint("price_per_hour >= 0", name="check_package_price_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price_per_hour: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="AED")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    delivery_time: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # Null owner marks a shared default package
    studio_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("studios.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )

    perks: Mapped[List["PackagePerk"]] = relationship(
        "PackagePerk",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="PackagePerk.position",
    )
    studios: Mapped[List[Studio]] = relationship(
        "Studio", secondary=studio_package_links, back_populates="packages"
    )

    @property
    def is_default(self) -> bool:
        return self.studio_id is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price_per_hour": float(self.price_per_hour),
            "currency": self.currency,
            "delivery_time": self.delivery_time,
            "perks": [{"name": perk.name, "count": perk.count} for perk in self.perks],
        }


class PackagePerk(Base):
    """Ordered perk line shown with a package (e.g. "Edited reels", count 2)."""

    __tablename__ = "package_perks"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    package_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("studio_packages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    package: Mapped[Package] = relationship("Package", back_populates="perks")
