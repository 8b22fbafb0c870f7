# backend/studiobook/services/pricing_service.py
"""
Booking cost and discount calculation.

All money math uses Decimal quantized to cents with ROUND_HALF_UP:

    base      = price_per_hour * duration_hours
    services  = sum(unit_price * quantity)
    pre       = base + services
    discount  = pre * value / 100 (PERCENTAGE) or min(value, pre) (FIXED_AMOUNT)
    vat       = (pre - discount) * vat_rate / 100
    total     = pre - discount + vat
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Iterable, Optional, Union

from ..core.config import settings
from ..models.booking import Booking
from ..models.discount_code import DiscountType

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Quantize a value to cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceLine:
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class DiscountTerms:
    type: str
    value: Decimal


@dataclass(frozen=True)
class BookingPrice:
    base_cost: Decimal
    services_cost: Decimal
    discount_amount: Decimal
    vat_amount: Decimal
    total_cost: Decimal

    @property
    def pre_discount(self) -> Decimal:
        return self.base_cost + self.services_cost


def calculate_discount_amount(discount: Optional[DiscountTerms], pre_discount: Number) -> Decimal:
    """Discount for a pre-discount amount, never exceeding it."""
    pre = to_money(pre_discount)
    if discount is None or pre <= 0:
        return to_money(0)
    value = Decimal(str(discount.value))
    if discount.type == DiscountType.PERCENTAGE.value:
        amount = pre * value / Decimal(100)
    else:
        amount = value
    return to_money(min(amount, pre))


def price_booking(
    price_per_hour: Number,
    duration_hours: int,
    lines: Iterable[PriceLine] = (),
    discount: Optional[DiscountTerms] = None,
    vat_rate_percent: Optional[Number] = None,
) -> BookingPrice:
    """
    Compute every cost component of a booking.

    Args:
        price_per_hour: Package hourly rate
        duration_hours: Whole hours booked
        lines: Additional service lines (unit price snapshot and quantity)
        discount: Optional discount terms already checked for eligibility
        vat_rate_percent: VAT percentage, defaults to the configured rate

    Returns:
        BookingPrice with all components in cents precision
    """
    if duration_hours < 0:
        raise ValueError("duration_hours cannot be negative")
    if vat_rate_percent is None:
        vat_rate_percent = settings.vat_rate_percent
    vat_rate = Decimal(str(vat_rate_percent))

    base_cost = to_money(Decimal(str(price_per_hour)) * duration_hours)
    services_cost = to_money(
        sum((Decimal(str(line.unit_price)) * line.quantity for line in lines), Decimal(0))
    )
    pre_discount = base_cost + services_cost
    discount_amount = calculate_discount_amount(discount, pre_discount)
    vat_amount = to_money((pre_discount - discount_amount) * vat_rate / Decimal(100))
    total_cost = to_money(pre_discount - discount_amount + vat_amount)

    return BookingPrice(
        base_cost=base_cost,
        services_cost=services_cost,
        discount_amount=discount_amount,
        vat_amount=vat_amount,
        total_cost=total_cost,
    )


def reprice_booking(booking: Booking, vat_rate_percent: Optional[Number] = None) -> BookingPrice:
    """
    Recompute a booking's totals from its own snapshots and write them back.

    Uses the booking's hourly rate snapshot, its line items and its applied
    discount code.
    """
    lines = [
        PriceLine(unit_price=item.price, quantity=item.quantity)
        for item in booking.additional_services
    ]
    discount = None
    if booking.discount_code is not None:
        discount = DiscountTerms(type=booking.discount_code.type, value=booking.discount_code.value)
    price = price_booking(
        booking.price_per_hour, booking.duration_hours, lines, discount, vat_rate_percent
    )
    apply_price(booking, price)
    return price


def apply_price(booking: Booking, price: BookingPrice) -> None:
    booking.base_cost = price.base_cost
    booking.services_cost = price.services_cost
    booking.discount_amount = price.discount_amount
    booking.vat_amount = price.vat_amount
    booking.total_cost = price.total_cost
