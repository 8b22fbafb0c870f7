"""Cost breakdown and discount arithmetic."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from studiobook.services.pricing_service import (
    DiscountTerms,
    PriceLine,
    calculate_discount_amount,
    price_booking,
    reprice_booking,
    to_money,
)


def test_base_booking_with_vat():
    price = price_booking(Decimal("600"), 2, vat_rate_percent=5)

    assert price.base_cost == Decimal("1200.00")
    assert price.services_cost == Decimal("0.00")
    assert price.discount_amount == Decimal("0.00")
    assert price.vat_amount == Decimal("60.00")
    assert price.total_cost == Decimal("1260.00")


def test_services_are_added_before_discount_and_vat():
    lines = [PriceLine(Decimal("150"), 2), PriceLine(Decimal("99.99"), 1)]
    price = price_booking(Decimal("600"), 1, lines, vat_rate_percent=5)

    assert price.services_cost == Decimal("399.99")
    assert price.pre_discount == Decimal("999.99")
    assert price.vat_amount == Decimal("50.00")
    assert price.total_cost == Decimal("1049.99")


def test_percentage_discount_applies_to_pre_discount_total():
    discount = DiscountTerms(type="PERCENTAGE", value=Decimal("10"))
    price = price_booking(Decimal("600"), 2, [], discount, vat_rate_percent=5)

    assert price.discount_amount == Decimal("120.00")
    assert price.vat_amount == Decimal("54.00")
    assert price.total_cost == Decimal("1134.00")


def test_fixed_discount_is_capped_at_pre_discount_amount():
    discount = DiscountTerms(type="FIXED_AMOUNT", value=Decimal("5000"))
    price = price_booking(Decimal("600"), 1, [], discount, vat_rate_percent=5)

    assert price.discount_amount == Decimal("600.00")
    assert price.vat_amount == Decimal("0.00")
    assert price.total_cost == Decimal("0.00")


@pytest.mark.parametrize(
    "terms, pre, expected",
    [
        (None, "1000", "0.00"),
        (DiscountTerms("PERCENTAGE", Decimal("12.5")), "99.99", "12.50"),
        (DiscountTerms("FIXED_AMOUNT", Decimal("200")), "1200", "200.00"),
        (DiscountTerms("PERCENTAGE", Decimal("100")), "0", "0.00"),
    ],
)
def test_calculate_discount_amount(terms, pre, expected):
    assert calculate_discount_amount(terms, Decimal(pre)) == Decimal(expected)


def test_rounding_is_half_up_to_cents():
    assert to_money(Decimal("0.125")) == Decimal("0.13")
    assert to_money("2.675") == Decimal("2.68")


def test_zero_vat_rate():
    price = price_booking(Decimal("250"), 3, vat_rate_percent=0)
    assert price.total_cost == Decimal("750.00")


def test_negative_duration_is_rejected():
    with pytest.raises(ValueError):
        price_booking(Decimal("600"), -1)


def test_reprice_booking_uses_snapshots_and_discount():
    booking = SimpleNamespace(
        price_per_hour=Decimal("600"),
        duration_hours=2,
        additional_services=[SimpleNamespace(price=Decimal("150"), quantity=1)],
        discount_code=SimpleNamespace(type="FIXED_AMOUNT", value=Decimal("200")),
    )

    price = reprice_booking(booking, vat_rate_percent=5)

    assert booking.base_cost == Decimal("1200.00")
    assert booking.services_cost == Decimal("150.00")
    assert booking.discount_amount == Decimal("200.00")
    assert booking.vat_amount == Decimal("57.50")
    assert booking.total_cost == price.total_cost == Decimal("1207.50")
