"""Discount eligibility rules and CRUD."""

from datetime import timedelta
from decimal import Decimal

import pytest

from studiobook.core.exceptions import (
    ConflictException,
    DiscountIneligibleException,
    NotFoundException,
    ValidationException,
)
from studiobook.services.discount_service import DiscountService


@pytest.fixture
def service(db) -> DiscountService:
    return DiscountService(db)


class TestEligibility:
    def test_inactive_code(self, service, make_discount, now):
        discount = make_discount(is_active=False)

        with pytest.raises(DiscountIneligibleException, match="not active"):
            service.check_eligibility(discount, Decimal("100"), now=now)

    def test_outside_validity_window(self, service, make_discount, now):
        discount = make_discount()

        with pytest.raises(DiscountIneligibleException, match="expired"):
            service.check_eligibility(discount, Decimal("100"), now=now + timedelta(days=90))
        with pytest.raises(DiscountIneligibleException, match="expired"):
            service.check_eligibility(discount, Decimal("100"), now=now - timedelta(days=2))

    def test_usage_cap(self, service, make_discount, now):
        discount = make_discount(max_uses=3, used_count=3)

        with pytest.raises(DiscountIneligibleException, match="usage limit"):
            service.check_eligibility(discount, Decimal("100"), now=now)

    def test_minimum_amount_is_inclusive(self, service, make_discount, now):
        discount = make_discount(min_amount=Decimal("1000"))

        service.check_eligibility(discount, Decimal("1000"), now=now)
        with pytest.raises(DiscountIneligibleException, match="Minimum booking amount"):
            service.check_eligibility(discount, Decimal("999.99"), now=now)

    def test_minimum_amount_skipped_without_amount(self, service, make_discount, now):
        discount = make_discount(min_amount=Decimal("1000"))
        service.check_eligibility(discount, None, now=now)

    def test_first_time_only(self, service, make_discount, make_booking, now):
        discount = make_discount(first_time_only=True)

        service.check_eligibility(discount, Decimal("100"), "new@example.com", now=now)
        make_booking()
        with pytest.raises(DiscountIneligibleException, match="first-time"):
            service.check_eligibility(discount, Decimal("100"), "layla@example.com", now=now)

    def test_first_time_only_without_email_is_skipped(self, service, make_discount, now):
        discount = make_discount(first_time_only=True)
        service.check_eligibility(discount, Decimal("100"), None, now=now)


class TestCrud:
    def test_create_defaults_window_and_type(self, service):
        discount = service.create_discount({"code": " SPRING ", "value": Decimal("15")})

        assert discount.code == "SPRING"
        assert discount.type == "PERCENTAGE"
        assert discount.end_date > discount.start_date
        assert discount.used_count == 0

    def test_duplicate_code_conflicts(self, service, make_discount):
        make_discount(code="SAVE5")

        with pytest.raises(ConflictException):
            service.create_discount({"code": "SAVE5", "value": Decimal("5")})

    def test_percentage_over_100_is_invalid(self, service):
        with pytest.raises(ValidationException):
            service.create_discount({"code": "TOO_MUCH", "value": Decimal("150")})

    def test_update_cannot_drop_cap_below_usage(self, service, make_discount):
        discount = make_discount(max_uses=10, used_count=4)

        with pytest.raises(ValidationException):
            service.update_discount(discount.id, {"max_uses": 3})
        updated = service.update_discount(discount.id, {"max_uses": 4, "is_active": False})
        assert updated.max_uses == 4
        assert updated.is_active is False

    def test_delete_refused_while_referenced(self, db, service, make_discount, make_booking):
        discount = make_discount()
        booking = make_booking()
        booking.discount_code_id = discount.id
        db.commit()

        with pytest.raises(ValidationException) as exc_info:
            service.delete_discount(discount.id)
        assert exc_info.value.code == "DISCOUNT_CODE_IN_USE"

    def test_delete_unreferenced(self, service, make_discount):
        discount = make_discount()

        service.delete_discount(discount.id)

        with pytest.raises(NotFoundException):
            service.get_discount(discount.id)
