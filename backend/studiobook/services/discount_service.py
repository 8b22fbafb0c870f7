"""
Discount code management and redemption eligibility.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    ConflictException,
    DiscountIneligibleException,
    NotFoundException,
    ValidationException,
)
from ..core.time_utils import as_utc, utc_now
from ..models.discount_code import DiscountCode, DiscountType
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .pricing_service import DiscountTerms, calculate_discount_amount, to_money

logger = logging.getLogger(__name__)


def discount_terms(discount: DiscountCode) -> DiscountTerms:
    return DiscountTerms(type=discount.type, value=Decimal(str(discount.value)))


class DiscountService(BaseService):
    """Discount code CRUD and the eligibility rules applied at redemption."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_discount_code_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------

    def check_eligibility(
        self,
        discount: DiscountCode,
        pre_discount: Optional[Decimal],
        email: Optional[str] = None,
        now: Optional[datetime] = None,
        *,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """
        Raise DiscountIneligibleException unless the code can be redeemed.

        Checks, in order: active flag, validity window, usage cap, minimum
        amount, first-time-only. The minimum amount check is skipped when
        ``pre_discount`` is None and the first-time check when no email is
        known.
        """
        now = as_utc(now) if now else utc_now()
        details = {"code": discount.code}

        if not discount.is_active:
            raise DiscountIneligibleException("Discount code is not active", details=details)
        if now < as_utc(discount.start_date) or now > as_utc(discount.end_date):
            raise DiscountIneligibleException(
                "Discount code has expired or is not yet valid", details=details
            )
        if discount.is_exhausted:
            raise DiscountIneligibleException(
                "Discount code has reached its usage limit", details=details
            )
        below_minimum = (
            pre_discount is not None
            and discount.min_amount is not None
            and to_money(pre_discount) < to_money(discount.min_amount)
        )
        if below_minimum:
            raise DiscountIneligibleException(
                f"Minimum booking amount of {to_money(discount.min_amount)} "
                "required for this discount",
                details={**details, "min_amount": float(discount.min_amount)},
            )
        if discount.first_time_only and email:
            if self.booking_repository.count_for_lead_email(email, exclude_booking_id) > 0:
                raise DiscountIneligibleException(
                    "This discount code is only valid for first-time clients", details=details
                )

    def get_redeemable(
        self,
        code: str,
        pre_discount: Optional[Decimal],
        email: Optional[str] = None,
        *,
        exclude_booking_id: Optional[str] = None,
    ) -> DiscountCode:
        """Resolve a code and run every eligibility check against it."""
        discount = self.repository.find_by_code(code)
        if discount is None:
            raise DiscountIneligibleException("Invalid discount code", details={"code": code})
        self.check_eligibility(
            discount, pre_discount, email, exclude_booking_id=exclude_booking_id
        )
        return discount

    @BaseService.measure_operation("validate_discount")
    def validate_code(
        self, code: str, amount: Optional[Decimal] = None, email: Optional[str] = None
    ) -> Dict[str, Any]:
        """Read-only eligibility check returning the terms and the discount for ``amount``."""
        discount = self.get_redeemable(code, amount, email)
        result: Dict[str, Any] = {
            "valid": True,
            "code": discount.code,
            "type": discount.type,
            "value": discount.value,
            "min_amount": discount.min_amount,
            "first_time_only": discount.first_time_only,
        }
        if amount is not None:
            result["discount_amount"] = calculate_discount_amount(discount_terms(discount), amount)
        return result

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def _validate_terms(self, data: Dict[str, Any]) -> None:
        if data.get("type") == DiscountType.PERCENTAGE.value and Decimal(str(data["value"])) > 100:
            raise ValidationException("Percentage discount cannot exceed 100")
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and as_utc(end) <= as_utc(start):
            raise ValidationException("Discount end date must be after its start date")

    @BaseService.measure_operation("create_discount")
    def create_discount(self, data: Dict[str, Any]) -> DiscountCode:
        payload = dict(data)
        payload["code"] = payload["code"].strip()
        payload.setdefault("type", DiscountType.PERCENTAGE.value)
        now = utc_now()
        payload["start_date"] = as_utc(payload.get("start_date") or now)
        payload["end_date"] = as_utc(payload.get("end_date") or now + timedelta(days=365))
        payload.setdefault("is_active", True)
        self._validate_terms(payload)

        if self.repository.find_by_code(payload["code"]) is not None:
            raise ConflictException(
                "Discount code already exists",
                code="DISCOUNT_CODE_EXISTS",
                details={"code": payload["code"]},
            )

        with self.transaction():
            discount = self.repository.create(**payload)
        self.log_operation("create_discount", discount_code_id=discount.id, code=discount.code)
        return discount

    def list_discounts(self, active: Optional[bool] = None) -> List[DiscountCode]:
        return self.repository.list_codes(active)

    def get_discount(self, discount_id: str) -> DiscountCode:
        discount = self.repository.get_by_id(discount_id)
        if discount is None:
            raise NotFoundException("Discount code not found", details={"id": discount_id})
        return discount

    @BaseService.measure_operation("update_discount")
    def update_discount(self, discount_id: str, data: Dict[str, Any]) -> DiscountCode:
        discount = self.get_discount(discount_id)
        changes = dict(data)
        if "code" in changes and changes["code"]:
            changes["code"] = changes["code"].strip()
            existing = self.repository.find_by_code(changes["code"])
            if existing is not None and existing.id != discount.id:
                raise ConflictException(
                    "Discount code already exists",
                    code="DISCOUNT_CODE_EXISTS",
                    details={"code": changes["code"]},
                )
        for key in ("start_date", "end_date"):
            if changes.get(key) is not None:
                changes[key] = as_utc(changes[key])
        merged = {
            "type": changes.get("type", discount.type),
            "value": changes.get("value", discount.value),
            "start_date": changes.get("start_date", discount.start_date),
            "end_date": changes.get("end_date", discount.end_date),
        }
        self._validate_terms(merged)
        if changes.get("max_uses") is not None and changes["max_uses"] < discount.used_count:
            raise ValidationException("max_uses cannot be lower than the current usage count")

        with self.transaction():
            updated = self.repository.update(discount.id, **changes)
        return updated

    @BaseService.measure_operation("delete_discount")
    def delete_discount(self, discount_id: str) -> None:
        discount = self.get_discount(discount_id)
        if self.booking_repository.count_referencing_discount(discount.id) > 0:
            raise ValidationException(
                "Cannot delete a discount code that has been used in bookings",
                code="DISCOUNT_CODE_IN_USE",
            )
        with self.transaction():
            self.repository.delete(discount.id)
        self.log_operation("delete_discount", discount_code_id=discount_id)
