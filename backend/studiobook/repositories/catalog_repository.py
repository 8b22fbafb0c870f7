"""Repositories for the sellable catalog: additional services and discount codes."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.additional_service import AdditionalService
from ..models.discount_code import DiscountCode
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AdditionalServiceRepository(BaseRepository[AdditionalService]):
    """Data access for additional services."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, AdditionalService)

    def list_services(self, active: Optional[bool] = None) -> List[AdditionalService]:
        query = self._build_query()
        if active is not None:
            query = query.filter(AdditionalService.is_active.is_(active))
        return self._execute_query(query.order_by(AdditionalService.title))

    def get_many(self, service_ids: Iterable[str]) -> List[AdditionalService]:
        ids = list(set(service_ids))
        if not ids:
            return []
        return self._execute_query(self._build_query().filter(AdditionalService.id.in_(ids)))


class DiscountCodeRepository(BaseRepository[DiscountCode]):
    """Data access for discount codes."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, DiscountCode)

    def find_by_code(self, code: str) -> Optional[DiscountCode]:
        return self.find_one_by(code=code.strip())

    def list_codes(self, active: Optional[bool] = None) -> List[DiscountCode]:
        query = self._build_query()
        if active is not None:
            query = query.filter(DiscountCode.is_active.is_(active))
        return self._execute_query(query.order_by(DiscountCode.created_at.desc()))

    def increment_usage(self, discount_code_id: str) -> bool:
        """
        Atomically bump ``used_count`` unless the cap is already reached.

        Returns False when no row was updated (cap hit by a concurrent
        redemption).
        """
        try:
            updated = (
                self.db.query(DiscountCode)
                .filter(
                    DiscountCode.id == discount_code_id,
                    or_(
                        DiscountCode.max_uses.is_(None),
                        DiscountCode.used_count < DiscountCode.max_uses,
                    ),
                )
                .update(
                    {DiscountCode.used_count: DiscountCode.used_count + 1},
                    synchronize_session="fetch",
                )
            )
            return updated == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error incrementing discount usage {discount_code_id}: {str(e)}")
            raise RepositoryException(f"Failed to increment discount usage: {str(e)}") from e
