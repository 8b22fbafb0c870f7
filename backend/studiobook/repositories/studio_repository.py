"""Repositories for studios and packages."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.studio import Package, Studio, studio_package_links
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class StudioRepository(BaseRepository[Studio]):
    """Data access for studios."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Studio)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Studio.packages).selectinload(Package.perks))

    def list_studios(self) -> List[Studio]:
        query = self._apply_eager_loading(self._build_query()).order_by(Studio.name)
        return self._execute_query(query)

    def get_for_update(self, studio_id: str) -> Optional[Studio]:
        """
        Load a studio holding a row lock until the transaction ends.

        Booking creation serializes on this lock so the overlap check and the
        insert cannot interleave with another request for the same studio.
        """
        try:
            return (
                self.db.query(Studio)
                .filter(Studio.id == studio_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking studio {studio_id}: {str(e)}")
            raise


class PackageRepository(BaseRepository[Package]):
    """Data access for packages and their perks."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Package)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Package.perks))

    def list_packages(self, studio_id: Optional[str] = None) -> List[Package]:
        query = self._apply_eager_loading(self._build_query())
        if studio_id:
            query = query.join(
                studio_package_links, studio_package_links.c.package_id == Package.id
            ).filter(studio_package_links.c.studio_id == studio_id)
        return self._execute_query(query.order_by(Package.name))

    def get_default_packages(self) -> List[Package]:
        """Shared packages (no owning studio) connected to every new studio."""
        query = self._build_query().filter(Package.studio_id.is_(None)).order_by(Package.name)
        return self._execute_query(query)

    def is_offered_by_studio(self, package_id: str, studio_id: str) -> bool:
        try:
            row = (
                self.db.query(studio_package_links.c.package_id)
                .filter(
                    studio_package_links.c.package_id == package_id,
                    studio_package_links.c.studio_id == studio_id,
                )
                .first()
            )
            return row is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking package offer: {str(e)}")
            raise RepositoryException(f"Failed to check package offer: {str(e)}")
