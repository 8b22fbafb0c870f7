# backend/studiobook/services/studio_service.py
"""
Studio and package catalog.

New studios are connected to every shared default package plus any custom
packages supplied with the studio, which the studio then owns.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..core.time_utils import parse_time_of_day
from ..models.studio import Package, PackagePerk, Studio
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def _build_perks(perks: List[Dict[str, Any]]) -> List[PackagePerk]:
    return [
        PackagePerk(name=perk["name"], count=perk.get("count"), position=position)
        for position, perk in enumerate(perks)
    ]


class PackageService(BaseService):
    """Packages and their perks."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_package_repository(db)
        self.studio_repository = RepositoryFactory.create_studio_repository(db)

    def build_package(self, data: Dict[str, Any], studio_id: Optional[str] = None) -> Package:
        """Unsaved package with ordered perks."""
        return Package(
            name=data["name"],
            price_per_hour=data["price_per_hour"],
            currency=data.get("currency") or settings.default_currency,
            description=data.get("description"),
            delivery_time=data.get("delivery_time"),
            studio_id=studio_id,
            perks=_build_perks(data.get("perks") or []),
        )

    @BaseService.measure_operation("create_package")
    def create_package(self, data: Dict[str, Any]) -> Package:
        """
        Create a package.

        Without ``studio_id`` the package is a shared default and gets linked
        to every existing studio; with one it is owned by and linked to that
        studio only.
        """
        studio_id = data.get("studio_id")
        if studio_id:
            studios = [self._require_studio(studio_id)]
        else:
            studios = self.studio_repository.list_studios()

        with self.transaction():
            package = self.build_package(data, studio_id)
            package.studios = studios
            self.db.add(package)
            self.db.flush()

        self.log_operation("create_package", package_id=package.id, studio_id=studio_id)
        return self.get_package(package.id)

    def _require_studio(self, studio_id: str) -> Studio:
        studio = self.studio_repository.get_by_id(studio_id, load_relationships=False)
        if studio is None:
            raise NotFoundException("Studio not found", details={"studio_id": studio_id})
        return studio

    def list_packages(self, studio_id: Optional[str] = None) -> List[Package]:
        return self.repository.list_packages(studio_id)

    def get_package(self, package_id: str) -> Package:
        package = self.repository.get_by_id(package_id)
        if package is None:
            raise NotFoundException("Package not found", details={"package_id": package_id})
        return package


class StudioService(BaseService):
    """Studio CRUD."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_studio_repository(db)
        self.package_repository = RepositoryFactory.create_package_repository(db)
        self.package_service = PackageService(db)

    @staticmethod
    def _validate_hours(opening_time: str, closing_time: str) -> None:
        try:
            opening = parse_time_of_day(opening_time)
            closing = parse_time_of_day(closing_time)
        except ValueError as exc:
            raise ValidationException(str(exc), code="INVALID_OPERATING_HOURS") from exc
        if opening >= closing:
            raise ValidationException(
                "Opening time must be before closing time", code="INVALID_OPERATING_HOURS"
            )

    @BaseService.measure_operation("create_studio")
    def create_studio(self, data: Dict[str, Any]) -> Studio:
        self._validate_hours(data["opening_time"], data["closing_time"])
        if int(data["total_seats"]) < 1:
            raise ValidationException("Studio must have at least one seat")

        with self.transaction():
            studio = self.repository.create(
                name=data["name"],
                location=data["location"],
                image_url=data.get("image_url"),
                total_seats=data["total_seats"],
                opening_time=data["opening_time"],
                closing_time=data["closing_time"],
            )
            packages = list(self.package_repository.get_default_packages())
            for package_data in data.get("packages") or []:
                package = self.package_service.build_package(package_data, studio.id)
                self.db.add(package)
                packages.append(package)
            studio.packages = packages
            self.db.flush()

        self.log_operation(
            "create_studio", studio_id=studio.id, package_count=len(studio.packages)
        )
        return self.get_studio(studio.id)

    def list_studios(self) -> List[Studio]:
        return self.repository.list_studios()

    def get_studio(self, studio_id: str) -> Studio:
        studio = self.repository.get_by_id(studio_id)
        if studio is None:
            raise NotFoundException("Studio not found", details={"studio_id": studio_id})
        return studio

    def get_studio_packages(self, studio_id: str) -> List[Package]:
        self.get_studio(studio_id)
        return self.package_repository.list_packages(studio_id)
