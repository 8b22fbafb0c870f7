"""Studio and package catalog."""

from decimal import Decimal

import pytest

from studiobook.core.exceptions import NotFoundException, ValidationException
from studiobook.services.studio_service import PackageService, StudioService


@pytest.fixture
def studio_data():
    return {
        "name": "Video Room",
        "location": "Alserkal Avenue",
        "total_seats": 3,
        "opening_time": "09:00",
        "closing_time": "18:00",
        "packages": [
            {
                "name": "Video Podcast Pro",
                "price_per_hour": Decimal("950"),
                "perks": [{"name": "4K cameras", "count": 3}, {"name": "Teleprompter"}],
            }
        ],
    }


def test_new_studio_gets_default_and_custom_packages(db, default_package, studio_data):
    studio = StudioService(db).create_studio(studio_data)

    names = [package.name for package in studio.packages]
    assert names == ["Standard", "Video Podcast Pro"]
    custom = next(p for p in studio.packages if p.name == "Video Podcast Pro")
    assert custom.studio_id == studio.id
    assert [perk.name for perk in custom.perks] == ["4K cameras", "Teleprompter"]
    assert custom.perks[0].count == 3


def test_opening_must_precede_closing(db, studio_data):
    studio_data["opening_time"] = "18:00"
    studio_data["closing_time"] = "09:00"

    with pytest.raises(ValidationException) as exc_info:
        StudioService(db).create_studio(studio_data)
    assert exc_info.value.code == "INVALID_OPERATING_HOURS"


def test_malformed_hours_are_rejected(db, studio_data):
    studio_data["closing_time"] = "25:00"

    with pytest.raises(ValidationException):
        StudioService(db).create_studio(studio_data)


def test_get_unknown_studio(db):
    with pytest.raises(NotFoundException):
        StudioService(db).get_studio("01HZZZZZZZZZZZZZZZZZZZZZZZ")


def test_studio_packages_only_include_linked_ones(db, studio, default_package):
    other_studio = StudioService(db).create_studio(
        {
            "name": "Second Room",
            "location": "JLT",
            "total_seats": 2,
            "opening_time": "10:00",
            "closing_time": "20:00",
            "packages": [{"name": "Owned", "price_per_hour": Decimal("400")}],
        }
    )

    packages = StudioService(db).get_studio_packages(studio.id)

    assert [p.id for p in packages] == [default_package.id]
    assert len(StudioService(db).get_studio_packages(other_studio.id)) == 2


def test_shared_package_is_linked_to_every_studio(db, studio):
    package = PackageService(db).create_package(
        {"name": "Audio Only", "price_per_hour": Decimal("300")}
    )

    assert package.studio_id is None
    assert [s.id for s in package.studios] == [studio.id]


def test_owned_package_is_linked_to_its_studio(db, studio):
    package = PackageService(db).create_package(
        {"name": "House Special", "price_per_hour": Decimal("700"), "studio_id": studio.id}
    )

    assert package.studio_id == studio.id
    assert PackageService(db).list_packages(studio.id)[-1].name == "Standard"


def test_owned_package_requires_existing_studio(db):
    with pytest.raises(NotFoundException):
        PackageService(db).create_package(
            {"name": "Orphan", "price_per_hour": Decimal("1"), "studio_id": "missing"}
        )
