# backend/tests/conftest.py
"""
Pytest configuration.

Tests run against an in-memory SQLite database. Environment overrides are
applied BEFORE any studiobook import so settings and the engine pick them up.
"""

import os

# CRITICAL: Set test configuration BEFORE any studiobook imports!
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CI"] = "true"
os.environ["MAMOPAY_API_KEY"] = ""
os.environ["NOTION_API_KEY"] = ""
os.environ["BOOKING_WEBHOOK_URL"] = ""
os.environ["VAT_RATE_PERCENT"] = "5"
os.environ["FACILITY_UTC_OFFSET_MINUTES"] = "240"

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List
from unittest.mock import Mock

from fastapi.testclient import TestClient
import httpx
import pytest
from sqlalchemy.orm import Session

from studiobook.api.dependencies.database import get_db
from studiobook.api.dependencies.services import get_notification_service, get_payment_client
from studiobook.core.time_utils import local_today, to_utc_instant
from studiobook.database import Base, SessionLocal, engine
from studiobook.integrations.mamopay_client import MamoPayClient
from studiobook.main import app
from studiobook.models.additional_service import AdditionalService
from studiobook.models.booking import Booking, BookingStatus
from studiobook.models.discount_code import DiscountCode
from studiobook.models.lead import Lead
from studiobook.models.studio import Package, PackagePerk, Studio
from studiobook.services.notification_service import NotificationService


# ============================================================================
# Database and client
# ============================================================================


@pytest.fixture(scope="function")
def db():
    """Fresh schema and session for each test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mock_notifier() -> Mock:
    return Mock(spec=NotificationService)


@pytest.fixture
def mamopay_requests() -> List[httpx.Request]:
    """Requests captured by the fake payment provider."""
    return []


@pytest.fixture
def mamopay_handler() -> Dict[str, Callable[[httpx.Request], httpx.Response]]:
    """Per-test response hooks keyed by ``"METHOD path-suffix"``."""
    return {}


@pytest.fixture
def mamopay_client(mamopay_requests, mamopay_handler) -> MamoPayClient:
    def handler(request: httpx.Request) -> httpx.Response:
        mamopay_requests.append(request)
        for key, respond in mamopay_handler.items():
            method, suffix = key.split(" ", 1)
            if request.method == method and request.url.path.endswith(suffix):
                return respond(request)
        return httpx.Response(404, json={"messages": ["not found"]})

    return MamoPayClient(
        api_key="sk_test",
        base_url="https://mamopay.test/manage_api/v1",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def client(db: Session, mock_notifier: Mock, mamopay_client: MamoPayClient):
    """Create a test client bound to the test session."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_service] = lambda: mock_notifier
    app.dependency_overrides[get_payment_client] = lambda: mamopay_client

    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# Clock
# ============================================================================


@pytest.fixture
def booking_day():
    """A local calendar date safely in the future."""
    return local_today() + timedelta(days=7)


@pytest.fixture
def now(booking_day) -> datetime:
    """Clock pinned to local midnight a week before ``booking_day``."""
    return to_utc_instant(booking_day - timedelta(days=7), "00:00")


# ============================================================================
# Catalog data
# ============================================================================


@pytest.fixture
def default_package(db: Session) -> Package:
    package = Package(
        name="Standard",
        price_per_hour=Decimal("600.00"),
        currency="AED",
        delivery_time="48 hours",
        perks=[
            PackagePerk(name="Cameras", count=2, position=0),
            PackagePerk(name="Lighting setup", position=1),
        ],
    )
    db.add(package)
    db.commit()
    return package


@pytest.fixture
def studio(db: Session, default_package: Package) -> Studio:
    studio = Studio(
        name="Podcast Room",
        location="Dubai Design District",
        total_seats=4,
        opening_time="10:00",
        closing_time="21:00",
        packages=[default_package],
    )
    db.add(studio)
    db.commit()
    return studio


@pytest.fixture
def additional_service(db: Session) -> AdditionalService:
    service = AdditionalService(
        title="Video editing",
        type="STANDARD_EDIT_SHORT_FORM",
        price=Decimal("150.00"),
        currency="AED",
    )
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def make_discount(db: Session, now: datetime) -> Callable[..., DiscountCode]:
    def _make(**overrides: Any) -> DiscountCode:
        fields: Dict[str, Any] = {
            "code": "SAVE5",
            "type": "PERCENTAGE",
            "value": Decimal("5"),
            "start_date": now - timedelta(days=1),
            "end_date": now + timedelta(days=60),
            "is_active": True,
        }
        fields.update(overrides)
        discount = DiscountCode(**fields)
        db.add(discount)
        db.commit()
        return discount

    return _make


@pytest.fixture
def lead(db: Session) -> Lead:
    lead = Lead(full_name="Layla Haddad", email="layla@example.com", phone_number="+971500000001")
    db.add(lead)
    db.commit()
    return lead


@pytest.fixture
def make_booking(
    db: Session, studio: Studio, default_package: Package, lead: Lead, booking_day
) -> Callable[..., Booking]:
    """Insert a booking directly, bypassing validation."""

    def _make(
        start: str = "14:00", hours: int = 2, status: str = BookingStatus.PENDING.value
    ) -> Booking:
        start_at = to_utc_instant(booking_day, start)
        base = default_package.price_per_hour * hours
        vat = (base * Decimal("0.05")).quantize(Decimal("0.01"))
        booking = Booking(
            studio_id=studio.id,
            package_id=default_package.id,
            lead_id=lead.id,
            start_time=start_at,
            end_time=start_at + timedelta(hours=hours),
            duration_hours=hours,
            number_of_seats=1,
            price_per_hour=default_package.price_per_hour,
            base_cost=base,
            services_cost=Decimal("0"),
            discount_amount=Decimal("0"),
            vat_amount=vat,
            total_cost=base + vat,
            currency="AED",
            status=status,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def booking_payload(studio: Studio, default_package: Package, booking_day) -> Dict[str, Any]:
    """Valid service-layer input for ``BookingService.create_booking``."""
    return {
        "studio_id": studio.id,
        "package_id": default_package.id,
        "booking_date": booking_day,
        "start_time": "14:00",
        "duration_hours": 2,
        "number_of_seats": 2,
        "lead": {"full_name": "Omar Saeed", "email": "omar@example.com"},
        "additional_services": [],
        "discount_code": None,
    }
