"""Booking and catalog repository queries."""

from datetime import timedelta

from studiobook.core.time_utils import to_utc_instant
from studiobook.models.booking import BookingStatus
from studiobook.models.lead import Lead
from studiobook.repositories.factory import RepositoryFactory


class TestBookingRepository:
    def test_overlap_uses_half_open_intervals(self, db, studio, make_booking, booking_day):
        make_booking(start="14:00", hours=2)
        repo = RepositoryFactory.create_booking_repository(db)

        def count(start, hours):
            start_at = to_utc_instant(booking_day, start)
            return repo.count_overlapping(studio.id, start_at, start_at + timedelta(hours=hours))

        assert count("13:00", 1) == 0
        assert count("16:00", 1) == 0
        assert count("15:00", 1) == 1
        assert count("12:00", 6) == 1

    def test_overlap_ignores_cancelled_and_excluded(self, db, studio, make_booking, booking_day):
        cancelled = make_booking(status=BookingStatus.CANCELLED.value)
        kept = make_booking()
        repo = RepositoryFactory.create_booking_repository(db)
        start_at = to_utc_instant(booking_day, "14:00")
        end_at = start_at + timedelta(hours=2)

        assert repo.count_overlapping(studio.id, start_at, end_at) == 1
        assert repo.count_overlapping(studio.id, start_at, end_at, kept.id) == 0
        assert cancelled.status == BookingStatus.CANCELLED.value

    def test_count_for_lead_email_is_case_insensitive(self, db, make_booking):
        make_booking()
        make_booking(start="17:00", status=BookingStatus.CANCELLED.value)
        repo = RepositoryFactory.create_booking_repository(db)

        assert repo.count_for_lead_email("  LAYLA@example.com ") == 2
        assert repo.count_for_lead_email("nobody@example.com") == 0

    def test_list_reservations_window(self, db, studio, make_booking, booking_day):
        make_booking(start="10:00", hours=1)
        make_booking(start="18:00", hours=2)
        repo = RepositoryFactory.create_booking_repository(db)
        window_start = to_utc_instant(booking_day, "00:00")

        day = repo.list_reservations([studio.id], window_start, window_start + timedelta(days=1))
        next_day = repo.list_reservations(
            [studio.id], window_start + timedelta(days=1), window_start + timedelta(days=2)
        )

        assert [b.duration_hours for b in day] == [1, 2]
        assert next_day == []
        assert repo.list_reservations([], window_start, window_start) == []


class TestDiscountCodeRepository:
    def test_increment_usage_stops_at_cap(self, db, make_discount):
        discount = make_discount(max_uses=2, used_count=1)
        repo = RepositoryFactory.create_discount_code_repository(db)

        assert repo.increment_usage(discount.id) is True
        assert repo.increment_usage(discount.id) is False
        db.refresh(discount)
        assert discount.used_count == 2

    def test_increment_usage_without_cap(self, db, make_discount):
        discount = make_discount()
        repo = RepositoryFactory.create_discount_code_repository(db)

        for _ in range(3):
            assert repo.increment_usage(discount.id) is True
        db.refresh(discount)
        assert discount.used_count == 3

    def test_find_by_code_trims_input(self, db, make_discount):
        discount = make_discount(code="WELCOME10")
        repo = RepositoryFactory.create_discount_code_repository(db)

        assert repo.find_by_code(" WELCOME10 ").id == discount.id
        assert repo.find_by_code("welcome10") is None


class TestPackageRepository:
    def test_default_packages_exclude_studio_owned(self, db, studio, default_package):
        repo = RepositoryFactory.create_package_repository(db)
        owned = repo.create(
            name="Custom", price_per_hour=default_package.price_per_hour, studio_id=studio.id
        )
        db.commit()

        assert [p.id for p in repo.get_default_packages()] == [default_package.id]
        assert repo.is_offered_by_studio(default_package.id, studio.id) is True
        assert repo.is_offered_by_studio(owned.id, studio.id) is False


def test_lead_lookup_by_email(db, lead):
    repo = RepositoryFactory.create_lead_repository(db)

    assert repo.find_by_email("layla@example.com").id == lead.id
    assert isinstance(repo.find_by_email("layla@example.com"), Lead)
