"""Unit tests for ReservationService.

These test orchestration and domain error mapping against the in-memory store.
Run with: pytest tests/test_services.py -v
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from reservations.conf import EngineSettings
from reservations.domain import (
    AddonService,
    DiscountCode,
    DiscountType,
    ReservationStatus,
    TimeInterval,
    VIPProfile,
)
from reservations.domain.errors import (
    CapacityError,
    CategoryInactiveError,
    CategoryNotFoundError,
    IdentityCollisionError,
    InvalidDiscountCodeError,
    InvalidIdentifierError,
    InvalidTransitionError,
    InvalidVIPCodeError,
    MaintenanceConflictError,
    ReservationNotFoundError,
    ValidationError,
)
from reservations.services import ReservationService
from reservations.stores.interfaces import ReservationStore
from reservations.stores.memory_store import InMemoryReservationStore
from tests.helpers import NOW, at, make_category, make_override, make_request, make_reservation, make_window

MISSING_ID = "00000000-0000-4000-8000-000000000000"


def promo(**kwargs) -> DiscountCode:
    values = {
        "code": "SPRING",
        "discount_type": DiscountType.FIXED,
        "discount_value": Decimal("100"),
        "valid_from": NOW - timedelta(days=1),
        "valid_to": NOW + timedelta(days=30),
    }
    values.update(kwargs)
    return DiscountCode(**values)


class TestCheckAvailability:
    def test_empty_category_reports_full_capacity(self, service, category):
        availability = service.check_availability(str(category.id), at(3, 12, 10), at(3, 14, 10))

        assert availability.available
        assert availability.available_count == category.total_capacity.value

    def test_count_drops_with_overlapping_reservations(self, service, store, category):
        store.add_reservation(make_reservation(category, at(3, 11), at(3, 13)))
        store.add_reservation(make_reservation(category, at(3, 11), at(3, 13), status=ReservationStatus.CANCELLED))

        availability = service.check_availability(category.id, at(3, 12), at(3, 14))

        assert availability.available
        assert availability.available_count == 1

    def test_full_category(self, service, store, category):
        store.add_reservation(make_reservation(category, at(3, 11), at(3, 13)))
        store.add_reservation(make_reservation(category, at(3, 12), at(3, 15), status=ReservationStatus.CHECKED_IN))

        availability = service.check_availability(category.id, at(3, 12), at(3, 14))

        assert not availability.available
        assert availability.reason == "capacity"
        assert availability.available_count == 0

    def test_back_to_back_reservation_does_not_count(self, service, store, category):
        store.add_reservation(make_reservation(category, at(3, 10), at(3, 12)))

        availability = service.check_availability(category.id, at(3, 12), at(3, 14))

        assert availability.available_count == 2

    def test_maintenance_reports_windows(self, service, store, category):
        window = make_window(date(2025, 3, 13))
        store.add_maintenance_window(window)

        availability = service.check_availability(category.id, at(3, 12, 10), at(3, 14, 10))

        assert not availability.available
        assert availability.reason == "maintenance"
        assert availability.maintenance_windows == (window,)

    def test_inactive_category(self, store):
        inactive = make_category(is_active=False, code="CLOSED")
        store.add_category(inactive)
        service = ReservationService(store, clock=lambda: NOW)

        availability = service.check_availability(inactive.id, at(3, 12), at(3, 13))

        assert not availability.available
        assert availability.reason == "inactive"

    def test_repeated_checks_are_stable(self, service, store, category):
        store.add_reservation(make_reservation(category, at(3, 11), at(3, 13)))

        first = service.check_availability(category.id, at(3, 12), at(3, 14))
        second = service.check_availability(category.id, at(3, 12), at(3, 14))

        assert first == second

    def test_more_units_than_left(self, service, store, category):
        store.add_reservation(make_reservation(category, at(3, 11), at(3, 13)))

        availability = service.check_availability(category.id, at(3, 12), at(3, 14), units=2)

        assert not availability.available
        assert availability.reason == "capacity"

    def test_invalid_category_id(self, service):
        with pytest.raises(InvalidIdentifierError):
            service.check_availability("not-a-uuid", at(3, 12), at(3, 13))

    def test_unknown_category(self, service):
        with pytest.raises(CategoryNotFoundError):
            service.check_availability(MISSING_ID, at(3, 12), at(3, 13))


class TestQuotePrice:
    def test_quote_uses_override(self, service, store, category):
        store.add_price_override(make_override(category, date(2025, 3, 13), date(2025, 3, 13), "800"))

        quote = service.quote_price(category.id, at(3, 12, 10), at(3, 14, 10))

        assert quote.total.amount == Decimal("1300.00")

    def test_quote_does_not_reserve(self, service, store, category):
        service.quote_price(category.id, at(3, 12, 10), at(3, 14, 10))

        assert store.count_overlapping(category.id, TimeInterval(at(3, 12, 10), at(3, 14, 10))) == 0

    def test_unknown_vip_code(self, service, category):
        with pytest.raises(InvalidVIPCodeError):
            service.quote_price(category.id, at(3, 12), at(3, 13), vip_code="1140000000000")

    def test_vip_profile_discount(self, service, store, category):
        store.create_vip_profile(VIPProfile("1140912345678", "0912345678", Decimal("20"), 2025))

        quote = service.quote_price(category.id, at(3, 12), at(3, 13), vip_code="1140912345678")

        assert quote.vip_discount == Decimal("100.00")
        assert quote.total.amount == Decimal("400.00")

    def test_unknown_discount_code(self, service, category):
        with pytest.raises(InvalidDiscountCodeError) as excinfo:
            service.quote_price(category.id, at(3, 12), at(3, 13), discount_code=" nope ")
        assert excinfo.value.reason == "not_found"
        assert excinfo.value.discount_code == "NOPE"

    def test_discount_code_is_case_insensitive(self, service, store, category):
        store.add_discount_code(promo())

        quote = service.quote_price(category.id, at(3, 12), at(3, 13), discount_code="spring")

        assert quote.promo_discount == Decimal("100")

    def test_addons_are_resolved(self, service, store, category):
        store.add_addon(AddonService(id="wash", name="Car wash", price=Decimal("300")))

        quote = service.quote_price(category.id, at(3, 12), at(3, 13), addon_ids=["wash"])

        assert quote.total.amount == Decimal("800.00")

    @pytest.mark.parametrize("addon_ids", [["wash", "wash"], ["missing"], ["old"]])
    def test_unusable_addons(self, service, store, category, addon_ids):
        store.add_addon(AddonService(id="wash", name="Car wash", price=Decimal("300")))
        store.add_addon(AddonService(id="old", name="Retired", price=Decimal("10"), is_active=False))

        with pytest.raises(ValidationError) as excinfo:
            service.quote_price(category.id, at(3, 12), at(3, 13), addon_ids=addon_ids)
        assert excinfo.value.field == "addon_ids"

    def test_quote_blocked_by_maintenance(self, service, store, category):
        store.add_maintenance_window(make_window(date(2025, 3, 12), categories=(category,)))

        with pytest.raises(MaintenanceConflictError) as excinfo:
            service.quote_price(category.id, at(3, 12), at(3, 13))
        assert len(excinfo.value.windows) == 1

    def test_inactive_category(self, store):
        inactive = make_category(is_active=False, code="CLOSED")
        store.add_category(inactive)

        with pytest.raises(CategoryInactiveError):
            ReservationService(store, clock=lambda: NOW).quote_price(inactive.id, at(3, 12), at(3, 13))


class TestCreateReservation:
    def test_creates_pending_reservation(self, service, category):
        reservation = service.create_reservation(make_request(category, at(3, 12, 10), at(3, 14, 10)))

        assert reservation.status is ReservationStatus.PENDING
        assert reservation.booking_reference == "20250310ABC-1234"
        assert reservation.total_price.amount == Decimal("1000.00")
        assert service.get_reservation(str(reservation.id)) == reservation

    def test_manual_reservation_is_also_pending(self, service, category):
        reservation = service.create_reservation(
            make_request(category, at(3, 12, 10), at(3, 14, 10), manual=True, created_by="desk")
        )

        assert reservation.status is ReservationStatus.PENDING
        assert reservation.is_manual
        assert reservation.created_by == "desk"

    def test_capacity_one_rejects_overlap(self, store):
        single = make_category(capacity=1, code="VALET")
        store.add_category(single)
        service = ReservationService(store, clock=lambda: NOW)
        service.create_reservation(make_request(single, at(3, 12), at(3, 14)))

        with pytest.raises(CapacityError):
            service.create_reservation(make_request(single, at(3, 13), at(3, 15), plate="XYZ-9999"))

    def test_cancelled_reservation_frees_the_space(self, store):
        single = make_category(capacity=1, code="VALET")
        store.add_category(single)
        service = ReservationService(store, clock=lambda: NOW)
        first = service.create_reservation(make_request(single, at(3, 12), at(3, 14)))
        service.transition_status(first.id, "cancelled")

        second = service.create_reservation(make_request(single, at(3, 13), at(3, 15), plate="XYZ-9999"))

        assert second.status is ReservationStatus.PENDING

    def test_window_without_categories_blocks_every_category(self, service, store, category):
        other = make_category(code="OUTDOOR")
        store.add_category(other)
        store.add_maintenance_window(make_window(date(2025, 3, 12), categories=()))

        with pytest.raises(MaintenanceConflictError):
            service.create_reservation(make_request(category, at(3, 12, 8), at(3, 12, 20)))

    def test_checkout_before_checkin_touches_nothing(self):
        store = MagicMock(spec=ReservationStore)
        service = ReservationService(store, clock=lambda: NOW)

        with pytest.raises(ValidationError) as excinfo:
            service.create_reservation(make_request(make_category(), at(3, 14), at(3, 12)))

        assert excinfo.value.field == "check_out_at"
        assert store.method_calls == []

    def test_naive_datetimes_are_rejected(self, service, category):
        with pytest.raises(ValidationError):
            service.create_reservation(
                make_request(category, datetime(2025, 3, 12, 10), datetime(2025, 3, 13, 10))
            )

    def test_self_service_check_in_must_be_in_future(self, service, category):
        with pytest.raises(ValidationError) as excinfo:
            service.create_reservation(make_request(category, at(3, 9), at(3, 11)))
        assert excinfo.value.field == "check_in_at"

    def test_manual_booking_may_start_in_past(self, service, category):
        reservation = service.create_reservation(make_request(category, at(3, 9), at(3, 11), manual=True))

        assert reservation.check_in_at == at(3, 9)

    def test_plate_required_for_self_service(self, service, category):
        with pytest.raises(ValidationError) as excinfo:
            service.create_reservation(make_request(category, at(3, 12), at(3, 13), plate=" "))
        assert excinfo.value.field == "license_plate"

    def test_manual_booking_without_plate_gets_fallback_reference(self, service, category):
        reservation = service.create_reservation(
            make_request(category, at(3, 12), at(3, 13), plate="", manual=True)
        )

        assert reservation.booking_reference.startswith("20250310NOPLATE-")

    def test_same_plate_same_day_gets_suffix(self, service, category):
        first = service.create_reservation(make_request(category, at(3, 12), at(3, 13)))
        second = service.create_reservation(make_request(category, at(3, 20), at(3, 21)))
        third = service.create_reservation(make_request(category, at(3, 22), at(3, 23), plate="abc-1234"))

        assert [first.booking_reference, second.booking_reference, third.booking_reference] == [
            "20250310ABC-1234",
            "20250310ABC-1234-2",
            "20250310ABC-1234-3",
        ]

    def test_exhausted_references_leave_no_reservation(self, store, category):
        store.add_reservation(make_reservation(
            category, at(3, 1), at(3, 2), status=ReservationStatus.CANCELLED, reference="20250310ABC-1234"))
        store.add_reservation(make_reservation(
            category, at(3, 1), at(3, 2), status=ReservationStatus.CANCELLED, reference="20250310ABC-1234-2"))
        service = ReservationService(
            store, settings=EngineSettings(booking_reference_max_attempts=2), clock=lambda: NOW
        )

        with pytest.raises(IdentityCollisionError) as excinfo:
            service.create_reservation(make_request(category, at(3, 12), at(3, 13)))

        assert excinfo.value.attempts == 2
        assert service.check_availability(category.id, at(3, 12), at(3, 13)).available_count == 2

    def test_discount_code_usage_is_consumed(self, service, store, category):
        store.add_discount_code(promo(max_usage=1))

        reservation = service.create_reservation(
            make_request(category, at(3, 12), at(3, 13), discount_code="spring")
        )

        assert reservation.discount_code == "SPRING"
        assert reservation.total_price.amount == Decimal("400.00")
        assert store.get_discount_code("SPRING").current_usage == 1
        with pytest.raises(InvalidDiscountCodeError) as excinfo:
            service.create_reservation(
                make_request(category, at(3, 12), at(3, 13), plate="XYZ-9999", discount_code="SPRING")
            )
        assert excinfo.value.reason == "exhausted"

    def test_concurrent_requests_for_last_space(self, store):
        single = make_category(capacity=1, code="VALET")
        store.add_category(single)
        service = ReservationService(store, clock=lambda: NOW)
        barrier = threading.Barrier(8)

        def attempt(n):
            barrier.wait()
            try:
                return service.create_reservation(make_request(single, at(3, 12), at(3, 13), plate=f"CAR-{n}"))
            except CapacityError:
                return None

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(8)))

        winners = [r for r in results if r is not None]
        assert len(winners) == 1
        assert store.count_overlapping(single.id, winners[0].interval) == 1


class TestTransitions:
    def test_check_in_and_out(self, service, store, category):
        reservation = service.create_reservation(make_request(category, at(3, 12), at(3, 13)))

        checked_in = service.transition_status(str(reservation.id), "checked-in")
        checked_out = service.transition_status(reservation.id, ReservationStatus.CHECKED_OUT)

        assert checked_in.actual_check_in_at == NOW
        assert checked_out.status is ReservationStatus.CHECKED_OUT
        assert checked_out.actual_check_out_at == NOW

    def test_terminal_state_cannot_change(self, service, category):
        reservation = service.create_reservation(make_request(category, at(3, 12), at(3, 13)))
        service.transition_status(reservation.id, "cancelled")

        with pytest.raises(InvalidTransitionError):
            service.transition_status(reservation.id, "checked-in")

    def test_cancel_after_check_in_needs_override(self, service, category):
        reservation = service.create_reservation(make_request(category, at(3, 12), at(3, 13)))
        service.transition_status(reservation.id, "checked-in")

        with pytest.raises(InvalidTransitionError):
            service.transition_status(reservation.id, "cancelled")
        cancelled = service.transition_status(reservation.id, "cancelled", admin_override=True)

        assert cancelled.status is ReservationStatus.CANCELLED

    def test_unknown_status(self, service, category):
        reservation = service.create_reservation(make_request(category, at(3, 12), at(3, 13)))

        with pytest.raises(ValidationError):
            service.transition_status(reservation.id, "parked")

    def test_lost_race_is_reported_as_invalid_transition(self, service, store, category):
        reservation = service.create_reservation(make_request(category, at(3, 12), at(3, 13)))
        store.update_status(reservation.id, ReservationStatus.PENDING, ReservationStatus.CANCELLED, NOW)
        stale = MagicMock(wraps=store)
        stale.get_reservation.side_effect = [reservation, store.get_reservation(reservation.id)]

        with pytest.raises(InvalidTransitionError) as excinfo:
            ReservationService(stale, clock=lambda: NOW).transition_status(reservation.id, "checked-in")
        assert excinfo.value.current == "cancelled"

    def test_missing_reservation(self, service):
        with pytest.raises(ReservationNotFoundError):
            service.transition_status(MISSING_ID, "checked-in")

    def test_invalid_reservation_id(self, service):
        with pytest.raises(InvalidIdentifierError):
            service.get_reservation("not-a-uuid")


class TestOverdue:
    def test_lists_checked_in_past_checkout(self, store, category):
        late = make_reservation(category, at(3, 5), at(3, 9), status=ReservationStatus.CHECKED_IN)
        on_time = make_reservation(category, at(3, 5), at(3, 11), status=ReservationStatus.CHECKED_IN)
        pending = make_reservation(category, at(3, 5), at(3, 9))
        for reservation in (late, on_time, pending):
            store.add_reservation(reservation)

        overdue = ReservationService(store, clock=lambda: NOW).list_overdue()

        assert overdue == [late]


def test_service_reads_reference_data_through_snapshot_source(category):
    store = InMemoryReservationStore()
    store.add_category(category)
    frozen = store.load_reference_snapshot()
    service = ReservationService(store, snapshots=lambda: frozen, clock=lambda: NOW)
    store.add_maintenance_window(make_window(date(2025, 3, 12)))

    assert service.check_availability(category.id, at(3, 12), at(3, 13)).available


class TestTimeZones:
    """The same instants give the same answer whatever offset the caller sends."""

    @staticmethod
    def in_utc(moment: datetime) -> datetime:
        return moment.astimezone(timezone.utc)

    def test_maintenance_day_is_taken_in_the_engine_zone(self, service, store, category):
        store.add_maintenance_window(make_window(date(2025, 3, 13)))
        start, end = at(3, 13, 1), at(3, 13, 4)

        local = service.check_availability(category.id, start, end)
        utc = service.check_availability(category.id, self.in_utc(start), self.in_utc(end))

        assert self.in_utc(start).date() == date(2025, 3, 12)
        assert local.reason == utc.reason == "maintenance"

    def test_billing_dates_are_taken_in_the_engine_zone(self, service, store, category):
        store.add_price_override(make_override(category, date(2025, 3, 13), date(2025, 3, 13), "800"))
        start, end = at(3, 13, 1), at(3, 14, 1)

        local = service.quote_price(category.id, start, end)
        utc = service.quote_price(category.id, self.in_utc(start), self.in_utc(end))

        assert local.total == utc.total
        assert utc.total.amount == Decimal("800.00")
        assert [line.day for line in utc.breakdown] == [date(2025, 3, 13)]

    def test_reference_date_uses_the_engine_zone(self, store, category):
        late_evening_utc = datetime(2025, 3, 10, 17, 0, tzinfo=timezone.utc)
        service = ReservationService(store, clock=lambda: late_evening_utc)

        reservation = service.create_reservation(make_request(category, at(3, 12), at(3, 13)))

        assert reservation.booking_reference == "20250311ABC-1234"

    def test_configured_zone_is_used(self, store, category):
        store.add_maintenance_window(make_window(date(2025, 3, 12)))
        service = ReservationService(store, settings=EngineSettings(time_zone="UTC"), clock=lambda: NOW)

        availability = service.check_availability(category.id, at(3, 13, 1), at(3, 13, 4))

        assert availability.reason == "maintenance"
