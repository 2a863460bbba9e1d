"""Reservation service - all booking business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

A reservation goes through: interval validation, maintenance check,
capacity check, price resolution, booking reference generation, and an
atomic commit in the store. Quotes and availability checks stop before
the commit.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Sequence
from uuid import uuid4
from zoneinfo import ZoneInfo

from reservations.conf import EngineSettings
from reservations.domain import (
    AddonService,
    Availability,
    CategoryId,
    CustomerInfo,
    ParkingCategory,
    PriceQuote,
    ReferenceSnapshot,
    Reservation,
    ReservationDraft,
    ReservationId,
    ReservationRequest,
    ReservationStatus,
    TimeInterval,
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
from reservations.domain.identity import base_booking_reference, booking_reference_candidates
from reservations.domain.lifecycle import check_transition, is_overdue
from reservations.domain.maintenance import MaintenanceWindowIndex
from reservations.domain.pricing import PriceResolver
from reservations.services.capacity import CapacityLedger
from reservations.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_category_id(value: str | CategoryId) -> CategoryId:
    if isinstance(value, CategoryId):
        return value
    try:
        return CategoryId.from_string(str(value))
    except ValueError as exc:
        raise InvalidIdentifierError("category") from exc


def parse_reservation_id(value: str | ReservationId) -> ReservationId:
    if isinstance(value, ReservationId):
        return value
    try:
        return ReservationId.from_string(str(value))
    except ValueError as exc:
        raise InvalidIdentifierError("reservation") from exc


def make_interval(start: datetime, end: datetime, zone: ZoneInfo | None = None) -> TimeInterval:
    """Build a TimeInterval or raise ValidationError.

    When ``zone`` is given both ends are converted to it, so calendar dates
    (maintenance days, billing days) do not depend on the offset the caller used.
    """
    if start is None or end is None:
        raise ValidationError("Check-in and check-out times are required")
    if start.tzinfo is None or end.tzinfo is None:
        raise ValidationError("Check-in and check-out times must include a timezone")
    try:
        if zone is not None:
            start, end = start.astimezone(zone), end.astimezone(zone)
        return TimeInterval(start, end)
    except ValueError as exc:
        raise ValidationError("Check-out must be after check-in", field="check_out_at") from exc


class ReservationService:
    """Service for availability, quotes and the reservation lifecycle."""

    def __init__(
        self,
        store: ReservationStore,
        snapshots: Callable[[], ReferenceSnapshot] | None = None,
        settings: EngineSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._snapshots = snapshots or store.load_reference_snapshot
        self._settings = settings or EngineSettings()
        self._clock = clock
        self._zone = ZoneInfo(self._settings.time_zone)
        self._ledger = CapacityLedger(store)
        self._resolver = PriceResolver(
            luggage_free_count=self._settings.luggage_free_count,
            luggage_price_per_item=self._settings.luggage_price_per_item,
        )

    def check_availability(
        self,
        category_id: str | CategoryId,
        start: datetime,
        end: datetime,
        units: int = 1,
    ) -> Availability:
        """Report whether ``units`` spaces can be booked for ``[start, end)``.

        Raises:
            ValidationError: If the interval is malformed or units < 1.
            InvalidIdentifierError: If the category_id is not a valid UUID.
            CategoryNotFoundError: If the category does not exist.
        """
        interval = make_interval(start, end, self._zone)
        if units < 1:
            raise ValidationError("At least one space must be requested", field="units")
        category = self._get_category(category_id)
        snapshot = self._snapshots()

        block = MaintenanceWindowIndex(snapshot.maintenance_windows).is_blocked(category.id, interval)
        count = self._ledger.available_count(category, interval)
        if not category.is_active:
            return Availability(available=False, available_count=count, reason="inactive")
        if block.blocked:
            return Availability(
                available=False,
                available_count=count,
                reason="maintenance",
                maintenance_windows=block.windows,
            )
        if count < units:
            return Availability(available=False, available_count=count, reason="capacity")
        return Availability(available=True, available_count=count)

    def quote_price(
        self,
        category_id: str | CategoryId,
        start: datetime,
        end: datetime,
        addon_ids: Sequence[str] = (),
        vip_code: str | None = None,
        discount_code: str | None = None,
        luggage_count: int = 0,
    ) -> PriceQuote:
        """Price a prospective reservation without reserving anything.

        Raises:
            ValidationError, InvalidIdentifierError, CategoryNotFoundError,
            CategoryInactiveError, MaintenanceConflictError, CapacityError,
            InvalidVIPCodeError, InvalidDiscountCodeError,
            PricingConfigurationError.
        """
        interval = make_interval(start, end, self._zone)
        if luggage_count < 0:
            raise ValidationError("Luggage count cannot be negative", field="luggage_count")
        category = self._bookable_category(category_id)
        snapshot = self._snapshots()
        self._ensure_open(category, interval, snapshot)
        self._ensure_room(category, interval)
        return self._price(category, interval, snapshot, addon_ids, vip_code, discount_code, luggage_count)

    def create_reservation(self, request: ReservationRequest) -> Reservation:
        """Validate, price and commit a new pending reservation.

        Raises:
            ValidationError: For malformed intervals or customer details.
            MaintenanceConflictError: If a maintenance window blocks the interval.
            CapacityError: If no space is left.
            IdentityCollisionError: If no booking reference could be allocated.
            Plus the pricing errors listed on quote_price.
        """
        interval = make_interval(request.check_in_at, request.check_out_at, self._zone)
        self._validate_customer(request.customer, manual=request.manual)
        now = self._clock().astimezone(self._zone)
        if not request.manual and interval.start <= now:
            raise ValidationError("Check-in must be in the future", field="check_in_at")

        category = self._bookable_category(request.category_id)
        snapshot = self._snapshots()
        self._ensure_open(category, interval, snapshot)
        self._ensure_room(category, interval)
        quote = self._price(
            category,
            interval,
            snapshot,
            request.addon_ids,
            request.vip_code,
            request.discount_code,
            request.customer.luggage_count,
        )

        reservation_id = ReservationId(uuid4())
        base = base_booking_reference(now.date(), request.customer.license_plate, reservation_id)
        draft = ReservationDraft(
            id=reservation_id,
            category_id=category.id,
            interval=interval,
            customer=request.customer,
            addon_ids=tuple(request.addon_ids),
            quote=quote,
            vip_code=request.vip_code.strip() if request.vip_code else None,
            is_manual=request.manual,
            created_by=request.created_by,
            created_at=now,
        )
        try:
            reservation = self._store.commit_reservation(
                draft,
                booking_reference_candidates(base, self._settings.booking_reference_max_attempts),
            )
        except IdentityCollisionError:
            logger.warning("Booking reference %s exhausted after %s attempts", base,
                           self._settings.booking_reference_max_attempts)
            raise
        except CapacityError:
            logger.info("Capacity taken for category %s before commit", category.code)
            raise

        logger.info(
            "Created reservation %s (%s) for category %s, total %s, manual=%s",
            reservation.id,
            reservation.booking_reference,
            category.code,
            reservation.total_price,
            reservation.is_manual,
        )
        return reservation

    def get_reservation(self, reservation_id: str | ReservationId) -> Reservation:
        """Return a reservation by ID.

        Raises:
            InvalidIdentifierError: If the reservation_id is not a valid UUID.
            ReservationNotFoundError: If the reservation does not exist.
        """
        rid = parse_reservation_id(reservation_id)
        reservation = self._store.get_reservation(rid)
        if reservation is None:
            raise ReservationNotFoundError(str(rid))
        return reservation

    def transition_status(
        self,
        reservation_id: str | ReservationId,
        target: str | ReservationStatus,
        admin_override: bool = False,
    ) -> Reservation:
        """Apply a staff-triggered status change.

        Raises:
            ValidationError: If ``target`` is not a known status.
            ReservationNotFoundError: If the reservation does not exist.
            InvalidTransitionError: If the lifecycle forbids the change.
        """
        try:
            target_status = ReservationStatus(target)
        except ValueError as exc:
            raise ValidationError(f"Unknown status {target!r}", field="status") from exc
        current = self.get_reservation(reservation_id)
        check_transition(current.status, target_status, admin_override=admin_override)

        updated = self._store.update_status(current.id, current.status, target_status, self._clock())
        if updated is None:
            latest = self._store.get_reservation(current.id)
            seen = latest.status if latest is not None else current.status
            raise InvalidTransitionError(seen.value, target_status.value)

        logger.info(
            "Reservation %s moved %s -> %s",
            updated.booking_reference,
            current.status.value,
            target_status.value,
        )
        return updated

    def list_overdue(self) -> list[Reservation]:
        """Checked-in reservations whose check-out time has passed."""
        now = self._clock()
        return [
            r
            for r in self._store.list_reservations(ReservationStatus.CHECKED_IN)
            if is_overdue(r, now)
        ]

    def _get_category(self, category_id: str | CategoryId) -> ParkingCategory:
        cid = parse_category_id(category_id)
        category = self._store.get_category(cid)
        if category is None:
            raise CategoryNotFoundError(str(cid))
        return category

    def _bookable_category(self, category_id: str | CategoryId) -> ParkingCategory:
        category = self._get_category(category_id)
        if not category.is_active:
            raise CategoryInactiveError(str(category.id))
        return category

    def _ensure_open(
        self, category: ParkingCategory, interval: TimeInterval, snapshot: ReferenceSnapshot
    ) -> None:
        block = MaintenanceWindowIndex(snapshot.maintenance_windows).is_blocked(category.id, interval)
        if block.blocked:
            raise MaintenanceConflictError(block.windows)

    def _ensure_room(self, category: ParkingCategory, interval: TimeInterval, units: int = 1) -> None:
        available = self._ledger.available_count(category, interval)
        if available < units:
            raise CapacityError(requested=units, available=available)

    def _price(
        self,
        category: ParkingCategory,
        interval: TimeInterval,
        snapshot: ReferenceSnapshot,
        addon_ids: Sequence[str],
        vip_code: str | None,
        discount_code: str | None,
        luggage_count: int,
    ) -> PriceQuote:
        addons = self._resolve_addons(addon_ids)

        vip_discount_pct = None
        if vip_code and vip_code.strip():
            profile = self._store.get_vip_profile(vip_code.strip())
            if profile is None:
                raise InvalidVIPCodeError()
            vip_discount_pct = profile.discount_pct

        code = None
        if discount_code and discount_code.strip():
            code = self._store.get_discount_code(discount_code)
            if code is None:
                normalized = discount_code.strip().upper()
                logger.warning("Rejected discount code %s: not_found", normalized)
                raise InvalidDiscountCodeError(normalized, "not_found")

        return self._resolver.compute(
            category,
            interval,
            snapshot.overrides_for(category.id),
            now=self._clock(),
            addons=addons,
            vip_discount_pct=vip_discount_pct,
            discount_code=code,
            luggage_count=luggage_count,
        )

    def _resolve_addons(self, addon_ids: Sequence[str]) -> list[AddonService]:
        if len(set(addon_ids)) != len(addon_ids):
            raise ValidationError("Add-on services may only be selected once", field="addon_ids")
        if not addon_ids:
            return []
        found = {addon.id: addon for addon in self._store.get_addons(addon_ids)}
        unusable = [i for i in addon_ids if i not in found or not found[i].is_active]
        if unusable:
            raise ValidationError(
                f"Unknown or inactive add-on services: {', '.join(unusable)}", field="addon_ids"
            )
        return [found[i] for i in addon_ids]

    @staticmethod
    def _validate_customer(customer: CustomerInfo, manual: bool) -> None:
        if not customer.driver_name.strip():
            raise ValidationError("Driver name is required", field="driver_name")
        if not customer.phone.strip():
            raise ValidationError("Phone number is required", field="phone")
        # Staff may book before the vehicle is known; the reference then falls back.
        if not manual and not customer.license_plate.strip():
            raise ValidationError("License plate is required", field="license_plate")
        if customer.passenger_count < 1:
            raise ValidationError("At least one passenger is required", field="passenger_count")
        if customer.luggage_count < 0:
            raise ValidationError("Luggage count cannot be negative", field="luggage_count")
