"""In-process implementation of the ReservationStore.

Used for tests and local tooling. A lock per category serializes the
capacity check and the insert that follows it.
"""

import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Sequence

from reservations.domain import (
    AddonService,
    Capacity,
    CategoryId,
    DiscountCode,
    MaintenanceWindow,
    ParkingCategory,
    PriceOverride,
    ReferenceSnapshot,
    Reservation,
    ReservationDraft,
    ReservationId,
    ReservationStatus,
    TimeInterval,
    VIPProfile,
)
from reservations.domain.calendar import intervals_overlap
from reservations.domain.errors import (
    CapacityError,
    IdentityCollisionError,
    InvalidDiscountCodeError,
    VIPCodeCollisionError,
)
from reservations.domain.models import ACTIVE_STATUSES
from reservations.stores.interfaces import ReservationStore


class InMemoryReservationStore(ReservationStore):
    """Dictionary-backed store. Every administrative write bumps the snapshot version."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._category_locks: dict[CategoryId, threading.Lock] = {}
        self._version = 1
        self._categories: dict[CategoryId, ParkingCategory] = {}
        self._overrides: list[PriceOverride] = []
        self._windows: dict[str, MaintenanceWindow] = {}
        self._addons: dict[str, AddonService] = {}
        self._codes: dict[str, DiscountCode] = {}
        self._reservations: dict[ReservationId, Reservation] = {}
        self._vip_profiles: dict[str, VIPProfile] = {}

    def _category_lock(self, category_id: CategoryId) -> threading.Lock:
        with self._lock:
            return self._category_locks.setdefault(category_id, threading.Lock())

    # Administrative writes

    def add_category(self, category: ParkingCategory) -> None:
        with self._lock:
            self._categories[category.id] = category
            self._version += 1

    def add_price_override(self, override: PriceOverride) -> None:
        with self._lock:
            self._overrides.append(override)
            self._version += 1

    def add_maintenance_window(self, window: MaintenanceWindow) -> None:
        with self._lock:
            self._windows[window.id] = window
            self._version += 1

    def remove_maintenance_window(self, window_id: str) -> None:
        with self._lock:
            self._windows.pop(window_id, None)
            self._version += 1

    def add_addon(self, addon: AddonService) -> None:
        with self._lock:
            self._addons[addon.id] = addon

    def add_discount_code(self, code: DiscountCode) -> None:
        with self._lock:
            self._codes[code.code.upper()] = code

    def add_reservation(self, reservation: Reservation) -> None:
        with self._lock:
            self._reservations[reservation.id] = reservation

    # ReservationStore

    def get_category(self, category_id: CategoryId) -> ParkingCategory | None:
        return self._categories.get(category_id)

    def load_reference_snapshot(self) -> ReferenceSnapshot:
        with self._lock:
            return ReferenceSnapshot(
                version=self._version,
                maintenance_windows=tuple(w for w in self._windows.values() if w.is_active),
                price_overrides=tuple(o for o in self._overrides if o.is_active),
            )

    def get_addons(self, addon_ids: Sequence[str]) -> list[AddonService]:
        return [self._addons[i] for i in addon_ids if i in self._addons]

    def get_discount_code(self, code: str) -> DiscountCode | None:
        return self._codes.get(code.strip().upper())

    def get_vip_profile(self, vip_code: str) -> VIPProfile | None:
        return self._vip_profiles.get(vip_code)

    def count_overlapping(self, category_id: CategoryId, interval: TimeInterval) -> int:
        with self._lock:
            return sum(
                1
                for r in self._reservations.values()
                if r.category_id == category_id
                and r.status in ACTIVE_STATUSES
                and intervals_overlap(r.interval, interval)
            )

    def booking_reference_exists(self, reference: str) -> bool:
        with self._lock:
            return any(r.booking_reference == reference for r in self._reservations.values())

    def commit_reservation(
        self,
        draft: ReservationDraft,
        reference_candidates: Iterable[str],
        units: int = 1,
    ) -> Reservation:
        with self._category_lock(draft.category_id):
            category = self._categories[draft.category_id]
            available = category.total_capacity.value - self.count_overlapping(
                draft.category_id, draft.interval
            )
            if available < units:
                raise CapacityError(requested=units, available=max(0, available))

            with self._lock:
                code = None
                if draft.quote.discount_code:
                    code = self._codes.get(draft.quote.discount_code.upper())
                    if code is None or code.is_exhausted:
                        raise InvalidDiscountCodeError(draft.quote.discount_code, "exhausted")

                candidates = list(reference_candidates)
                for reference in candidates:
                    if not self.booking_reference_exists(reference):
                        break
                else:
                    base = candidates[0] if candidates else ""
                    raise IdentityCollisionError(base, len(candidates))

                if code is not None:
                    self._codes[code.code.upper()] = replace(code, current_usage=code.current_usage + 1)
                reservation = draft.as_reservation(reference)
                self._reservations[reservation.id] = reservation
                return reservation

    def get_reservation(self, reservation_id: ReservationId) -> Reservation | None:
        return self._reservations.get(reservation_id)

    def update_status(
        self,
        reservation_id: ReservationId,
        expected: ReservationStatus,
        target: ReservationStatus,
        at: datetime,
    ) -> Reservation | None:
        with self._lock:
            current = self._reservations.get(reservation_id)
            if current is None or current.status is not expected:
                return None
            changes: dict = {"status": target}
            if target is ReservationStatus.CHECKED_IN and current.actual_check_in_at is None:
                changes["actual_check_in_at"] = at
            if target is ReservationStatus.CHECKED_OUT and current.actual_check_out_at is None:
                changes["actual_check_out_at"] = at
            updated = replace(current, **changes)
            self._reservations[reservation_id] = updated
            return updated

    def list_reservations(self, status: ReservationStatus) -> list[Reservation]:
        with self._lock:
            found = [r for r in self._reservations.values() if r.status is status]
        return sorted(found, key=lambda r: r.check_out_at)

    def update_capacity(
        self,
        category_id: CategoryId,
        new_capacity: int,
        validate: Callable[[list[TimeInterval]], None],
    ) -> ParkingCategory | None:
        if category_id not in self._categories:
            return None
        with self._category_lock(category_id):
            with self._lock:
                intervals = [
                    r.interval
                    for r in self._reservations.values()
                    if r.category_id == category_id and r.status in ACTIVE_STATUSES
                ]
            validate(intervals)
            with self._lock:
                updated = replace(self._categories[category_id], total_capacity=Capacity(new_capacity))
                self._categories[category_id] = updated
                return updated

    def vip_code_exists(self, vip_code: str) -> bool:
        return vip_code in self._vip_profiles

    def create_vip_profile(self, profile: VIPProfile) -> VIPProfile:
        with self._lock:
            if profile.vip_code in self._vip_profiles:
                raise VIPCodeCollisionError(profile.vip_code)
            self._vip_profiles[profile.vip_code] = profile
            return profile
