"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Iterable, Sequence

from reservations.domain import (
    AddonService,
    CategoryId,
    DiscountCode,
    ParkingCategory,
    ReferenceSnapshot,
    Reservation,
    ReservationDraft,
    ReservationId,
    ReservationStatus,
    TimeInterval,
    VIPProfile,
)


class ReservationStore(ABC):
    """Interface for reservation engine persistence operations."""

    @abstractmethod
    def get_category(self, category_id: CategoryId) -> ParkingCategory | None:
        """Return a category by ID, or None if not found."""
        ...

    @abstractmethod
    def load_reference_snapshot(self) -> ReferenceSnapshot:
        """Return active maintenance windows and price overrides with a version stamp."""
        ...

    @abstractmethod
    def get_addons(self, addon_ids: Sequence[str]) -> list[AddonService]:
        """Return the add-ons that exist for ``addon_ids``; unknown IDs are left out."""
        ...

    @abstractmethod
    def get_discount_code(self, code: str) -> DiscountCode | None:
        """Return a discount code by its (case-insensitive) code, or None."""
        ...

    @abstractmethod
    def get_vip_profile(self, vip_code: str) -> VIPProfile | None:
        """Return the VIP profile holding ``vip_code``, or None."""
        ...

    @abstractmethod
    def count_overlapping(self, category_id: CategoryId, interval: TimeInterval) -> int:
        """Count pending and checked-in reservations overlapping ``interval``."""
        ...

    @abstractmethod
    def booking_reference_exists(self, reference: str) -> bool:
        """Check the booking reference uniqueness index."""
        ...

    @abstractmethod
    def commit_reservation(
        self,
        draft: ReservationDraft,
        reference_candidates: Iterable[str],
        units: int = 1,
    ) -> Reservation:
        """Persist ``draft`` as a pending reservation in one atomic step.

        Under a per-category lock: re-check capacity for ``units``, consume the
        discount code, and store the first candidate reference that is free.
        Nothing is written if any step fails.

        Raises:
            CapacityError: If the category no longer has room.
            InvalidDiscountCodeError: If the code's usage limit was reached.
            IdentityCollisionError: If every candidate reference is taken.
        """
        ...

    @abstractmethod
    def get_reservation(self, reservation_id: ReservationId) -> Reservation | None:
        """Return a reservation by ID, or None if not found."""
        ...

    @abstractmethod
    def update_status(
        self,
        reservation_id: ReservationId,
        expected: ReservationStatus,
        target: ReservationStatus,
        at: datetime,
    ) -> Reservation | None:
        """Move a reservation from ``expected`` to ``target``.

        Returns None when the stored status is no longer ``expected``.
        """
        ...

    @abstractmethod
    def list_reservations(self, status: ReservationStatus) -> list[Reservation]:
        """Return reservations in ``status`` ordered by check-out time."""
        ...

    @abstractmethod
    def update_capacity(
        self,
        category_id: CategoryId,
        new_capacity: int,
        validate: Callable[[list[TimeInterval]], None],
    ) -> ParkingCategory | None:
        """Change a category's capacity under its lock.

        ``validate`` receives the intervals of the category's active
        reservations and raises to abort the change. Returns None if the
        category does not exist.
        """
        ...

    @abstractmethod
    def vip_code_exists(self, vip_code: str) -> bool:
        """Check whether any VIP profile already holds ``vip_code``."""
        ...

    @abstractmethod
    def create_vip_profile(self, profile: VIPProfile) -> VIPProfile:
        """Persist a new VIP profile.

        Raises:
            VIPCodeCollisionError: If the code was taken concurrently.
        """
        ...
