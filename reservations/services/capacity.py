"""Capacity ledger - counts committed reservations against category capacity."""

from reservations.domain import ParkingCategory, TimeInterval
from reservations.stores.interfaces import ReservationStore


class CapacityLedger:
    """Read-side capacity arithmetic.

    The store repeats the check under its category lock when committing.
    """

    def __init__(self, store: ReservationStore) -> None:
        self._store = store

    def available_count(self, category: ParkingCategory, interval: TimeInterval) -> int:
        """Spaces left for ``interval``; never more than the category's capacity."""
        used = self._store.count_overlapping(category.id, interval)
        return max(0, category.total_capacity.value - used)
