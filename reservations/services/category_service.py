"""Administrative changes to parking categories."""

import logging

from reservations.domain import CategoryId, ParkingCategory, TimeInterval
from reservations.domain.calendar import peak_overlap
from reservations.domain.errors import CapacityError, CategoryNotFoundError, ValidationError
from reservations.services.reservation_service import parse_category_id
from reservations.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, store: ReservationStore) -> None:
        self._store = store

    def change_capacity(self, category_id: str | CategoryId, new_capacity: int) -> ParkingCategory:
        """Set a category's capacity, refusing any value that would overbook it.

        Raises:
            ValidationError: If new_capacity is negative.
            CategoryNotFoundError: If the category does not exist.
            CapacityError: If active reservations overlap more than new_capacity deep.
        """
        if new_capacity < 0:
            raise ValidationError("Capacity cannot be negative", field="total_capacity")
        cid = parse_category_id(category_id)

        def validate(intervals: list[TimeInterval]) -> None:
            peak = peak_overlap(intervals)
            if peak > new_capacity:
                raise CapacityError(
                    requested=peak,
                    available=new_capacity,
                    message=f"{peak} overlapping reservations exceed the new capacity",
                )

        category = self._store.update_capacity(cid, new_capacity, validate)
        if category is None:
            raise CategoryNotFoundError(str(cid))
        logger.info("Capacity of category %s set to %s", category.code, new_capacity)
        return category
