from reservations.services.capacity import CapacityLedger
from reservations.services.category_service import CategoryService
from reservations.services.reservation_service import ReservationService
from reservations.services.vip_service import VIPService

__all__ = [
    "CapacityLedger",
    "CategoryService",
    "ReservationService",
    "VIPService",
]
