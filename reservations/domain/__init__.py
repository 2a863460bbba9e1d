from reservations.domain.models import (
    AddonPricing,
    AddonService,
    Availability,
    CustomerInfo,
    DiscountCode,
    DiscountType,
    MaintenanceWindow,
    ParkingCategory,
    PriceLine,
    PriceOverride,
    PriceQuote,
    ReferenceSnapshot,
    Reservation,
    ReservationDraft,
    ReservationRequest,
    ReservationStatus,
    VIPProfile,
)
from reservations.domain.value_objects import (
    Capacity,
    CategoryId,
    DateRange,
    Money,
    Percentage,
    ReservationId,
    TimeInterval,
)

__all__ = [
    "AddonPricing",
    "AddonService",
    "Availability",
    "CustomerInfo",
    "DiscountCode",
    "DiscountType",
    "MaintenanceWindow",
    "ParkingCategory",
    "PriceLine",
    "PriceOverride",
    "PriceQuote",
    "ReferenceSnapshot",
    "Reservation",
    "ReservationDraft",
    "ReservationRequest",
    "ReservationStatus",
    "VIPProfile",
    "Capacity",
    "CategoryId",
    "DateRange",
    "Money",
    "Percentage",
    "ReservationId",
    "TimeInterval",
]
