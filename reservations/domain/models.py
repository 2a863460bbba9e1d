"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in reservations/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from reservations.domain.value_objects import (
    Capacity,
    CategoryId,
    DateRange,
    Money,
    ReservationId,
    TimeInterval,
)


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CHECKED_IN})


class AddonPricing(str, Enum):
    FLAT = "flat"
    PER_DAY = "per_day"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class ParkingCategory:
    """Domain representation of a ParkingCategory."""

    id: CategoryId
    code: str
    name: str
    total_capacity: Capacity
    base_price_per_day: Money
    billing_unit_hours: int = 24
    is_active: bool = True


@dataclass(frozen=True)
class PriceOverride:
    """A date-scoped replacement for a category's base daily price."""

    category_id: CategoryId
    date_range: DateRange
    price: Decimal
    reason: str
    created_at: datetime
    is_active: bool = True


@dataclass(frozen=True)
class MaintenanceWindow:
    """Administrator-declared closure. No affected categories means all."""

    id: str
    date_range: DateRange
    reason: str
    description: str = ""
    affected_category_ids: frozenset[CategoryId] = frozenset()
    is_active: bool = True

    def affects(self, category_id: CategoryId) -> bool:
        return not self.affected_category_ids or category_id in self.affected_category_ids


@dataclass(frozen=True)
class AddonService:
    """Domain representation of an optional extra service."""

    id: str
    name: str
    price: Decimal
    pricing: AddonPricing = AddonPricing.FLAT
    is_free: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class DiscountCode:
    """Domain representation of a promotional code."""

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: datetime
    valid_to: datetime
    max_discount: Decimal | None = None
    min_order_amount: Decimal = Decimal("0")
    max_usage: int | None = None
    current_usage: int = 0
    is_active: bool = True
    applicable_category_ids: frozenset[CategoryId] = frozenset()

    @property
    def is_exhausted(self) -> bool:
        return self.max_usage is not None and self.current_usage >= self.max_usage

    def applies_to(self, category_id: CategoryId) -> bool:
        return not self.applicable_category_ids or category_id in self.applicable_category_ids


@dataclass(frozen=True)
class VIPProfile:
    """Domain representation of a VIP membership."""

    vip_code: str
    phone: str
    discount_pct: Decimal
    issued_year: int
    customer_ref: str = ""
    created_at: datetime | None = None


@dataclass(frozen=True)
class PriceLine:
    """One row of a price breakdown."""

    kind: str
    label: str
    amount: Decimal
    day: date | None = None


@dataclass(frozen=True)
class PriceQuote:
    """Result of price resolution."""

    total: Money
    billing_days: int
    parking_subtotal: Decimal
    addon_subtotal: Decimal
    vip_discount: Decimal
    promo_discount: Decimal
    breakdown: tuple[PriceLine, ...]
    discount_code: str | None = None


@dataclass(frozen=True)
class Availability:
    """Result of an availability query."""

    available: bool
    available_count: int
    reason: str | None = None
    maintenance_windows: tuple[MaintenanceWindow, ...] = ()


@dataclass(frozen=True)
class ReferenceSnapshot:
    """Version-stamped copy of administrator-maintained reference data."""

    version: int
    maintenance_windows: tuple[MaintenanceWindow, ...] = ()
    price_overrides: tuple[PriceOverride, ...] = ()

    def overrides_for(self, category_id: CategoryId) -> tuple[PriceOverride, ...]:
        return tuple(o for o in self.price_overrides if o.category_id == category_id)


@dataclass(frozen=True)
class CustomerInfo:
    driver_name: str
    phone: str
    license_plate: str
    email: str = ""
    passenger_count: int = 1
    luggage_count: int = 0
    flight_number: str = ""
    notes: str = ""


@dataclass(frozen=True)
class ReservationRequest:
    """Input to reservation creation."""

    category_id: str
    check_in_at: datetime
    check_out_at: datetime
    customer: CustomerInfo
    addon_ids: tuple[str, ...] = ()
    vip_code: str | None = None
    discount_code: str | None = None
    manual: bool = False
    created_by: str = ""


@dataclass(frozen=True)
class ReservationDraft:
    """A priced, validated reservation waiting to be committed."""

    id: ReservationId
    category_id: CategoryId
    interval: TimeInterval
    customer: CustomerInfo
    addon_ids: tuple[str, ...]
    quote: PriceQuote
    vip_code: str | None
    is_manual: bool
    created_by: str
    created_at: datetime

    def as_reservation(self, booking_reference: str) -> "Reservation":
        return Reservation(
            id=self.id,
            category_id=self.category_id,
            booking_reference=booking_reference,
            check_in_at=self.interval.start,
            check_out_at=self.interval.end,
            customer=self.customer,
            total_price=self.quote.total,
            status=ReservationStatus.PENDING,
            addon_ids=self.addon_ids,
            discount_code=self.quote.discount_code,
            vip_code=self.vip_code,
            is_manual=self.is_manual,
            created_by=self.created_by,
            price_breakdown=self.quote.breakdown,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class Reservation:
    """Domain representation of a Reservation."""

    id: ReservationId
    category_id: CategoryId
    booking_reference: str
    check_in_at: datetime
    check_out_at: datetime
    customer: CustomerInfo
    total_price: Money
    status: ReservationStatus
    addon_ids: tuple[str, ...] = ()
    discount_code: str | None = None
    vip_code: str | None = None
    is_manual: bool = False
    created_by: str = ""
    price_breakdown: tuple[PriceLine, ...] = field(default=(), compare=False)
    actual_check_in_at: datetime | None = None
    actual_check_out_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.check_in_at, self.check_out_at)
