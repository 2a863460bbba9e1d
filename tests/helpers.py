"""Builders shared by the test modules."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import uuid4
from zoneinfo import ZoneInfo

from reservations.domain import (
    Capacity,
    CategoryId,
    CustomerInfo,
    DateRange,
    MaintenanceWindow,
    Money,
    ParkingCategory,
    PriceOverride,
    PriceQuote,
    Reservation,
    ReservationDraft,
    ReservationId,
    ReservationRequest,
    ReservationStatus,
    TimeInterval,
)

TZ = ZoneInfo("Asia/Taipei")
NOW = datetime(2025, 3, 10, 9, 0, tzinfo=TZ)


def at(month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(2025, month, day, hour, minute, tzinfo=TZ)


def make_category(
    capacity: int = 2,
    price: str = "500",
    code: str = "INDOOR",
    is_active: bool = True,
    billing_unit_hours: int = 24,
) -> ParkingCategory:
    return ParkingCategory(
        id=CategoryId(uuid4()),
        code=code,
        name=code.title(),
        total_capacity=Capacity(capacity),
        base_price_per_day=Money(Decimal(price)),
        billing_unit_hours=billing_unit_hours,
        is_active=is_active,
    )


def make_override(
    category: ParkingCategory,
    start: date,
    end: date,
    price: str,
    reason: str = "Holiday",
    created_at: datetime = NOW,
    is_active: bool = True,
) -> PriceOverride:
    return PriceOverride(
        category_id=category.id,
        date_range=DateRange(start, end),
        price=Decimal(price),
        reason=reason,
        created_at=created_at,
        is_active=is_active,
    )


def make_window(
    start: date,
    end: date | None = None,
    categories: tuple[ParkingCategory, ...] = (),
    reason: str = "Resurfacing",
    is_active: bool = True,
) -> MaintenanceWindow:
    return MaintenanceWindow(
        id=str(uuid4()),
        date_range=DateRange(start, end or start),
        reason=reason,
        affected_category_ids=frozenset(c.id for c in categories),
        is_active=is_active,
    )


def make_customer(plate: str = "ABC-1234", **kwargs) -> CustomerInfo:
    values = {"driver_name": "Lin Mei", "phone": "0912345678", "license_plate": plate}
    values.update(kwargs)
    return CustomerInfo(**values)


def make_request(
    category: ParkingCategory,
    start: datetime,
    end: datetime,
    plate: str = "ABC-1234",
    **kwargs,
) -> ReservationRequest:
    return ReservationRequest(
        category_id=str(category.id),
        check_in_at=start,
        check_out_at=end,
        customer=make_customer(plate),
        **kwargs,
    )


def make_quote(total: str = "500", discount_code: str | None = None) -> PriceQuote:
    amount = Decimal(total)
    return PriceQuote(
        total=Money(amount),
        billing_days=1,
        parking_subtotal=amount,
        addon_subtotal=Decimal("0"),
        vip_discount=Decimal("0"),
        promo_discount=Decimal("0"),
        breakdown=(),
        discount_code=discount_code,
    )


def make_draft(
    category_id: CategoryId,
    start: datetime,
    end: datetime,
    plate: str = "ABC-1234",
    discount_code: str | None = None,
) -> ReservationDraft:
    return ReservationDraft(
        id=ReservationId(uuid4()),
        category_id=category_id,
        interval=TimeInterval(start, end),
        customer=make_customer(plate),
        addon_ids=(),
        quote=make_quote(discount_code=discount_code),
        vip_code=None,
        is_manual=False,
        created_by="",
        created_at=NOW,
    )


def make_reservation(
    category: ParkingCategory,
    start: datetime,
    end: datetime,
    status: ReservationStatus = ReservationStatus.PENDING,
    reference: str | None = None,
) -> Reservation:
    return Reservation(
        id=ReservationId(uuid4()),
        category_id=category.id,
        booking_reference=reference or f"REF-{uuid4().hex[:8]}",
        check_in_at=start,
        check_out_at=end,
        customer=make_customer(),
        total_price=Money(Decimal("500")),
        status=status,
        created_at=start - timedelta(days=1),
    )
