"""Django ORM implementation of the ReservationStore.

Capacity checks and inserts run inside one transaction holding a row lock
on the category (``SELECT ... FOR UPDATE``), so concurrent requests for the
same category are serialized.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, Sequence
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import F, Q

from reservations import models
from reservations.domain import (
    AddonPricing,
    AddonService,
    Capacity,
    CategoryId,
    CustomerInfo,
    DateRange,
    DiscountCode,
    DiscountType,
    MaintenanceWindow,
    Money,
    ParkingCategory,
    PriceLine,
    PriceOverride,
    ReferenceSnapshot,
    Reservation,
    ReservationDraft,
    ReservationId,
    ReservationStatus,
    TimeInterval,
    VIPProfile,
)
from reservations.domain.errors import (
    CapacityError,
    CategoryNotFoundError,
    IdentityCollisionError,
    InvalidDiscountCodeError,
    PricingConfigurationError,
    VIPCodeCollisionError,
)
from reservations.domain.models import ACTIVE_STATUSES
from reservations.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)

_ACTIVE = [status.value for status in ACTIVE_STATUSES]


def _category_to_domain(row: models.ParkingCategory) -> ParkingCategory:
    try:
        price = Money(row.base_price_per_day)
    except ValueError as exc:
        logger.error("Category %s has a negative base price %s", row.code, row.base_price_per_day)
        raise PricingConfigurationError(f"base price of {row.code}") from exc
    return ParkingCategory(
        id=CategoryId(row.pk),
        code=row.code,
        name=row.name,
        total_capacity=Capacity(row.total_capacity),
        base_price_per_day=price,
        billing_unit_hours=row.billing_unit_hours,
        is_active=row.is_active,
    )


def _window_to_domain(row: models.MaintenanceWindow) -> MaintenanceWindow:
    return MaintenanceWindow(
        id=str(row.pk),
        date_range=DateRange(row.start_date, row.end_date),
        reason=row.reason,
        description=row.description,
        affected_category_ids=frozenset(CategoryId(c.pk) for c in row.affected_categories.all()),
        is_active=row.is_active,
    )


def _override_to_domain(row: models.SpecialPrice) -> PriceOverride:
    return PriceOverride(
        category_id=CategoryId(row.category_id),
        date_range=DateRange(row.start_date, row.end_date),
        price=row.price,
        reason=row.reason,
        created_at=row.created_at,
        is_active=row.is_active,
    )


def _addon_to_domain(row: models.AddonService) -> AddonService:
    return AddonService(
        id=str(row.pk),
        name=row.name,
        price=row.price,
        pricing=AddonPricing(row.pricing),
        is_free=row.is_free,
        is_active=row.is_active,
    )


def _discount_to_domain(row: models.DiscountCode) -> DiscountCode:
    return DiscountCode(
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=row.discount_value,
        valid_from=row.valid_from,
        valid_to=row.valid_to,
        max_discount=row.max_discount,
        min_order_amount=row.min_order_amount,
        max_usage=row.max_usage,
        current_usage=row.current_usage,
        is_active=row.is_active,
        applicable_category_ids=frozenset(
            CategoryId(c.pk) for c in row.applicable_categories.all()
        ),
    )


def _breakdown_to_json(lines: Iterable[PriceLine]) -> list[dict]:
    return [
        {
            "kind": line.kind,
            "label": line.label,
            "amount": str(line.amount),
            "day": line.day.isoformat() if line.day else None,
        }
        for line in lines
    ]


def _breakdown_from_json(items: list[dict]) -> tuple[PriceLine, ...]:
    return tuple(
        PriceLine(
            kind=item["kind"],
            label=item["label"],
            amount=Decimal(item["amount"]),
            day=date.fromisoformat(item["day"]) if item.get("day") else None,
        )
        for item in items
    )


def _reservation_to_domain(row: models.Reservation) -> Reservation:
    return Reservation(
        id=ReservationId(row.pk),
        category_id=CategoryId(row.category_id),
        booking_reference=row.booking_reference,
        check_in_at=row.check_in_at,
        check_out_at=row.check_out_at,
        customer=CustomerInfo(
            driver_name=row.driver_name,
            phone=row.phone,
            license_plate=row.license_plate,
            email=row.email,
            passenger_count=row.passenger_count,
            luggage_count=row.luggage_count,
            flight_number=row.flight_number,
            notes=row.notes,
        ),
        total_price=Money(row.total_price),
        status=ReservationStatus(row.status),
        addon_ids=tuple(row.addon_ids),
        discount_code=row.discount_code or None,
        vip_code=row.vip_code or None,
        is_manual=row.is_manual,
        created_by=row.created_by,
        price_breakdown=_breakdown_from_json(row.price_breakdown),
        actual_check_in_at=row.actual_check_in_at,
        actual_check_out_at=row.actual_check_out_at,
        created_at=row.created_at,
    )


def _vip_to_domain(row: models.VIPProfile) -> VIPProfile:
    return VIPProfile(
        vip_code=row.vip_code,
        phone=row.phone,
        discount_pct=row.discount_pct,
        issued_year=row.issued_year,
        customer_ref=row.customer_ref,
        created_at=row.created_at,
    )


def _valid_uuids(values: Sequence[str]) -> list[UUID]:
    found = []
    for value in values:
        try:
            found.append(UUID(str(value)))
        except ValueError:
            continue
    return found


class DjangoReservationStore(ReservationStore):
    """Relational store using Django ORM."""

    def get_category(self, category_id: CategoryId) -> ParkingCategory | None:
        row = models.ParkingCategory.objects.filter(pk=category_id.value).first()
        return _category_to_domain(row) if row is not None else None

    def load_reference_snapshot(self) -> ReferenceSnapshot:
        windows = models.MaintenanceWindow.objects.filter(is_active=True).prefetch_related(
            "affected_categories"
        )
        overrides = models.SpecialPrice.objects.filter(is_active=True)
        return ReferenceSnapshot(
            version=0,
            maintenance_windows=tuple(_window_to_domain(w) for w in windows),
            price_overrides=tuple(_override_to_domain(o) for o in overrides),
        )

    def get_addons(self, addon_ids: Sequence[str]) -> list[AddonService]:
        rows = models.AddonService.objects.filter(pk__in=_valid_uuids(addon_ids))
        return [_addon_to_domain(row) for row in rows]

    def get_discount_code(self, code: str) -> DiscountCode | None:
        row = (
            models.DiscountCode.objects.filter(code=code.strip().upper())
            .prefetch_related("applicable_categories")
            .first()
        )
        return _discount_to_domain(row) if row is not None else None

    def get_vip_profile(self, vip_code: str) -> VIPProfile | None:
        row = models.VIPProfile.objects.filter(vip_code=vip_code).first()
        return _vip_to_domain(row) if row is not None else None

    def count_overlapping(self, category_id: CategoryId, interval: TimeInterval) -> int:
        return models.Reservation.objects.filter(
            category_id=category_id.value,
            status__in=_ACTIVE,
            check_in_at__lt=interval.end,
            check_out_at__gt=interval.start,
        ).count()

    def booking_reference_exists(self, reference: str) -> bool:
        return models.Reservation.objects.filter(booking_reference=reference).exists()

    def commit_reservation(
        self,
        draft: ReservationDraft,
        reference_candidates: Iterable[str],
        units: int = 1,
    ) -> Reservation:
        with transaction.atomic():
            category = (
                models.ParkingCategory.objects.select_for_update()
                .filter(pk=draft.category_id.value)
                .first()
            )
            if category is None:
                raise CategoryNotFoundError(str(draft.category_id))

            available = category.total_capacity - self.count_overlapping(
                draft.category_id, draft.interval
            )
            if available < units:
                raise CapacityError(requested=units, available=max(0, available))

            if draft.quote.discount_code:
                self._consume_discount_code(draft.quote.discount_code)

            candidates = list(reference_candidates)
            for reference in candidates:
                if self.booking_reference_exists(reference):
                    continue
                try:
                    with transaction.atomic():
                        row = self._insert(draft, reference)
                except IntegrityError:
                    logger.info("Booking reference %s taken concurrently", reference)
                    continue
                return _reservation_to_domain(row)

            raise IdentityCollisionError(candidates[0] if candidates else "", len(candidates))

    def _consume_discount_code(self, code: str) -> None:
        consumed = (
            models.DiscountCode.objects.filter(code=code)
            .filter(Q(max_usage__isnull=True) | Q(current_usage__lt=F("max_usage")))
            .update(current_usage=F("current_usage") + 1)
        )
        if not consumed:
            raise InvalidDiscountCodeError(code, "exhausted")

    def _insert(self, draft: ReservationDraft, reference: str) -> models.Reservation:
        customer = draft.customer
        return models.Reservation.objects.create(
            id=draft.id.value,
            category_id=draft.category_id.value,
            booking_reference=reference,
            check_in_at=draft.interval.start,
            check_out_at=draft.interval.end,
            driver_name=customer.driver_name,
            phone=customer.phone,
            email=customer.email,
            license_plate=customer.license_plate.strip().upper(),
            passenger_count=customer.passenger_count,
            luggage_count=customer.luggage_count,
            flight_number=customer.flight_number,
            notes=customer.notes,
            addon_ids=list(draft.addon_ids),
            price_breakdown=_breakdown_to_json(draft.quote.breakdown),
            total_price=draft.quote.total.amount,
            discount_code=draft.quote.discount_code or "",
            vip_code=draft.vip_code or "",
            status=models.Reservation.Status.PENDING,
            is_manual=draft.is_manual,
            created_by=draft.created_by,
            created_at=draft.created_at,
        )

    def get_reservation(self, reservation_id: ReservationId) -> Reservation | None:
        row = models.Reservation.objects.filter(pk=reservation_id.value).first()
        return _reservation_to_domain(row) if row is not None else None

    def update_status(
        self,
        reservation_id: ReservationId,
        expected: ReservationStatus,
        target: ReservationStatus,
        at: datetime,
    ) -> Reservation | None:
        with transaction.atomic():
            row = (
                models.Reservation.objects.select_for_update()
                .filter(pk=reservation_id.value)
                .first()
            )
            if row is None or row.status != expected.value:
                return None
            row.status = target.value
            fields = ["status", "updated_at"]
            if target is ReservationStatus.CHECKED_IN and row.actual_check_in_at is None:
                row.actual_check_in_at = at
                fields.append("actual_check_in_at")
            if target is ReservationStatus.CHECKED_OUT and row.actual_check_out_at is None:
                row.actual_check_out_at = at
                fields.append("actual_check_out_at")
            row.save(update_fields=fields)
            return _reservation_to_domain(row)

    def list_reservations(self, status: ReservationStatus) -> list[Reservation]:
        rows = models.Reservation.objects.filter(status=status.value).order_by("check_out_at")
        return [_reservation_to_domain(row) for row in rows]

    def update_capacity(
        self,
        category_id: CategoryId,
        new_capacity: int,
        validate: Callable[[list[TimeInterval]], None],
    ) -> ParkingCategory | None:
        with transaction.atomic():
            row = (
                models.ParkingCategory.objects.select_for_update()
                .filter(pk=category_id.value)
                .first()
            )
            if row is None:
                return None
            active = models.Reservation.objects.filter(
                category_id=row.pk, status__in=_ACTIVE
            ).values_list("check_in_at", "check_out_at")
            validate([TimeInterval(start, end) for start, end in active])
            row.total_capacity = new_capacity
            row.save(update_fields=["total_capacity", "updated_at"])
            return _category_to_domain(row)

    def vip_code_exists(self, vip_code: str) -> bool:
        return models.VIPProfile.objects.filter(vip_code=vip_code).exists()

    def create_vip_profile(self, profile: VIPProfile) -> VIPProfile:
        try:
            with transaction.atomic():
                row = models.VIPProfile.objects.create(
                    vip_code=profile.vip_code,
                    phone=profile.phone,
                    customer_ref=profile.customer_ref,
                    discount_pct=profile.discount_pct,
                    issued_year=profile.issued_year,
                    created_at=profile.created_at,
                )
        except IntegrityError as exc:
            raise VIPCodeCollisionError(profile.vip_code) from exc
        return _vip_to_domain(row)
