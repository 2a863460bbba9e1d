"""Price resolution for a category over an interval.

Order of application:

1. Daily rates: a covering special price beats the base price.
2. Add-on services and extra luggage.
3. VIP percentage discount on the subtotal.
4. Promotional code on the post-VIP amount.
"""

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from reservations.domain.calendar import billing_dates
from reservations.domain.errors import InvalidDiscountCodeError, PricingConfigurationError
from reservations.domain.models import (
    AddonPricing,
    AddonService,
    DiscountCode,
    DiscountType,
    ParkingCategory,
    PriceLine,
    PriceOverride,
    PriceQuote,
)
from reservations.domain.value_objects import CENTS, CategoryId, Money, Percentage, TimeInterval

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def winning_override(day: date, overrides: Iterable[PriceOverride]) -> PriceOverride | None:
    """Most recently created active override covering ``day``; ties go to the narrower span."""
    covering = [o for o in overrides if o.is_active and day in o.date_range]
    if not covering:
        return None
    return max(covering, key=lambda o: (o.created_at, -o.date_range.span_days))


def check_discount_code(code: DiscountCode, category_id: CategoryId, now: datetime) -> None:
    """Raise InvalidDiscountCodeError unless ``code`` is usable right now for the category."""
    if not code.is_active:
        reason = "inactive"
    elif now < code.valid_from:
        reason = "not_started"
    elif now > code.valid_to:
        reason = "expired"
    elif code.is_exhausted:
        reason = "exhausted"
    elif not code.applies_to(category_id):
        reason = "not_applicable"
    else:
        return
    logger.warning("Rejected discount code %s: %s", code.code, reason)
    raise InvalidDiscountCodeError(code.code, reason)


class PriceResolver:
    """Computes totals and breakdowns. Holds only pricing settings, no state."""

    def __init__(
        self,
        luggage_free_count: int = 1,
        luggage_price_per_item: Decimal = Decimal("100"),
    ) -> None:
        self.luggage_free_count = luggage_free_count
        self.luggage_price_per_item = luggage_price_per_item

    def compute(
        self,
        category: ParkingCategory,
        interval: TimeInterval,
        overrides: Iterable[PriceOverride],
        *,
        now: datetime,
        addons: Sequence[AddonService] = (),
        vip_discount_pct: Decimal | None = None,
        discount_code: DiscountCode | None = None,
        luggage_count: int = 0,
    ) -> PriceQuote:
        overrides = [o for o in overrides if o.category_id == category.id]
        try:
            days = billing_dates(interval, category.billing_unit_hours)
        except ValueError as exc:
            raise self._config_error(category, str(exc)) from exc

        lines: list[PriceLine] = []
        for day in days:
            lines.append(self._daily_line(category, day, overrides))
        parking_subtotal = sum((line.amount for line in lines), ZERO)

        addon_subtotal = ZERO
        for addon in addons:
            line = self._addon_line(category, addon, len(days))
            lines.append(line)
            addon_subtotal += line.amount

        extra_luggage = max(0, luggage_count - self.luggage_free_count)
        if extra_luggage:
            amount = self.luggage_price_per_item * extra_luggage
            lines.append(PriceLine("luggage", f"Extra luggage x{extra_luggage}", amount))
            addon_subtotal += amount

        subtotal = parking_subtotal + addon_subtotal

        vip_discount = ZERO
        if vip_discount_pct:
            try:
                pct = Percentage(Decimal(vip_discount_pct))
            except ValueError as exc:
                raise self._config_error(category, f"VIP discount {vip_discount_pct}") from exc
            vip_discount = _cents(pct.of(subtotal))
            lines.append(PriceLine("vip_discount", f"VIP {pct.value}%", -vip_discount))
        after_vip = subtotal - vip_discount

        promo_discount = ZERO
        if discount_code is not None:
            check_discount_code(discount_code, category.id, now)
            promo_discount = self._promo_amount(category, discount_code, after_vip)
            lines.append(PriceLine("promo_discount", discount_code.code, -promo_discount))

        total = after_vip - promo_discount
        if total < 0:
            raise self._config_error(category, f"negative total {total}")

        return PriceQuote(
            total=Money(total).quantized(),
            billing_days=len(days),
            parking_subtotal=parking_subtotal,
            addon_subtotal=addon_subtotal,
            vip_discount=vip_discount,
            promo_discount=promo_discount,
            breakdown=tuple(lines),
            discount_code=discount_code.code if discount_code else None,
        )

    def _daily_line(
        self, category: ParkingCategory, day: date, overrides: Sequence[PriceOverride]
    ) -> PriceLine:
        override = winning_override(day, overrides)
        if override is None:
            return PriceLine("daily_rate", "Daily rate", category.base_price_per_day.amount, day)
        if override.price is None or override.price < 0:
            raise self._config_error(category, f"special price {override.price} on {day}")
        return PriceLine("special_rate", override.reason or "Special price", override.price, day)

    def _addon_line(self, category: ParkingCategory, addon: AddonService, days: int) -> PriceLine:
        if addon.price is None or addon.price < 0:
            raise self._config_error(category, f"add-on {addon.id} price {addon.price}")
        if addon.is_free:
            amount = ZERO
        elif addon.pricing is AddonPricing.PER_DAY:
            amount = addon.price * days
        else:
            amount = addon.price
        return PriceLine("addon", addon.name, amount)

    def _promo_amount(
        self, category: ParkingCategory, code: DiscountCode, amount: Decimal
    ) -> Decimal:
        if amount < code.min_order_amount:
            logger.warning("Rejected discount code %s: below_minimum", code.code)
            raise InvalidDiscountCodeError(code.code, "below_minimum")
        if code.discount_type is DiscountType.PERCENTAGE:
            try:
                discount = Percentage(code.discount_value).of(amount)
            except ValueError as exc:
                raise self._config_error(category, f"discount code {code.code}") from exc
        elif code.discount_value < 0:
            raise self._config_error(category, f"discount code {code.code}")
        else:
            discount = code.discount_value
        if code.max_discount is not None:
            discount = min(discount, code.max_discount)
        return _cents(min(discount, amount))

    @staticmethod
    def _config_error(category: ParkingCategory, detail: str) -> PricingConfigurationError:
        logger.error("Pricing configuration error for category %s: %s", category.code, detail)
        return PricingConfigurationError(detail)
