"""Engine settings read from ``settings.PARKING_ENGINE``."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Self

from reservations.domain.identity import DEFAULT_YEAR_CODE, DEFAULT_YEAR_CODES


@dataclass(frozen=True)
class EngineSettings:
    vip_year_codes: Mapping[int, str] = field(default_factory=lambda: dict(DEFAULT_YEAR_CODES))
    vip_default_year_code: str = DEFAULT_YEAR_CODE
    vip_default_discount_pct: Decimal = Decimal("10")
    booking_reference_max_attempts: int = 20
    luggage_free_count: int = 1
    luggage_price_per_item: Decimal = Decimal("100")
    snapshot_cache_timeout: int = 300
    currency: str = "TWD"
    time_zone: str = "Asia/Taipei"

    @classmethod
    def from_mapping(cls, values: Mapping) -> Self:
        defaults = cls()
        return cls(
            vip_year_codes={
                int(year): str(code)
                for year, code in values.get("VIP_YEAR_CODES", defaults.vip_year_codes).items()
            },
            vip_default_year_code=str(
                values.get("VIP_DEFAULT_YEAR_CODE", defaults.vip_default_year_code)
            ),
            vip_default_discount_pct=Decimal(
                str(values.get("VIP_DEFAULT_DISCOUNT_PCT", defaults.vip_default_discount_pct))
            ),
            booking_reference_max_attempts=int(
                values.get("BOOKING_REFERENCE_MAX_ATTEMPTS", defaults.booking_reference_max_attempts)
            ),
            luggage_free_count=int(values.get("LUGGAGE_FREE_COUNT", defaults.luggage_free_count)),
            luggage_price_per_item=Decimal(
                str(values.get("LUGGAGE_PRICE_PER_ITEM", defaults.luggage_price_per_item))
            ),
            snapshot_cache_timeout=int(
                values.get("SNAPSHOT_CACHE_TIMEOUT", defaults.snapshot_cache_timeout)
            ),
            currency=str(values.get("CURRENCY", defaults.currency)),
            time_zone=str(values.get("TIME_ZONE", defaults.time_zone)),
        )


def get_engine_settings() -> EngineSettings:
    from django.conf import settings

    values = {"TIME_ZONE": settings.TIME_ZONE, **getattr(settings, "PARKING_ENGINE", {})}
    return EngineSettings.from_mapping(values)
