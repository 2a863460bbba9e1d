"""VIP membership issuance."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable

from reservations.conf import EngineSettings
from reservations.domain import Percentage, VIPProfile
from reservations.domain.errors import ValidationError, VIPCodeCollisionError
from reservations.domain.identity import derive_vip_code, normalize_phone
from reservations.services.reservation_service import utc_now
from reservations.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


class VIPService:
    """Derives and records VIP codes. Codes are never reassigned."""

    def __init__(
        self,
        store: ReservationStore,
        settings: EngineSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._settings = settings or EngineSettings()
        self._clock = clock

    def derive_code(self, phone: str, year: int) -> str:
        """Return the VIP code for ``phone`` issued in ``year`` without recording it.

        Raises:
            ValidationError: If the phone has no digits or the year is out of range.
        """
        if not 1 <= year <= 9999:
            raise ValidationError("Issuance year is out of range", field="year")
        try:
            return derive_vip_code(
                phone,
                year,
                self._settings.vip_year_codes,
                self._settings.vip_default_year_code,
            )
        except ValueError as exc:
            raise ValidationError("Phone number must contain digits", field="phone") from exc

    def issue_vip_code(
        self,
        phone: str,
        year: int,
        customer_ref: str = "",
        discount_pct: Decimal | None = None,
    ) -> VIPProfile:
        """Create a VIP profile with a derived code.

        Raises:
            ValidationError: For an unusable phone, year or discount.
            VIPCodeCollisionError: If any profile already holds the code;
                nothing is written in that case.
        """
        code = self.derive_code(phone, year)
        pct = self._settings.vip_default_discount_pct if discount_pct is None else discount_pct
        try:
            pct = Percentage(Decimal(pct)).value
        except (ValueError, InvalidOperation) as exc:
            raise ValidationError("VIP discount must be between 0 and 100", field="discount_pct") from exc

        if self._store.vip_code_exists(code):
            logger.warning("VIP code %s already issued; skipping issuance", code)
            raise VIPCodeCollisionError(code)

        profile = self._store.create_vip_profile(
            VIPProfile(
                vip_code=code,
                phone=normalize_phone(phone),
                discount_pct=pct,
                issued_year=year,
                customer_ref=customer_ref,
                created_at=self._clock(),
            )
        )
        logger.info("Issued VIP code %s (%s%%)", profile.vip_code, profile.discount_pct)
        return profile
