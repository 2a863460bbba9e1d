"""Booking references and VIP codes."""

import re
from datetime import date
from typing import Iterator, Mapping

from reservations.domain.value_objects import ReservationId

DEFAULT_YEAR_CODES: Mapping[int, str] = {2025: "114", 2026: "115"}
DEFAULT_YEAR_CODE = "114"
COUNTRY_CALLING_CODE = "886"
PHONE_DIGITS = 10

_NON_DIGITS = re.compile(r"\D")


def base_booking_reference(created_on: date, plate: str, reservation_id: ReservationId) -> str:
    """``YYYYMMDD`` followed by the upper-cased plate, punctuation kept.

    A blank plate falls back to ``NOPLATE-`` plus the start of the reservation id.
    """
    normalized = plate.strip().upper()
    if not normalized:
        normalized = f"NOPLATE-{reservation_id.value.hex[:8].upper()}"
    return f"{created_on:%Y%m%d}{normalized}"


def booking_reference_candidates(base: str, max_attempts: int) -> Iterator[str]:
    """Yield ``base``, ``base-2``, ``base-3`` ... up to ``max_attempts`` candidates."""
    if max_attempts < 1:
        return
    yield base
    for n in range(2, max_attempts + 1):
        yield f"{base}-{n}"


def normalize_phone(phone: str) -> str:
    digits = _NON_DIGITS.sub("", phone)
    if digits.startswith(COUNTRY_CALLING_CODE):
        digits = digits[len(COUNTRY_CALLING_CODE):]
    return digits[-PHONE_DIGITS:]


def year_code(
    year: int,
    table: Mapping[int, str] = DEFAULT_YEAR_CODES,
    default: str = DEFAULT_YEAR_CODE,
) -> str:
    return table.get(year, default)


def derive_vip_code(
    phone: str,
    year: int,
    table: Mapping[int, str] = DEFAULT_YEAR_CODES,
    default: str = DEFAULT_YEAR_CODE,
) -> str:
    """Year code plus the normalized phone number.

    Raises ValueError when the phone contains no digits.
    """
    digits = normalize_phone(phone)
    if not digits:
        raise ValueError("Phone number has no digits")
    return f"{year_code(year, table, default)}{digits}"
