"""Reservation status transitions and derived classifications."""

from datetime import datetime

from reservations.domain.errors import InvalidTransitionError
from reservations.domain.models import Reservation, ReservationStatus

_ALLOWED: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CHECKED_IN, ReservationStatus.CANCELLED}),
    ReservationStatus.CHECKED_IN: frozenset({ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED}),
    ReservationStatus.CHECKED_OUT: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

# Cancelling a vehicle that is already on site needs an administrator.
_OVERRIDE_ONLY = frozenset({(ReservationStatus.CHECKED_IN, ReservationStatus.CANCELLED)})


def is_terminal(status: ReservationStatus) -> bool:
    return not _ALLOWED[status]


def check_transition(
    current: ReservationStatus, target: ReservationStatus, admin_override: bool = False
) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if target not in _ALLOWED[current]:
        raise InvalidTransitionError(current.value, target.value)
    if (current, target) in _OVERRIDE_ONLY and not admin_override:
        raise InvalidTransitionError(current.value, target.value)


def is_overdue(reservation: Reservation, now: datetime) -> bool:
    return reservation.status is ReservationStatus.CHECKED_IN and reservation.check_out_at < now
