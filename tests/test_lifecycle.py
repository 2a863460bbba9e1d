import pytest

from reservations.domain import ReservationStatus
from reservations.domain.errors import InvalidTransitionError
from reservations.domain.lifecycle import check_transition, is_overdue, is_terminal
from tests.helpers import at, make_category, make_reservation

S = ReservationStatus


@pytest.mark.parametrize(
    "current, target",
    [
        (S.PENDING, S.CHECKED_IN),
        (S.PENDING, S.CANCELLED),
        (S.CHECKED_IN, S.CHECKED_OUT),
    ],
)
def test_allowed_transitions(current, target):
    check_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        (S.PENDING, S.CHECKED_OUT),
        (S.CHECKED_OUT, S.CHECKED_IN),
        (S.CHECKED_OUT, S.CANCELLED),
        (S.CANCELLED, S.PENDING),
        (S.CANCELLED, S.CHECKED_IN),
        (S.CHECKED_IN, S.PENDING),
    ],
)
def test_forbidden_transitions(current, target):
    with pytest.raises(InvalidTransitionError):
        check_transition(current, target, admin_override=True)


def test_cancelling_checked_in_needs_override():
    with pytest.raises(InvalidTransitionError):
        check_transition(S.CHECKED_IN, S.CANCELLED)
    check_transition(S.CHECKED_IN, S.CANCELLED, admin_override=True)


def test_terminal_states():
    assert is_terminal(S.CHECKED_OUT)
    assert is_terminal(S.CANCELLED)
    assert not is_terminal(S.PENDING)


def test_overdue_only_when_checked_in_past_checkout():
    category = make_category()
    checked_in = make_reservation(category, at(3, 1), at(3, 5), status=S.CHECKED_IN)
    pending = make_reservation(category, at(3, 1), at(3, 5))

    assert is_overdue(checked_in, at(3, 6))
    assert not is_overdue(checked_in, at(3, 4))
    assert not is_overdue(pending, at(3, 6))
