"""Reservation status state machine"""

from typing import Union

from app.models.reservation import ReservationStatus
from app.reservations.errors import InvalidTransition, ValidationError

ALLOWED_TRANSITIONS = {
    ReservationStatus.PENDING: {
        ReservationStatus.CONFIRMED,
        ReservationStatus.CANCELLED,
        ReservationStatus.NO_SHOW,
    },
    ReservationStatus.CONFIRMED: {
        ReservationStatus.CANCELLED,
        ReservationStatus.COMPLETED,
        ReservationStatus.NO_SHOW,
    },
    ReservationStatus.CANCELLED: set(),
    ReservationStatus.COMPLETED: set(),
    ReservationStatus.NO_SHOW: set(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def parse_status(value: Union[str, ReservationStatus]) -> ReservationStatus:
    """Coerce a raw status value, raising ValidationError for unknown ones"""
    try:
        return ReservationStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ReservationStatus)
        raise ValidationError(f"Unknown status '{value}' (expected one of: {allowed})")


def is_allowed(current: Union[str, ReservationStatus], target: Union[str, ReservationStatus]) -> bool:
    """Whether ``current -> target`` is a legal transition"""
    return ReservationStatus(target) in ALLOWED_TRANSITIONS[ReservationStatus(current)]


def is_terminal(status: Union[str, ReservationStatus]) -> bool:
    return ReservationStatus(status) in TERMINAL_STATUSES


def ensure_transition(current: Union[str, ReservationStatus], target: Union[str, ReservationStatus]) -> None:
    """Raise InvalidTransition unless ``current -> target`` is allowed"""
    current = ReservationStatus(current)
    target = parse_status(target)
    if not is_allowed(current, target):
        raise InvalidTransition(
            f"Cannot change reservation status from '{current.value}' to '{target.value}'"
        )
