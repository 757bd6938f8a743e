"""Booking status transition rules.

Pending may become Confirmed or Cancelled, Confirmed may become Cancelled,
and Cancelled is terminal. Every entry into Cancelled releases the booking's
slots back to its package.
"""

from typing import Any

from ..core.exceptions import InvalidStatusError, InvalidTransitionError
from ..models.booking import BookingStatus

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}


def parse_status(value: Any) -> BookingStatus:
    """
    Convert a raw status value into a BookingStatus.

    Matching is case-insensitive and ignores surrounding whitespace.

    Raises:
        InvalidStatusError: If the value names no known status
    """
    if isinstance(value, BookingStatus):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for status in BookingStatus:
            if status.value.lower() == normalized:
                return status
    raise InvalidStatusError(value, [status.value for status in BookingStatus])


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    """Return True if a booking in ``current`` may move to ``target``."""
    return target in ALLOWED_TRANSITIONS[BookingStatus(current)]


def releases_slots(current: BookingStatus, target: BookingStatus) -> bool:
    """Return True if moving from ``current`` to ``target`` gives slots back."""
    return target == BookingStatus.CANCELLED and BookingStatus(current) != BookingStatus.CANCELLED


def ensure_transition(booking_id: int, current: BookingStatus, target: BookingStatus) -> None:
    """
    Validate a status change.

    Raises:
        InvalidTransitionError: If the transition table forbids the change
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(booking_id, BookingStatus(current).value, target.value)
