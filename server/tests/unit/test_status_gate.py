"""Unit tests for booking status transition rules."""

import pytest

from travel_api.core.exceptions import InvalidStatusError, InvalidTransitionError
from travel_api.models.booking import BookingStatus
from travel_api.services.status_gate import (
    can_transition,
    ensure_transition,
    parse_status,
    releases_slots,
)

PENDING = BookingStatus.PENDING
CONFIRMED = BookingStatus.CONFIRMED
CANCELLED = BookingStatus.CANCELLED


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (PENDING, CONFIRMED, True),
        (PENDING, CANCELLED, True),
        (CONFIRMED, CANCELLED, True),
        (CONFIRMED, PENDING, False),
        (CANCELLED, PENDING, False),
        (CANCELLED, CONFIRMED, False),
    ],
)
def test_transition_table(current, target, allowed):
    assert can_transition(current, target) is allowed


@pytest.mark.parametrize("current", [PENDING, CONFIRMED])
def test_entering_cancelled_releases_slots(current):
    assert releases_slots(current, CANCELLED) is True


def test_other_moves_keep_slots():
    assert releases_slots(PENDING, CONFIRMED) is False
    assert releases_slots(CANCELLED, CANCELLED) is False


@pytest.mark.parametrize("raw", ["Pending", "pending", " PENDING ", PENDING])
def test_parse_status_accepts_any_case(raw):
    assert parse_status(raw) is PENDING


@pytest.mark.parametrize("raw", ["Shipped", "", None, 3])
def test_parse_status_rejects_unknown(raw):
    with pytest.raises(InvalidStatusError) as exc_info:
        parse_status(raw)

    assert exc_info.value.status_code == 400
    assert exc_info.value.problem_details["allowed_statuses"] == ["Pending", "Confirmed", "Cancelled"]


def test_ensure_transition_raises_conflict():
    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_transition(7, CANCELLED, CONFIRMED)

    assert exc_info.value.status_code == 409
    assert exc_info.value.code == "INVALID_TRANSITION"
    assert exc_info.value.problem_details["conflicting_resource"]["current_status"] == "Cancelled"
