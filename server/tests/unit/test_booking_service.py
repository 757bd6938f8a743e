"""Unit tests for the booking service."""

from decimal import Decimal

import pytest

from travel_api.core.exceptions import (
    InsufficientCapacityError,
    InvalidStatusError,
    InvalidTransitionError,
    NotFoundError,
    PackageUnavailableError,
    ValidationError,
)
from travel_api.models.booking import BookingStatus
from travel_api.schemas.package import UpdatePackageRequest
from travel_api.services.booking_service import BookingService
from travel_api.services.package_service import PackageService


async def _slots(session, package_id: int) -> int:
    package = await PackageService(session).get_package_by_id_or_raise(package_id)
    return package.available_slots


@pytest.mark.asyncio
async def test_book_cancel_and_overbook_scenario(test_session, customer, paris_package):
    """Booking, cancelling and overbooking keep the slot count consistent."""
    service = BookingService(test_session)

    booking = await service.create_booking(customer.id, paris_package.id, 5)
    assert booking.status == BookingStatus.PENDING.value
    assert booking.total_price == Decimal("4499.95")
    assert await _slots(test_session, paris_package.id) == 15

    assert await service.cancel_booking(booking.id, customer.id) is True
    assert await _slots(test_session, paris_package.id) == 20

    with pytest.raises(InsufficientCapacityError) as exc_info:
        await service.create_booking(customer.id, paris_package.id, 25)

    assert exc_info.value.code == "FULL"
    assert exc_info.value.available == 20
    assert await _slots(test_session, paris_package.id) == 20


@pytest.mark.asyncio
async def test_booking_exact_remaining_capacity(test_session, customer, paris_package):
    service = BookingService(test_session)

    await service.create_booking(customer.id, paris_package.id, 20)
    assert await _slots(test_session, paris_package.id) == 0

    with pytest.raises(InsufficientCapacityError):
        await service.create_booking(customer.id, paris_package.id, 1)
    assert await _slots(test_session, paris_package.id) == 0


@pytest.mark.asyncio
async def test_booking_loads_user_and_package(test_session, customer, paris_package):
    booking = await BookingService(test_session).create_booking(
        customer.id, paris_package.id, 2, special_requests="Window seat"
    )

    assert booking.user.full_name == "Alice Walker"
    assert booking.package.title == "Paris City Break"
    assert booking.special_requests == "Window seat"
    assert booking.booking_date is not None


@pytest.mark.asyncio
async def test_booking_requires_at_least_one_traveler(test_session, customer, paris_package):
    with pytest.raises(ValidationError):
        await BookingService(test_session).create_booking(customer.id, paris_package.id, 0)

    assert await _slots(test_session, paris_package.id) == 20


@pytest.mark.asyncio
async def test_booking_unknown_package(test_session, customer):
    with pytest.raises(NotFoundError):
        await BookingService(test_session).create_booking(customer.id, 9999, 1)


@pytest.mark.asyncio
async def test_booking_inactive_package_rejected(test_session, customer, paris_package):
    await PackageService(test_session).delete_package(paris_package.id)

    with pytest.raises(PackageUnavailableError):
        await BookingService(test_session).create_booking(customer.id, paris_package.id, 1)

    assert await _slots(test_session, paris_package.id) == 20


@pytest.mark.asyncio
async def test_total_price_frozen_after_price_change(test_session, customer, paris_package, package_data):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 2)

    await PackageService(test_session).update_package(
        paris_package.id,
        UpdatePackageRequest(**{**package_data, "price": "1500.00"}),
    )

    reloaded = await service.get_booking(booking.id)
    assert reloaded.total_price == Decimal("1799.98")


@pytest.mark.asyncio
async def test_cancel_twice_restores_slots_once(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 4)

    assert await service.cancel_booking(booking.id, customer.id) is True
    assert await service.cancel_booking(booking.id, customer.id) is False

    assert await _slots(test_session, paris_package.id) == 20
    assert (await service.get_booking(booking.id)).status == BookingStatus.CANCELLED.value


@pytest.mark.asyncio
async def test_cancel_by_non_owner_is_not_found(test_session, customer, other_customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 3)

    with pytest.raises(NotFoundError):
        await service.cancel_booking(booking.id, other_customer.id)

    assert await _slots(test_session, paris_package.id) == 17
    assert (await service.get_booking(booking.id)).status == BookingStatus.PENDING.value


@pytest.mark.asyncio
async def test_cancel_unknown_booking(test_session, customer):
    with pytest.raises(NotFoundError):
        await BookingService(test_session).cancel_booking(12345, customer.id)


@pytest.mark.asyncio
async def test_confirm_keeps_slots(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 5)

    updated = await service.update_booking_status(booking.id, "Confirmed")

    assert updated.status == BookingStatus.CONFIRMED.value
    assert await _slots(test_session, paris_package.id) == 15


@pytest.mark.asyncio
async def test_admin_cancel_of_confirmed_restores_slots(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 5)
    await service.update_booking_status(booking.id, BookingStatus.CONFIRMED)

    updated = await service.update_booking_status(booking.id, BookingStatus.CANCELLED)

    assert updated.status == BookingStatus.CANCELLED.value
    assert await _slots(test_session, paris_package.id) == 20


@pytest.mark.asyncio
async def test_admin_cancel_then_customer_cancel(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 6)

    await service.update_booking_status(booking.id, "cancelled")
    assert await service.cancel_booking(booking.id, customer.id) is False

    assert await _slots(test_session, paris_package.id) == 20


@pytest.mark.asyncio
async def test_status_parsing_is_case_insensitive(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 1)

    updated = await service.update_booking_status(booking.id, "  CONFIRMED ")

    assert updated.status == BookingStatus.CONFIRMED.value


@pytest.mark.asyncio
async def test_same_status_is_a_no_op(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 2)

    updated = await service.update_booking_status(booking.id, "Pending")

    assert updated.status == BookingStatus.PENDING.value
    assert await _slots(test_session, paris_package.id) == 18


@pytest.mark.asyncio
async def test_unknown_status_rejected(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 2)

    with pytest.raises(InvalidStatusError):
        await service.update_booking_status(booking.id, "Shipped")

    assert (await service.get_booking(booking.id)).status == BookingStatus.PENDING.value


@pytest.mark.asyncio
async def test_cancelled_booking_cannot_be_revived(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 2)
    await service.cancel_booking(booking.id, customer.id)

    with pytest.raises(InvalidTransitionError):
        await service.update_booking_status(booking.id, "Confirmed")

    with pytest.raises(InvalidTransitionError):
        await service.update_booking_status(booking.id, "Pending")

    assert await _slots(test_session, paris_package.id) == 20


@pytest.mark.asyncio
async def test_confirmed_cannot_return_to_pending(test_session, customer, paris_package):
    service = BookingService(test_session)
    booking = await service.create_booking(customer.id, paris_package.id, 2)
    await service.update_booking_status(booking.id, "Confirmed")

    with pytest.raises(InvalidTransitionError):
        await service.update_booking_status(booking.id, "Pending")


@pytest.mark.asyncio
async def test_update_status_unknown_booking(test_session):
    with pytest.raises(NotFoundError):
        await BookingService(test_session).update_booking_status(4242, "Confirmed")


@pytest.mark.asyncio
async def test_list_bookings_scoped_to_user(test_session, customer, other_customer, paris_package, tokyo_package):
    service = BookingService(test_session)
    first = await service.create_booking(customer.id, paris_package.id, 1)
    second = await service.create_booking(customer.id, tokyo_package.id, 2)
    await service.create_booking(other_customer.id, paris_package.id, 3)

    mine = await service.list_bookings_for_user(customer.id)
    everything = await service.list_all_bookings()

    assert [b.id for b in mine] == [second.id, first.id]
    assert len(everything) == 3
    assert all(b.user_id == customer.id for b in mine)
