"""Unit tests for the travel package service."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from travel_api.core.exceptions import CapacityConflictError, ConflictError, NotFoundError
from travel_api.schemas.package import SearchPackagesParams, UpdatePackageRequest
from travel_api.services.booking_service import BookingService
from travel_api.services.package_service import PackageService


@pytest.mark.asyncio
async def test_create_package_starts_fully_available(paris_package):
    assert paris_package.id is not None
    assert paris_package.max_capacity == 20
    assert paris_package.available_slots == 20
    assert paris_package.price == Decimal("899.99")
    assert paris_package.is_active is True


@pytest.mark.asyncio
async def test_raising_capacity_adds_slots(test_session, customer, paris_package, package_data):
    await BookingService(test_session).create_booking(customer.id, paris_package.id, 5)

    updated = await PackageService(test_session).update_package(
        paris_package.id,
        UpdatePackageRequest(**{**package_data, "max_capacity": 30}),
    )

    assert updated.max_capacity == 30
    assert updated.available_slots == 25


@pytest.mark.asyncio
async def test_lowering_capacity_to_booked_slots(test_session, customer, paris_package, package_data):
    await BookingService(test_session).create_booking(customer.id, paris_package.id, 8)

    updated = await PackageService(test_session).update_package(
        paris_package.id,
        UpdatePackageRequest(**{**package_data, "max_capacity": 8}),
    )

    assert updated.max_capacity == 8
    assert updated.available_slots == 0


@pytest.mark.asyncio
async def test_lowering_capacity_below_booked_slots_rejected(test_session, customer, paris_package, package_data):
    await BookingService(test_session).create_booking(customer.id, paris_package.id, 8)
    service = PackageService(test_session)

    with pytest.raises(CapacityConflictError) as exc_info:
        await service.update_package(
            paris_package.id,
            UpdatePackageRequest(**{**package_data, "max_capacity": 5, "title": "Renamed"}),
        )

    assert exc_info.value.code == "CAPACITY_CONFLICT"
    package = await service.get_package_by_id_or_raise(paris_package.id)
    assert package.max_capacity == 20
    assert package.available_slots == 12
    assert package.title == "Paris City Break"


@pytest.mark.asyncio
async def test_update_unknown_package(test_session, package_data):
    with pytest.raises(NotFoundError):
        await PackageService(test_session).update_package(999, UpdatePackageRequest(**package_data))


@pytest.mark.asyncio
async def test_soft_delete_deactivates(test_session, paris_package):
    service = PackageService(test_session)

    await service.delete_package(paris_package.id)

    package = await service.get_package_by_id_or_raise(paris_package.id)
    assert package.is_active is False
    assert await service.list_active_packages() == []
    assert len(await service.list_packages()) == 1


@pytest.mark.asyncio
async def test_hard_delete_refused_with_bookings(test_session, customer, paris_package):
    await BookingService(test_session).create_booking(customer.id, paris_package.id, 1)

    with pytest.raises(ConflictError) as exc_info:
        await PackageService(test_session).delete_package(paris_package.id, hard=True)

    assert exc_info.value.code == "PACKAGE_HAS_BOOKINGS"


@pytest.mark.asyncio
async def test_hard_delete_without_bookings(test_session, paris_package):
    service = PackageService(test_session)

    await service.delete_package(paris_package.id, hard=True)

    assert await service.get_package_by_id(paris_package.id) is None


@pytest.mark.asyncio
async def test_active_packages_exclude_started(test_session, make_package, paris_package):
    past = datetime.now(timezone.utc) - timedelta(days=3)
    await make_package(title="Already Left", start_date=past, end_date=past + timedelta(days=4))

    active = await PackageService(test_session).list_active_packages()

    assert [p.id for p in active] == [paris_package.id]


@pytest.mark.asyncio
async def test_search_by_destination_is_case_insensitive(test_session, paris_package, tokyo_package):
    service = PackageService(test_session)

    results = await service.search_packages(SearchPackagesParams(destination="TOKYO"))

    assert [p.id for p in results] == [tokyo_package.id]


@pytest.mark.asyncio
async def test_search_by_price_range(test_session, paris_package, tokyo_package):
    service = PackageService(test_session)

    cheap = await service.search_packages(SearchPackagesParams(max_price=Decimal("1000")))
    pricey = await service.search_packages(SearchPackagesParams(min_price=Decimal("1000")))
    both = await service.search_packages(SearchPackagesParams())

    assert [p.id for p in cheap] == [paris_package.id]
    assert [p.id for p in pricey] == [tokyo_package.id]
    assert {p.id for p in both} == {paris_package.id, tokyo_package.id}


@pytest.mark.asyncio
async def test_search_skips_inactive(test_session, paris_package):
    service = PackageService(test_session)
    await service.delete_package(paris_package.id)

    assert await service.search_packages(SearchPackagesParams(destination="paris")) == []


@pytest.mark.asyncio
async def test_update_without_is_active_keeps_package_inactive(test_session, paris_package, package_data):
    service = PackageService(test_session)
    await service.delete_package(paris_package.id)

    updated = await service.update_package(
        paris_package.id, UpdatePackageRequest(**{**package_data, "title": "Paris Weekend"})
    )

    assert updated.title == "Paris Weekend"
    assert updated.is_active is False

    updated = await service.update_package(
        paris_package.id, UpdatePackageRequest(**package_data, is_active=True)
    )
    assert updated.is_active is True
