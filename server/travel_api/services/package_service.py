"""Travel package service for catalog and capacity operations."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import CapacityConflictError, ConflictError, NotFoundError
from ..core.observability import metrics_collector
from ..models.booking import Booking
from ..models.package import TravelPackage
from ..schemas.package import CreatePackageRequest, SearchPackagesParams, UpdatePackageRequest

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to an aware UTC value; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PackageService:
    """Service for travel package operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_package(self, request: CreatePackageRequest) -> TravelPackage:
        """
        Create a new travel package with all capacity available.

        Args:
            request: Package creation request

        Returns:
            Created package entity
        """
        package = TravelPackage(
            title=request.title,
            description=request.description,
            destination=request.destination,
            price=request.price,
            duration=request.duration,
            start_date=as_utc(request.start_date),
            end_date=as_utc(request.end_date),
            max_capacity=request.max_capacity,
            available_slots=request.max_capacity,
            image_url=request.image_url,
            is_active=True,
        )

        self.db.add(package)
        await self.db.commit()
        await self.db.refresh(package)

        metrics_collector.set_available_slots(package.id, package.available_slots)
        logger.info(
            "Package created successfully",
            extra={
                "package_id": package.id,
                "title": package.title,
                "destination": package.destination,
                "max_capacity": package.max_capacity,
            }
        )

        return package

    async def update_package(self, package_id: int, request: UpdatePackageRequest) -> TravelPackage:
        """
        Replace a package's editable fields.

        Availability is re-derived from the new capacity in the same UPDATE
        statement, so slots held by existing bookings stay reserved.

        Args:
            package_id: Package to update
            request: New field values

        Returns:
            Updated package entity

        Raises:
            NotFoundError: If package not found
            CapacityConflictError: If the new capacity is below the booked slots
        """
        new_capacity = request.max_capacity
        capacity_delta = new_capacity - TravelPackage.max_capacity
        values = request.model_dump(exclude={"is_active", "start_date", "end_date", "max_capacity"})
        if request.is_active is not None:
            values["is_active"] = request.is_active

        stmt = (
            update(TravelPackage)
            .where(
                TravelPackage.id == package_id,
                TravelPackage.available_slots + capacity_delta >= 0,
            )
            .values(
                **values,
                start_date=as_utc(request.start_date),
                end_date=as_utc(request.end_date),
                max_capacity=new_capacity,
                available_slots=TravelPackage.available_slots + capacity_delta,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount != 1:
            await self.db.rollback()
            package = await self.get_package_by_id_or_raise(package_id)
            logger.warning(
                "Package update failed - capacity below booked slots",
                extra={
                    "package_id": package_id,
                    "requested_capacity": new_capacity,
                    "booked_slots": package.booked_slots,
                }
            )
            raise CapacityConflictError(package_id, new_capacity, package.booked_slots)

        await self.db.commit()
        package = await self.get_package_by_id_or_raise(package_id)

        metrics_collector.set_available_slots(package.id, package.available_slots)
        logger.info(
            "Package updated successfully",
            extra={
                "package_id": package_id,
                "max_capacity": package.max_capacity,
                "available_slots": package.available_slots,
                "is_active": package.is_active,
            }
        )

        return package

    async def delete_package(self, package_id: int, hard: bool = False) -> None:
        """
        Remove a package from sale.

        A soft delete deactivates the package. A hard delete removes the row
        and is refused while any booking references it.

        Raises:
            NotFoundError: If package not found
            ConflictError: If a hard delete is requested for a booked package
        """
        package = await self.get_package_by_id_or_raise(package_id)

        if not hard:
            package.is_active = False
            await self.db.commit()
            logger.info("Package deactivated", extra={"package_id": package_id})
            return

        booking_count = await self._count_bookings(package_id)
        if booking_count:
            logger.warning(
                "Package hard delete refused - bookings exist",
                extra={"package_id": package_id, "booking_count": booking_count}
            )
            raise ConflictError(
                detail=f"Package {package_id} has {booking_count} bookings and cannot be deleted",
                conflicting_resource={"package_id": package_id, "booking_count": booking_count},
                code="PACKAGE_HAS_BOOKINGS",
            )

        await self.db.delete(package)
        await self.db.commit()
        logger.info("Package deleted", extra={"package_id": package_id})

    async def list_packages(self) -> list[TravelPackage]:
        """Return every package, active or not."""
        stmt = (
            select(TravelPackage)
            .order_by(TravelPackage.start_date, TravelPackage.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def list_active_packages(self, now: Optional[datetime] = None) -> list[TravelPackage]:
        """Return active packages that have not started yet."""
        now = as_utc(now) if now else datetime.now(timezone.utc)
        stmt = (
            select(TravelPackage)
            .where(TravelPackage.is_active.is_(True), TravelPackage.start_date > now)
            .order_by(TravelPackage.start_date, TravelPackage.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def search_packages(self, params: SearchPackagesParams) -> list[TravelPackage]:
        """
        Search active packages.

        Args:
            params: Destination substring and price bounds, all optional

        Returns:
            Matching packages ordered by start date
        """
        conditions = [TravelPackage.is_active.is_(True)]

        if params.destination:
            pattern = f"%{params.destination.strip().lower()}%"
            conditions.append(func.lower(TravelPackage.destination).like(pattern))

        if params.min_price is not None:
            conditions.append(TravelPackage.price >= Decimal(params.min_price))

        if params.max_price is not None:
            conditions.append(TravelPackage.price <= Decimal(params.max_price))

        stmt = (
            select(TravelPackage)
            .where(and_(*conditions))
            .order_by(TravelPackage.start_date, TravelPackage.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        packages = list(result.scalars())

        logger.info(
            "Package search completed",
            extra={
                "total_found": len(packages),
                "filters": {
                    "destination": params.destination,
                    "min_price": str(params.min_price) if params.min_price is not None else None,
                    "max_price": str(params.max_price) if params.max_price is not None else None,
                },
            }
        )

        return packages

    async def get_package_by_id(self, package_id: int) -> Optional[TravelPackage]:
        """
        Get package by ID, always reloading its columns from the database.

        Args:
            package_id: Package ID to search for

        Returns:
            Package if found, None otherwise
        """
        stmt = (
            select(TravelPackage)
            .where(TravelPackage.id == package_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_package_by_id_or_raise(self, package_id: int) -> TravelPackage:
        """
        Get package by ID or raise NotFoundError.

        Raises:
            NotFoundError: If package not found
        """
        package = await self.get_package_by_id(package_id)
        if not package:
            logger.warning(
                "Package not found",
                extra={"package_id": package_id}
            )
            raise NotFoundError(
                resource_type="package",
                resource_id=package_id
            )
        return package

    async def lock_package(self, package_id: int) -> None:
        """
        Serialize slot changes on one package for the rest of the transaction.

        Uses a PostgreSQL transaction-scoped advisory lock. Other dialects
        rely on the conditional updates alone.
        """
        bind = self.db.bind
        if bind is not None and bind.dialect.name == "postgresql":
            await self.db.execute(
                text("SELECT pg_advisory_xact_lock(:namespace, :package_id)"),
                {"namespace": 7001, "package_id": package_id}
            )
            logger.debug(
                "Acquired advisory lock for package",
                extra={"package_id": package_id}
            )

    async def _count_bookings(self, package_id: int) -> int:
        stmt = select(func.count(Booking.id)).where(Booking.travel_package_id == package_id)
        result = await self.db.execute(stmt)
        return result.scalar() or 0
