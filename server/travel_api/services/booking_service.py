"""Booking service: slot allocation, cancellation and status changes."""

import logging
from typing import Optional

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import (
    InsufficientCapacityError,
    NotFoundError,
    PackageUnavailableError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingStatus
from ..models.package import TravelPackage
from .package_service import PackageService
from .status_gate import ensure_transition, parse_status, releases_slots

logger = logging.getLogger(__name__)


class BookingService:
    """
    Service for booking allocation operations.

    Every change to ``available_slots`` is a conditional UPDATE whose WHERE
    clause re-checks the constraint at write time, committed in the same
    transaction as the booking row it accompanies.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.package_service = PackageService(db)

    async def create_booking(
        self,
        user_id: int,
        package_id: int,
        traveler_count: int,
        special_requests: Optional[str] = None,
    ) -> Booking:
        """
        Reserve slots on a package and create a Pending booking.

        Args:
            user_id: Owning user
            package_id: Package to book
            traveler_count: Number of travelers (slots to reserve)
            special_requests: Optional free-text request

        Returns:
            Created booking with user and package loaded

        Raises:
            ValidationError: If traveler_count is below 1
            NotFoundError: If package not found
            PackageUnavailableError: If package is inactive
            InsufficientCapacityError: If fewer slots remain than requested
        """
        if traveler_count < 1:
            raise ValidationError(
                detail="number_of_travelers must be at least 1",
                violations=[{"path": "number_of_travelers", "message": "must be at least 1"}],
            )

        package = await self.package_service.get_package_by_id_or_raise(package_id)
        if not package.is_active:
            raise PackageUnavailableError(package_id)

        # Price is frozen from the row read in this request
        total_price = package.price * traveler_count

        await self.package_service.lock_package(package_id)

        reserve = (
            update(TravelPackage)
            .where(
                TravelPackage.id == package_id,
                TravelPackage.is_active.is_(True),
                TravelPackage.available_slots >= traveler_count,
            )
            .values(available_slots=TravelPackage.available_slots - traveler_count)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(reserve)

        if result.rowcount != 1:
            await self.db.rollback()
            current = await self.package_service.get_package_by_id_or_raise(package_id)
            if not current.is_active:
                raise PackageUnavailableError(package_id)

            metrics_collector.record_capacity_rejection(package_id)
            logger.warning(
                "Booking creation failed - insufficient capacity",
                extra={
                    "package_id": package_id,
                    "user_id": user_id,
                    "requested_travelers": traveler_count,
                    "available_slots": current.available_slots,
                }
            )
            raise InsufficientCapacityError(package_id, traveler_count, current.available_slots)

        booking = Booking(
            user_id=user_id,
            travel_package_id=package_id,
            number_of_travelers=traveler_count,
            total_price=total_price,
            status=BookingStatus.PENDING.value,
            special_requests=special_requests,
        )
        self.db.add(booking)

        try:
            await self.db.flush()
            booking_id = booking.id
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error(
                "Booking creation failed - reservation rolled back",
                extra={"package_id": package_id, "user_id": user_id},
                exc_info=True,
            )
            raise

        package = await self.package_service.get_package_by_id_or_raise(package_id)
        booking = await self.get_booking_by_id_or_raise(booking_id)

        metrics_collector.record_booking_created(package_id, traveler_count)
        metrics_collector.set_available_slots(package_id, package.available_slots)
        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": booking_id,
                "package_id": package_id,
                "user_id": user_id,
                "travelers": traveler_count,
                "total_price": str(booking.total_price),
                "remaining_slots": package.available_slots,
            }
        )

        return booking

    async def cancel_booking(self, booking_id: int, requesting_user_id: int) -> bool:
        """
        Cancel one of the requesting user's bookings and release its slots.

        Args:
            booking_id: Booking to cancel
            requesting_user_id: User issuing the request; must own the booking

        Returns:
            True if the booking was cancelled by this call, False if it was
            already cancelled (nothing changed)

        Raises:
            NotFoundError: If no booking with this ID belongs to the user
        """
        booking = await self._get_owned_booking(booking_id, requesting_user_id)
        if booking is None:
            logger.warning(
                "Booking cancellation failed - booking not found for user",
                extra={"booking_id": booking_id, "user_id": requesting_user_id}
            )
            raise NotFoundError(resource_type="booking", resource_id=booking_id)

        package_id = booking.travel_package_id
        travelers = booking.number_of_travelers
        await self.package_service.lock_package(package_id)

        cancelled = await self._mark_cancelled(
            booking,
            extra_conditions=(Booking.user_id == requesting_user_id,),
        )
        if not cancelled:
            logger.info(
                "Booking already cancelled - no change",
                extra={"booking_id": booking_id, "user_id": requesting_user_id}
            )
            return False

        await self.db.commit()

        metrics_collector.record_booking_cancelled("customer")
        await self._publish_slots(package_id)
        logger.info(
            "Booking cancelled successfully",
            extra={
                "booking_id": booking_id,
                "user_id": requesting_user_id,
                "slots_restored": travelers,
            }
        )

        return True

    async def update_booking_status(self, booking_id: int, new_status: str | BookingStatus) -> Booking:
        """
        Apply an administrative status change.

        Moving to the current status is a no-op. Moving into Cancelled
        releases the booking's slots exactly once.

        Args:
            booking_id: Booking to update
            new_status: Target status; free text is parsed case-insensitively

        Returns:
            Booking in its resulting state

        Raises:
            InvalidStatusError: If new_status is not a known status
            NotFoundError: If booking not found
            InvalidTransitionError: If the transition table forbids the change
        """
        target = parse_status(new_status)
        booking = await self.get_booking_by_id_or_raise(booking_id)
        current = BookingStatus(booking.status)
        package_id = booking.travel_package_id

        if current == target:
            logger.info(
                "Booking status unchanged - already in target status",
                extra={"booking_id": booking_id, "status": target.value}
            )
            return booking

        ensure_transition(booking_id, current, target)

        if releases_slots(current, target):
            await self.package_service.lock_package(package_id)
            changed = await self._mark_cancelled(
                booking,
                extra_conditions=(Booking.status == current.value,),
            )
        else:
            result = await self.db.execute(
                update(Booking)
                .where(Booking.id == booking_id, Booking.status == current.value)
                .values(status=target.value)
                .execution_options(synchronize_session=False)
            )
            changed = result.rowcount == 1

        if not changed:
            # Another request moved the booking first; judge against its new status
            await self.db.rollback()
            latest = await self.get_booking_by_id_or_raise(booking_id)
            latest_status = BookingStatus(latest.status)
            if latest_status == target:
                return latest
            ensure_transition(booking_id, latest_status, target)
            return await self.update_booking_status(booking_id, target)

        await self.db.commit()

        metrics_collector.record_status_change(current.value, target.value)
        if target == BookingStatus.CANCELLED:
            metrics_collector.record_booking_cancelled("admin")
            await self._publish_slots(package_id)

        logger.info(
            "Booking status updated",
            extra={
                "booking_id": booking_id,
                "from_status": current.value,
                "to_status": target.value,
            }
        )

        return await self.get_booking_by_id_or_raise(booking_id)

    async def get_booking(self, booking_id: int) -> Booking:
        """
        Get booking by ID.

        Raises:
            NotFoundError: If booking not found
        """
        return await self.get_booking_by_id_or_raise(booking_id)

    async def list_bookings_for_user(self, user_id: int) -> list[Booking]:
        """Return the user's bookings, newest first."""
        stmt = self._booking_query().where(Booking.user_id == user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def list_all_bookings(self) -> list[Booking]:
        """Return every booking, newest first."""
        result = await self.db.execute(self._booking_query())
        return list(result.scalars())

    async def get_booking_by_id(self, booking_id: int) -> Booking | None:
        """Get booking by ID with user and package loaded."""
        stmt = self._booking_query().where(Booking.id == booking_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_by_id_or_raise(self, booking_id: int) -> Booking:
        """Get booking by ID or raise NotFoundError."""
        booking = await self.get_booking_by_id(booking_id)
        if not booking:
            logger.warning(
                "Booking not found",
                extra={"booking_id": booking_id}
            )
            raise NotFoundError(
                resource_type="booking",
                resource_id=booking_id
            )
        return booking

    def _booking_query(self):
        return (
            select(Booking)
            .options(selectinload(Booking.user), selectinload(Booking.package))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .execution_options(populate_existing=True)
        )

    async def _get_owned_booking(self, booking_id: int, user_id: int) -> Booking | None:
        stmt = (
            select(Booking)
            .where(Booking.id == booking_id, Booking.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _mark_cancelled(self, booking: Booking, extra_conditions: tuple = ()) -> bool:
        """
        Move a booking to Cancelled and return its slots in one transaction.

        The status write only matches a booking that is not yet cancelled, so
        concurrent callers cannot both restore the same slots. Restored slots
        are capped at the package's capacity. Returns False when the status
        write matched nothing; the caller owns commit and rollback.
        """
        result = await self.db.execute(
            update(Booking)
            .where(
                Booking.id == booking.id,
                Booking.status != BookingStatus.CANCELLED.value,
                *extra_conditions,
            )
            .values(status=BookingStatus.CANCELLED.value)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            return False

        travelers = booking.number_of_travelers
        restored = TravelPackage.available_slots + travelers
        await self.db.execute(
            update(TravelPackage)
            .where(TravelPackage.id == booking.travel_package_id)
            .values(
                available_slots=case(
                    (restored > TravelPackage.max_capacity, TravelPackage.max_capacity),
                    else_=restored,
                )
            )
            .execution_options(synchronize_session=False)
        )
        return True

    async def _publish_slots(self, package_id: int) -> None:
        package = await self.package_service.get_package_by_id(package_id)
        if package is not None:
            metrics_collector.set_available_slots(package_id, package.available_slots)
