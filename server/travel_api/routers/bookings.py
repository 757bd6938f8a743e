"""Booking router for booking operations."""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, DatabaseSession, RequiredAuth, is_admin
from ..core.exceptions import AlreadyCancelledError, AuthorizationError, ProblemDetailsException
from ..schemas.booking import Booking, CreateBookingRequest, UpdateBookingStatusRequest
from ..schemas.common import MessageResponse
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


def _convert_booking_to_schema(booking_model) -> Booking:
    """Convert booking model to schema."""
    return Booking(
        id=booking_model.id,
        user_id=booking_model.user_id,
        user_name=booking_model.user.full_name,
        travel_package_id=booking_model.travel_package_id,
        package_title=booking_model.package.title,
        booking_date=booking_model.booking_date,
        number_of_travelers=booking_model.number_of_travelers,
        total_price=booking_model.total_price,
        status=booking_model.status,
        special_requests=booking_model.special_requests,
        created_at=booking_model.created_at
    )


def _booking_list_response(bookings) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=[_convert_booking_to_schema(b).model_dump(mode="json") for b in bookings]
    )


@router.get("", response_model=list[Booking])
async def list_all_bookings(
    db: AsyncSession = DatabaseSession,
    current_user: dict = AdminAuth
) -> JSONResponse:
    """List every booking, newest first."""
    bookings = await BookingService(db).list_all_bookings()
    return _booking_list_response(bookings)


@router.get("/my-bookings", response_model=list[Booking])
async def list_my_bookings(
    db: AsyncSession = DatabaseSession,
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """List the caller's bookings, newest first."""
    bookings = await BookingService(db).list_bookings_for_user(current_user["user_id"])
    return _booking_list_response(bookings)


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(
    booking_id: int,
    db: AsyncSession = DatabaseSession,
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """
    Get a booking by ID.

    Customers may only read their own bookings; administrators may read any.
    """
    booking = await BookingService(db).get_booking(booking_id)

    if booking.user_id != current_user["user_id"] and not is_admin(current_user):
        logger.warning(
            "Booking access denied",
            extra={"booking_id": booking_id, "user_id": current_user["user_id"]}
        )
        raise AuthorizationError(detail="You can only view your own bookings")

    return JSONResponse(
        status_code=200,
        content=_convert_booking_to_schema(booking).model_dump(mode="json")
    )


@router.post("", response_model=Booking, status_code=201)
async def create_booking(
    request: CreateBookingRequest,
    db: AsyncSession = DatabaseSession,
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """
    Book slots on a travel package for the caller.

    The booking starts Pending and its total price is frozen at the
    package's current price.
    """
    try:
        booking = await BookingService(db).create_booking(
            user_id=current_user["user_id"],
            package_id=request.travel_package_id,
            traveler_count=request.number_of_travelers,
            special_requests=request.special_requests
        )
        response_data = _convert_booking_to_schema(booking)

        return JSONResponse(
            status_code=201,
            content=response_data.model_dump(mode="json"),
            headers={"Location": f"{router.prefix}/{booking.id}"}
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking creation",
            extra={
                "package_id": request.travel_package_id,
                "travelers": request.number_of_travelers,
                "user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/{booking_id}/status", response_model=Booking)
async def update_booking_status(
    booking_id: int,
    request: UpdateBookingStatusRequest,
    db: AsyncSession = DatabaseSession,
    current_user: dict = AdminAuth
) -> JSONResponse:
    """Change a booking's status; entering Cancelled releases its slots."""
    try:
        booking = await BookingService(db).update_booking_status(booking_id, request.status)
        response_data = _convert_booking_to_schema(booking)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking status update",
            extra={
                "booking_id": booking_id,
                "status": request.status,
                "admin_user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/{booking_id}/cancel", response_model=MessageResponse)
async def cancel_booking(
    booking_id: int,
    db: AsyncSession = DatabaseSession,
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """Cancel one of the caller's bookings and release its slots."""
    try:
        cancelled = await BookingService(db).cancel_booking(booking_id, current_user["user_id"])
        if not cancelled:
            raise AlreadyCancelledError(booking_id)

        return JSONResponse(
            status_code=200,
            content=MessageResponse(message="Booking cancelled successfully").model_dump()
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking cancellation",
            extra={
                "booking_id": booking_id,
                "user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e
