"""Booking-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from ..models.booking import BookingStatus


class CreateBookingRequest(BaseModel):
    """Request schema for creating a booking."""

    travel_package_id: int = Field(..., ge=1, description="Package to book")
    number_of_travelers: int = Field(..., ge=1, le=100, description="Number of travelers")
    special_requests: str | None = Field(None, max_length=1000, description="Free-text special request")


class UpdateBookingStatusRequest(BaseModel):
    """
    Request schema for an administrative status change.

    The status is accepted as free text so unknown values reach the
    transition gate and are rejected there as an invalid status.
    """

    status: str = Field(..., description="Target status")


class Booking(BaseModel):
    """Booking response schema, denormalized with user and package names."""

    id: int = Field(..., description="Unique booking ID")
    user_id: int = Field(..., description="Owning user ID")
    user_name: str = Field(..., description="Owning user display name")
    travel_package_id: int = Field(..., description="Booked package ID")
    package_title: str = Field(..., description="Booked package title")
    booking_date: datetime = Field(..., description="Booking time (ISO 8601)")
    number_of_travelers: int = Field(..., ge=1, description="Number of travelers")
    total_price: Decimal = Field(..., description="Price frozen at booking time")
    status: BookingStatus = Field(..., description="Booking status")
    special_requests: str | None = Field(None, description="Free-text special request")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")
