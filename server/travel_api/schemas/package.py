"""Travel package Pydantic schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class CreatePackageRequest(BaseModel):
    """Request schema for creating a travel package."""

    title: str = Field(..., min_length=1, max_length=200, description="Package title")
    description: str = Field(..., min_length=1, max_length=4000, description="Package description")
    destination: str = Field(..., min_length=1, max_length=100, description="Destination")
    price: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2, description="Price per traveler")
    duration: int = Field(..., ge=1, le=365, description="Duration in days")
    start_date: datetime = Field(..., description="Start date (ISO 8601)")
    end_date: datetime = Field(..., description="End date (ISO 8601)")
    max_capacity: int = Field(..., ge=1, le=10000, description="Total capacity")
    image_url: str | None = Field(None, max_length=500, description="Image URL")

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class UpdatePackageRequest(CreatePackageRequest):
    """Request schema for replacing a travel package's editable fields."""

    is_active: bool | None = Field(
        None, description="Whether the package can be booked; the stored value is kept when omitted"
    )


class TravelPackage(BaseModel):
    """Travel package response schema."""

    id: int = Field(..., description="Unique package ID")
    title: str = Field(..., description="Package title")
    description: str = Field(..., description="Package description")
    destination: str = Field(..., description="Destination")
    price: Decimal = Field(..., description="Price per traveler")
    duration: int = Field(..., description="Duration in days")
    start_date: datetime = Field(..., description="Start date (ISO 8601)")
    end_date: datetime = Field(..., description="End date (ISO 8601)")
    max_capacity: int = Field(..., ge=1, description="Total capacity")
    available_slots: int = Field(..., ge=0, description="Remaining bookable slots")
    image_url: str | None = Field(None, description="Image URL")
    is_active: bool = Field(..., description="Whether the package can be booked")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")

    model_config = {"from_attributes": True}


class SearchPackagesParams(BaseModel):
    """Query parameters for package search."""

    destination: str | None = Field(None, max_length=100, description="Destination substring")
    min_price: Decimal | None = Field(None, ge=0, description="Minimum price")
    max_price: Decimal | None = Field(None, ge=0, description="Maximum price")
