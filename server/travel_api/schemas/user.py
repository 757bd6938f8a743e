"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from ..models.user import UserRole

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class User(BaseModel):
    """User response schema."""

    id: int = Field(..., description="Unique user ID")
    email: str = Field(..., description="Login email")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    role: UserRole = Field(..., description="User role")
    is_active: bool = Field(..., description="Whether the account can log in")
    created_at: datetime = Field(..., description="Account creation time (ISO 8601)")

    model_config = {"from_attributes": True}


class CreateUserRequest(BaseModel):
    """Request schema for an administrator creating a user."""

    email: str = Field(..., max_length=100, pattern=EMAIL_PATTERN, description="Login email")
    first_name: str = Field(..., min_length=1, max_length=50, description="First name")
    last_name: str = Field(..., min_length=1, max_length=50, description="Last name")
    password: str = Field(..., min_length=6, max_length=128, description="Plain-text password")
    role: UserRole = Field(UserRole.CUSTOMER, description="User role")


class UpdateUserRequest(BaseModel):
    """Request schema for updating a user; omitted fields are left unchanged."""

    first_name: str | None = Field(None, min_length=1, max_length=50, description="First name")
    last_name: str | None = Field(None, min_length=1, max_length=50, description="Last name")
    role: UserRole | None = Field(None, description="User role (administrators only)")
    is_active: bool | None = Field(None, description="Account enabled flag (administrators only)")
