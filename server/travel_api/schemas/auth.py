"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, Field

from .user import EMAIL_PATTERN, User


class LoginRequest(BaseModel):
    """Request schema for exchanging credentials for a bearer token."""

    email: str = Field(..., max_length=100, pattern=EMAIL_PATTERN, description="Login email")
    password: str = Field(..., min_length=1, max_length=128, description="Plain-text password")


class RegisterRequest(BaseModel):
    """Request schema for customer self-registration."""

    email: str = Field(..., max_length=100, pattern=EMAIL_PATTERN, description="Login email")
    first_name: str = Field(..., min_length=1, max_length=50, description="First name")
    last_name: str = Field(..., min_length=1, max_length=50, description="Last name")
    password: str = Field(..., min_length=6, max_length=128, description="Plain-text password")
    confirm_password: str = Field(..., min_length=6, max_length=128, description="Password confirmation")


class AuthResponse(BaseModel):
    """Bearer token plus the authenticated user."""

    token: str = Field(..., description="Signed bearer token")
    token_type: str = Field("bearer", description="Token scheme")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: User = Field(..., description="Authenticated user")
