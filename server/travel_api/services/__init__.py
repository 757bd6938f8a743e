"""Service layer package."""

from .auth_service import AuthService
from .booking_service import BookingService
from .package_service import PackageService
from .user_service import UserService

__all__ = [
    "AuthService",
    "BookingService",
    "PackageService",
    "UserService",
]
