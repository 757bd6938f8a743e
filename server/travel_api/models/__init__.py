"""Models module exporting all database models."""

from .booking import Booking, BookingStatus
from .package import TravelPackage
from .user import User, UserRole

__all__ = [
    # Reference data
    "User",
    "UserRole",

    # Inventory
    "TravelPackage",

    # Reservations
    "Booking",
    "BookingStatus",
]
