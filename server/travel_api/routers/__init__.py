"""FastAPI routers package."""

from .auth import router as auth_router
from .bookings import router as bookings_router
from .health import router as health_router
from .metrics import router as metrics_router
from .packages import router as packages_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "bookings_router",
    "health_router",
    "metrics_router",
    "packages_router",
    "users_router",
]
