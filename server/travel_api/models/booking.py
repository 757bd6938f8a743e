"""Booking model definition."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .package import TravelPackage
    from .user import User


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class Booking(Base):
    """Booking entity representing a reservation of slots on a travel package."""

    __tablename__ = "bookings"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys; bookings are never deleted so both sides restrict deletes
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    travel_package_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("travel_packages.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Booking details
    booking_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    number_of_travelers: Mapped[int] = mapped_column(Integer, nullable=False)
    # Frozen at creation; never recomputed from the package price
    total_price: Mapped[Decimal] = mapped_column(Numeric(18, 2, asdecimal=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING.value,
        index=True
    )
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("number_of_travelers > 0", name="ck_booking_travelers_positive"),
        CheckConstraint("total_price >= 0", name="ck_booking_total_price_non_negative"),
        CheckConstraint(
            "status IN ('Pending', 'Confirmed', 'Cancelled')",
            name="ck_booking_status_valid"
        ),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="bookings")
    package: Mapped["TravelPackage"] = relationship("TravelPackage", back_populates="bookings")

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, user_id={self.user_id}, package_id={self.travel_package_id}, "
            f"travelers={self.number_of_travelers}, status={self.status})>"
        )
