"""Travel package (inventory record) model definition."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import Booking


class TravelPackage(Base):
    """Purchasable travel offering with a fixed date range, price and capacity."""

    __tablename__ = "travel_packages"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Offering details
    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2, asdecimal=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # days
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    # Inventory counters; available_slots is only moved by the booking service
    # and by capacity edits that re-derive it from max_capacity
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    available_slots: Mapped[int] = mapped_column(Integer, nullable=False)

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
        CheckConstraint("max_capacity > 0", name="ck_package_max_capacity_positive"),
        CheckConstraint("available_slots >= 0", name="ck_package_available_slots_non_negative"),
        CheckConstraint("available_slots <= max_capacity", name="ck_package_available_lte_capacity"),
        CheckConstraint("price >= 0", name="ck_package_price_non_negative"),
        CheckConstraint("duration > 0", name="ck_package_duration_positive"),
        CheckConstraint("end_date >= start_date", name="ck_package_dates_ordered"),
    )

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="package")

    @property
    def booked_slots(self) -> int:
        return self.max_capacity - self.available_slots

    def __repr__(self) -> str:
        return (
            f"<TravelPackage(id={self.id}, title='{self.title}', "
            f"slots={self.available_slots}/{self.max_capacity}, active={self.is_active})>"
        )
