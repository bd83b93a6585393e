"""
Booking model.

Entities:
- Booking: A vendor's reservation of a listing for a half-open time
  interval [start_time, end_time) on a single date
"""

import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from space_engine.models.base import Entity, utcnow
from space_engine.models.enums import BookingStatus

if TYPE_CHECKING:
    from space_engine.models.listings import Listing


class Booking(Entity):
    """
    A reservation of a listing.

    Key features:
    - Single-date, half-open interval; abutting bookings do not conflict
    - Status workflow (pending, confirmed, cancelled, completed)
    - Only pending and confirmed bookings block availability
    - Cost is fixed at creation time
    """

    __tablename__ = "bookings"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("listings.id"),
        nullable=False,
        doc="Listing being reserved"
    )

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
        doc="Vendor who made the reservation (user id in the identity service)"
    )

    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    total_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING.value,
        doc="Booking status: 'pending', 'confirmed', 'cancelled', 'completed'"
    )

    vendor_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    venue_owner_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        onupdate=utcnow,
        nullable=True,
        doc="Last status change"
    )

    listing: Mapped["Listing"] = relationship("Listing", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_booking_interval"),
        Index("idx_booking_vendor", "vendor_id"),
        Index("idx_booking_status", "status"),
        # Composite index for availability queries
        Index("idx_booking_listing_date", "listing_id", "booking_date", "start_time", "end_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(listing_id={self.listing_id}, date={self.booking_date}, "
            f"{self.start_time}-{self.end_time}, status='{self.status}')>"
        )
