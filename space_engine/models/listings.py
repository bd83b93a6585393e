"""
Listing and Amenities models.

Entities:
- Listing: A bookable space (pitch, car park, yard) offered by a venue owner
- Amenities: Facilities available at a listing (one row per listing)
"""

import uuid
from datetime import time
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from space_engine.models.base import Entity
from space_engine.models.enums import ElectricityType, ListingStatus

if TYPE_CHECKING:
    from space_engine.models.bookings import Booking


class Listing(Entity):
    """
    A space that vendors can reserve by the hour or day.

    Key features:
    - Rate table: hourly, daily and an optional weekly rate
    - Booking bounds: minimum and maximum booking length in hours
    - Operating window: the daily hours inside which bookings may fall
    - Coordinates for radius search (nullable; rows without them are
      skipped by geo search)
    """

    __tablename__ = "listings"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
        doc="Venue owner (user id in the identity service)"
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Address
    address: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    city: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    state: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="UK")

    latitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        doc="WGS84 latitude in degrees"
    )
    longitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        doc="WGS84 longitude in degrees"
    )

    # Rates
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    daily_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    weekly_rate: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        doc="Stored and searchable; not used by the pricing rule"
    )

    # Booking bounds
    min_booking_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_booking_hours: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        doc="NULL means the platform default maximum"
    )

    # Operating window
    opening_time: Mapped[time] = mapped_column(Time, nullable=False, default=time(6, 0))
    closing_time: Mapped[time] = mapped_column(Time, nullable=False, default=time(22, 0))

    # Capacity
    space_size_sqm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_trucks: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ListingStatus.ACTIVE.value,
        doc="Listing status: 'active', 'inactive', 'suspended'"
    )

    # Relationships
    amenities: Mapped[Optional["Amenities"]] = relationship(
        "Amenities",
        back_populates="listing",
        uselist=False,
        cascade="all, delete-orphan",
    )

    bookings: Mapped[list["Booking"]] = relationship(
        "Booking",
        back_populates="listing",
    )

    __table_args__ = (
        CheckConstraint("closing_time > opening_time", name="ck_listing_operating_window"),
        CheckConstraint("min_booking_hours >= 1", name="ck_listing_min_hours"),
        Index("idx_listing_status", "status"),
        Index("idx_listing_owner", "owner_id"),
        Index("idx_listing_city", "city"),
        Index("idx_listing_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Listing(title='{self.title}', city='{self.city}', status='{self.status}')>"


class Amenities(Entity):
    """Facilities offered at a listing."""

    __tablename__ = "amenities"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    running_water: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    electricity_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=ElectricityType.NONE.value,
        doc="Electricity supply: 'none', '240v', '110v', 'other'"
    )
    gas_supply: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    shelter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    toilet_facilities: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    wifi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    customer_seating: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    waste_disposal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    overnight_parking: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    security_cctv: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    loading_dock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    refrigeration_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    listing: Mapped["Listing"] = relationship("Listing", back_populates="amenities")

    def __repr__(self) -> str:
        return f"<Amenities(listing_id={self.listing_id}, electricity='{self.electricity_type}')>"
