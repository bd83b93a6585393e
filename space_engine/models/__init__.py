"""
SQLAlchemy models for Space Engine.

This module exports all database models for easy importing and
ensures Alembic can discover them for migrations.
"""

from space_engine.models.base import Base, Entity
from space_engine.models.enums import (
    ALLOWED_TRANSITIONS,
    BLOCKING_STATUSES,
    BookingStatus,
    ElectricityType,
    ListingStatus,
    PriceType,
)
from space_engine.models.listings import Listing, Amenities
from space_engine.models.bookings import Booking

__all__ = [
    # Base classes
    "Base",
    "Entity",
    # Enums
    "ALLOWED_TRANSITIONS",
    "BLOCKING_STATUSES",
    "BookingStatus",
    "ElectricityType",
    "ListingStatus",
    "PriceType",
    # Listing models
    "Listing",
    "Amenities",
    # Booking model
    "Booking",
]
