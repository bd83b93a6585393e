"""
External collaborators for Space Engine.

Provides the abstraction layer for booking/listing storage and geocoding.
"""

from space_engine.integrations.base import (
    AmenitySet,
    BookingRecord,
    Coordinates,
    Geocoder,
    GeocodingResult,
    ListingFilter,
    ListingRecord,
    ListingStore,
    ReservationStore,
    ReserveRequest,
)

__all__ = [
    "AmenitySet",
    "BookingRecord",
    "Coordinates",
    "Geocoder",
    "GeocodingResult",
    "ListingFilter",
    "ListingRecord",
    "ListingStore",
    "ReservationStore",
    "ReserveRequest",
]
