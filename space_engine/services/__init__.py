"""
Service layer for Space Engine.

Provides business logic for:
- Availability checks and slot enumeration
- Booking price calculation
- Location resolution (gazetteer + geocoder) and distance filtering
- Listing search and ranking
- Reservation and owner booking statistics
"""

from space_engine.services.availability import (
    DEFAULT_MAX_BOOKING_HOURS,
    CandidateSlot,
    check_availability,
    enumerate_slots,
    hours_between,
    intervals_overlap,
    is_interval_free,
    validate_booking_interval,
    validate_interval,
)

from space_engine.services.pricing import (
    DAILY_RATE_THRESHOLD_HOURS,
    calculate_booking_cost,
    calculate_price,
    round_currency,
)

from space_engine.services.amenities import (
    Amenity,
    offers,
    parse_amenities,
    satisfies_all,
)

from space_engine.services.gazetteer import (
    POPULAR_UK_CITIES,
    Gazetteer,
    GazetteerEntry,
)

from space_engine.services.geo import (
    EARTH_RADIUS_KM,
    DistanceMatch,
    calculate_distance,
    filter_by_distance,
)

from space_engine.services.location import (
    LocationResolver,
    ResolvedLocation,
)

from space_engine.services.search import (
    RankedPage,
    SearchHit,
    SearchQuery,
    SearchResults,
    SearchService,
    SortKey,
    rank_listings,
)

from space_engine.services.booking_service import BookingService, PriceQuote

from space_engine.services.stats import (
    BookingStats,
    get_booking_stats,
)

__all__ = [
    # Availability
    "DEFAULT_MAX_BOOKING_HOURS",
    "CandidateSlot",
    "check_availability",
    "enumerate_slots",
    "hours_between",
    "intervals_overlap",
    "is_interval_free",
    "validate_booking_interval",
    "validate_interval",
    # Pricing
    "DAILY_RATE_THRESHOLD_HOURS",
    "calculate_booking_cost",
    "calculate_price",
    "round_currency",
    # Amenities
    "Amenity",
    "offers",
    "parse_amenities",
    "satisfies_all",
    # Location
    "POPULAR_UK_CITIES",
    "Gazetteer",
    "GazetteerEntry",
    "EARTH_RADIUS_KM",
    "DistanceMatch",
    "calculate_distance",
    "filter_by_distance",
    "LocationResolver",
    "ResolvedLocation",
    # Search
    "RankedPage",
    "SearchHit",
    "SearchQuery",
    "SearchResults",
    "SearchService",
    "SortKey",
    "rank_listings",
    # Bookings
    "BookingService",
    "PriceQuote",
    "BookingStats",
    "get_booking_stats",
]
