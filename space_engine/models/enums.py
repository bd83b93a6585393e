"""
Enumerated values shared by the ORM models and the service layer.

Stored as plain strings in the database.
"""

from enum import Enum


class ListingStatus(str, Enum):
    """Listing lifecycle. Only active listings are searchable or bookable."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class BookingStatus(str, Enum):
    """Booking lifecycle."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Statuses that occupy the listing for their interval
BLOCKING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)

# Allowed external-actor transitions (owner approval, cancellation, completion)
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


class ElectricityType(str, Enum):
    """Electricity supply at a listing. A discriminated value, not a flag."""

    NONE = "none"
    V240 = "240v"
    V110 = "110v"
    OTHER = "other"


class PriceType(str, Enum):
    """Which rate column a price bound or price sort applies to."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


class ListingOrder(str, Enum):
    """Row order requested from listing storage."""

    NEWEST = "newest"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
