"""
Storage and geocoding protocols and base types.

Defines the interfaces the engine consumes (booking storage, listing
storage, geocoding) and the normalized records they exchange.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence
from uuid import UUID

from space_engine.models.enums import (
    BLOCKING_STATUSES,
    BookingStatus,
    ElectricityType,
    ListingStatus,
    ListingOrder,
    PriceType,
)


@dataclass(frozen=True)
class Coordinates:
    """A WGS84 point in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True)
class AmenitySet:
    """Facilities at a listing, mapped from the amenities row."""

    electricity_type: ElectricityType = ElectricityType.NONE
    running_water: bool = False
    gas_supply: bool = False
    shelter: bool = False
    toilet_facilities: bool = False
    wifi: bool = False
    customer_seating: bool = False
    waste_disposal: bool = False
    overnight_parking: bool = False
    security_cctv: bool = False
    loading_dock: bool = False
    refrigeration_access: bool = False


@dataclass(frozen=True)
class ListingRecord:
    """
    Normalized listing representation.

    This is the common format used by the service layer, mapped from
    storage rows by adapters.
    """

    id: UUID
    title: str
    hourly_rate: Decimal
    daily_rate: Decimal
    opening_time: time
    closing_time: time
    created_at: datetime
    owner_id: Optional[UUID] = None
    weekly_rate: Optional[Decimal] = None
    min_booking_hours: int = 1
    max_booking_hours: Optional[int] = None
    coordinates: Optional[Coordinates] = None
    amenities: Optional[AmenitySet] = None
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    space_size_sqm: Optional[int] = None
    max_trucks: int = 1
    status: ListingStatus = ListingStatus.ACTIVE

    @property
    def is_bookable(self) -> bool:
        """Only active listings accept bookings."""
        return self.status == ListingStatus.ACTIVE


@dataclass(frozen=True)
class BookingRecord:
    """Normalized booking representation."""

    id: UUID
    listing_id: UUID
    vendor_id: UUID
    booking_date: date
    start_time: time
    end_time: time
    status: BookingStatus
    total_hours: Decimal
    total_cost: Decimal
    vendor_notes: Optional[str] = None
    venue_owner_notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def blocks_availability(self) -> bool:
        return self.status in BLOCKING_STATUSES


@dataclass(frozen=True)
class ReserveRequest:
    """
    Request to reserve a listing interval.

    Used as input to ReservationStore.reserve_if_free().
    """

    listing_id: UUID
    vendor_id: UUID
    booking_date: date
    start_time: time
    end_time: time
    total_hours: Decimal
    total_cost: Decimal
    vendor_notes: Optional[str] = None


@dataclass(frozen=True)
class ListingFilter:
    """
    Predicate pushed down to listing storage.

    Only active listings are ever returned. Price bounds and price
    orders apply to the rate column selected by ``price_type``.
    """

    text: Optional[str] = None
    price_type: PriceType = PriceType.HOURLY
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_space_sqm: Optional[int] = None
    min_trucks: Optional[int] = None
    order: ListingOrder = ListingOrder.NEWEST
    limit: int = 20


@dataclass(frozen=True)
class GeocodingResult:
    """Best match returned by an external geocoder."""

    coordinates: Coordinates
    formatted_address: str
    place_name: str
    country: str = "UK"
    raw: dict = field(default_factory=dict, compare=False)


class ReservationStore(Protocol):
    """
    Protocol for booking storage backends.

    Implementations:
    - SQLAlchemyReservationStore: Uses the relational database
    """

    @abstractmethod
    def list_bookings(
        self,
        listing_id: UUID,
        start_date: date,
        end_date: date,
        statuses: Iterable[BookingStatus] = BLOCKING_STATUSES,
        exclude_booking_id: Optional[UUID] = None,
    ) -> Sequence[BookingRecord]:
        """
        Get bookings for a listing over an inclusive date range.

        Args:
            listing_id: Listing to query
            start_date: First date (inclusive)
            end_date: Last date (inclusive)
            statuses: Statuses to include (default: blocking statuses)
            exclude_booking_id: Booking to leave out (edit flows)

        Returns:
            Bookings ordered by date and start time
        """
        ...

    @abstractmethod
    def reserve_if_free(self, request: ReserveRequest) -> BookingRecord:
        """
        Atomically re-check for conflicts and insert a pending booking.

        The conflict check and the insert happen in one transaction.

        Returns:
            The created booking (status pending)

        Raises:
            ReservationConflictError: If the interval overlaps a blocking booking
            ListingNotFoundError: If the listing is missing or not active
        """
        ...

    @abstractmethod
    def get_booking(self, booking_id: UUID) -> Optional[BookingRecord]:
        """Get a booking by ID, or None."""
        ...

    @abstractmethod
    def update_status(
        self,
        booking_id: UUID,
        new_status: BookingStatus,
        venue_owner_notes: Optional[str] = None,
        cancellation_reason: Optional[str] = None,
    ) -> BookingRecord:
        """
        Apply an external-actor status transition.

        Raises:
            BookingNotFoundError: If the booking does not exist
            InvalidStatusTransitionError: If the transition is not allowed
        """
        ...

    @abstractmethod
    def list_owner_bookings(
        self,
        owner_id: UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[BookingRecord]:
        """Get every booking on listings owned by ``owner_id``."""
        ...


class ListingStore(Protocol):
    """Protocol for listing storage backends."""

    @abstractmethod
    def get_listing(self, listing_id: UUID) -> Optional[ListingRecord]:
        """Get a listing by ID, or None if missing or malformed."""
        ...

    @abstractmethod
    def list_listings(self, filters: ListingFilter) -> Sequence[ListingRecord]:
        """
        Get active listings matching a filter, in the filter's order.

        Malformed rows are skipped with a warning.
        """
        ...

    @abstractmethod
    def count_listings(self, filters: ListingFilter) -> int:
        """Count active listings matching a filter, ignoring its limit."""
        ...


class Geocoder(Protocol):
    """Protocol for external geocoding services."""

    @abstractmethod
    async def geocode(self, text: str) -> Optional[GeocodingResult]:
        """
        Resolve free text to its single best coordinate.

        Returns:
            Result, or None when the service found nothing

        Raises:
            GeocoderTimeoutError: If the service did not answer in time
            LocationResolutionError: For any other service failure
        """
        ...
