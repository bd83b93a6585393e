"""
Booking service - availability, pricing and reservation for one listing.

Provides a single entry point for the operations a marketplace front end
needs around a listing: is an interval free, what slots are open, what
does an interval cost, and reserve it. Status transitions driven by the
venue owner or vendor are exposed here too.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Literal, Optional, Union
from uuid import UUID

from space_engine.exceptions import ListingNotFoundError
from space_engine.integrations.base import (
    BookingRecord,
    ListingRecord,
    ListingStore,
    ReservationStore,
    ReserveRequest,
)
from space_engine.models.enums import BookingStatus
from space_engine.services import availability, pricing
from space_engine.services.availability import CandidateSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    total_hours: Decimal
    total_cost: Decimal
    rate_applied: Literal["hourly", "daily"]


class BookingService:
    """
    Availability, pricing and reservation over injected stores.

    Stateless apart from its collaborators; safe to share across threads.
    """

    def __init__(
        self,
        reservation_store: ReservationStore,
        listing_store: ListingStore,
        daily_threshold_hours: Union[int, float, Decimal] = pricing.DAILY_RATE_THRESHOLD_HOURS,
    ):
        """
        Initialize the service.

        Args:
            reservation_store: Booking storage
            listing_store: Listing storage
            daily_threshold_hours: Length at which the daily rate applies
        """
        self._reservations = reservation_store
        self._listings = listing_store
        self._daily_threshold_hours = Decimal(str(daily_threshold_hours))

    def get_listing(self, listing_id: UUID) -> ListingRecord:
        """
        Raises:
            ListingNotFoundError: If the listing is unknown or unreadable
        """
        listing = self._listings.get_listing(listing_id)
        if listing is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")
        return listing

    def get_bookable_listing(self, listing_id: UUID) -> ListingRecord:
        listing = self.get_listing(listing_id)
        if not listing.is_bookable:
            raise ListingNotFoundError(f"Listing {listing_id} is not accepting bookings")
        return listing

    def check_availability(
        self,
        listing_id: UUID,
        booking_date: date,
        start: time,
        end: time,
        exclude_booking_id: Optional[UUID] = None,
    ) -> bool:
        """
        Check if an interval is free of pending and confirmed bookings.

        Raises:
            ListingNotFoundError: If the listing is unknown or not bookable
        """
        self.get_bookable_listing(listing_id)
        return availability.check_availability(
            self._reservations,
            listing_id,
            booking_date,
            start,
            end,
            exclude_booking_id=exclude_booking_id,
        )

    def enumerate_slots(
        self,
        listing_id: UUID,
        booking_date: date,
        duration_hours: Union[int, float, Decimal] = 1,
    ) -> list[CandidateSlot]:
        """List the slot grid for a date across the listing's operating window."""
        listing = self.get_listing(listing_id)
        return availability.enumerate_slots(
            self._reservations,
            listing,
            booking_date,
            duration_hours=duration_hours,
        )

    def calculate_price(self, listing_id: UUID, start: time, end: time) -> Decimal:
        """Price an interval on a listing, enforcing its booking rules."""
        listing = self.get_listing(listing_id)
        return pricing.calculate_booking_cost(
            listing,
            start,
            end,
            daily_threshold_hours=self._daily_threshold_hours,
        )

    def quote(self, listing_id: UUID, start: time, end: time) -> PriceQuote:
        """Price an interval and report which rate it was charged at."""
        listing = self.get_listing(listing_id)
        total_hours = availability.validate_booking_interval(listing, start, end)
        total_cost = pricing.calculate_price(
            listing.hourly_rate,
            listing.daily_rate,
            start,
            end,
            daily_threshold_hours=self._daily_threshold_hours,
        )
        return PriceQuote(
            total_hours=total_hours,
            total_cost=total_cost,
            rate_applied="daily" if total_hours >= self._daily_threshold_hours else "hourly",
        )

    def reserve(
        self,
        listing_id: UUID,
        booking_date: date,
        start: time,
        end: time,
        vendor_id: UUID,
        vendor_notes: Optional[str] = None,
    ) -> BookingRecord:
        """
        Reserve an interval as a pending booking.

        Validation and pricing happen before storage is touched. The
        conflict check is repeated inside the store's transaction, so a
        stale availability answer can never produce a double booking.

        Args:
            listing_id: Listing to book
            booking_date: Date of the booking
            start: Start time
            end: End time (exclusive)
            vendor_id: Vendor making the booking
            vendor_notes: Free-text notes from the vendor

        Returns:
            The created pending booking

        Raises:
            ListingNotFoundError: If the listing is unknown or not bookable
            ReservationValidationError: If the interval breaks the listing's rules
            ReservationConflictError: If the interval is already taken
        """
        listing = self.get_bookable_listing(listing_id)

        total_hours = availability.validate_booking_interval(listing, start, end)
        total_cost = pricing.calculate_price(
            listing.hourly_rate,
            listing.daily_rate,
            start,
            end,
            daily_threshold_hours=self._daily_threshold_hours,
        )

        request = ReserveRequest(
            listing_id=listing_id,
            vendor_id=vendor_id,
            booking_date=booking_date,
            start_time=start,
            end_time=end,
            total_hours=total_hours,
            total_cost=total_cost,
            vendor_notes=vendor_notes,
        )
        return self._reservations.reserve_if_free(request)

    def confirm(self, booking_id: UUID, venue_owner_notes: Optional[str] = None) -> BookingRecord:
        return self._reservations.update_status(
            booking_id,
            BookingStatus.CONFIRMED,
            venue_owner_notes=venue_owner_notes,
        )

    def cancel(self, booking_id: UUID, reason: Optional[str] = None) -> BookingRecord:
        return self._reservations.update_status(
            booking_id,
            BookingStatus.CANCELLED,
            cancellation_reason=reason,
        )

    def complete(self, booking_id: UUID) -> BookingRecord:
        return self._reservations.update_status(booking_id, BookingStatus.COMPLETED)
