"""
Listing availability service.

Provides functions for:
- Validating a requested interval against a listing's booking rules
- Checking whether an interval is free of blocking bookings
- Enumerating candidate slots across a listing's operating window

All intervals are half-open, [start, end): a booking ending at 12:00 and
another starting at 12:00 do not conflict.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional, Sequence, Union
from uuid import UUID

from space_engine.exceptions import ReservationValidationError
from space_engine.integrations.base import BookingRecord, ListingRecord, ReservationStore

logger = logging.getLogger(__name__)

# Upper bound applied when a listing leaves max_booking_hours unset
DEFAULT_MAX_BOOKING_HOURS = 16

_SECONDS_PER_HOUR = Decimal(3600)

Hours = Union[int, float, Decimal]


@dataclass
class CandidateSlot:
    """A fixed-width slot on the enumeration grid. Derived, never stored."""

    start: time
    end: time
    available: bool


def intervals_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """
    Check whether two half-open intervals overlap.

    Abutting intervals (a_end == b_start) do not overlap.
    """
    return a_start < b_end and a_end > b_start


def hours_between(start: time, end: time) -> Decimal:
    """
    Length of [start, end) in hours.

    Returns:
        Exact Decimal hours (may be negative if end precedes start)
    """
    delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    return Decimal(int(delta.total_seconds())) / _SECONDS_PER_HOUR


def validate_interval(start: time, end: time) -> None:
    """
    Raises:
        ReservationValidationError: If end is not after start
    """
    if end <= start:
        raise ReservationValidationError(
            f"End time {end.isoformat('minutes')} must be after start time {start.isoformat('minutes')}"
        )


def validate_booking_interval(listing: ListingRecord, start: time, end: time) -> Decimal:
    """
    Validate an interval against the listing's booking rules.

    Checks:
    - end after start
    - inside the operating window
    - duration within [min_booking_hours, max_booking_hours]

    Returns:
        Duration in hours

    Raises:
        ReservationValidationError: If any rule fails
    """
    validate_interval(start, end)

    if start < listing.opening_time or end > listing.closing_time:
        raise ReservationValidationError(
            f"Bookings must fall between {listing.opening_time.isoformat('minutes')} "
            f"and {listing.closing_time.isoformat('minutes')}"
        )

    hours = hours_between(start, end)
    max_hours = listing.max_booking_hours or DEFAULT_MAX_BOOKING_HOURS
    if hours < listing.min_booking_hours or hours > max_hours:
        raise ReservationValidationError(
            f"Booking must be {listing.min_booking_hours}-{max_hours} hours "
            f"(requested: {float(hours):g}h)"
        )
    return hours


def is_interval_free(
    bookings: Sequence[BookingRecord],
    start: time,
    end: time,
) -> bool:
    """Check an interval against an already-fetched booking list."""
    return not any(
        booking.blocks_availability
        and intervals_overlap(booking.start_time, booking.end_time, start, end)
        for booking in bookings
    )


def check_availability(
    store: ReservationStore,
    listing_id: UUID,
    booking_date: date,
    start: time,
    end: time,
    exclude_booking_id: Optional[UUID] = None,
) -> bool:
    """
    Check if a listing is free for an interval on a date.

    Args:
        store: Booking storage
        listing_id: Listing to check
        booking_date: Date of the interval
        start: Requested start time
        end: Requested end time (exclusive)
        exclude_booking_id: Booking to ignore (for edits)

    Returns:
        True if no pending or confirmed booking overlaps the interval

    Raises:
        ReservationValidationError: If end is not after start
    """
    validate_interval(start, end)

    bookings = store.list_bookings(
        listing_id,
        booking_date,
        booking_date,
        exclude_booking_id=exclude_booking_id,
    )
    return is_interval_free(bookings, start, end)


def enumerate_slots(
    store: ReservationStore,
    listing: ListingRecord,
    booking_date: date,
    duration_hours: Hours = 1,
    step_hours: Hours = 1,
) -> list[CandidateSlot]:
    """
    Build the slot grid for a listing on a date.

    Slots start at opening time and advance by ``step_hours``; each slot is
    ``duration_hours`` wide and ends no later than closing time. Bookings
    are fetched once and every slot is checked locally.

    Args:
        store: Booking storage
        listing: Listing whose operating window defines the grid
        booking_date: Date to enumerate
        duration_hours: Width of each slot
        step_hours: Distance between consecutive slot starts

    Returns:
        Every slot on the grid, each flagged available or not

    Raises:
        ReservationValidationError: If duration or step is not positive
    """
    if duration_hours <= 0 or step_hours <= 0:
        raise ReservationValidationError("Slot duration and step must be positive")

    width = timedelta(hours=float(duration_hours))
    step = timedelta(hours=float(step_hours))

    day_start = datetime.combine(booking_date, listing.opening_time)
    day_end = datetime.combine(booking_date, listing.closing_time)

    bookings = store.list_bookings(listing.id, booking_date, booking_date)

    slots = []
    current = day_start
    while current + width <= day_end:
        slot_end = current + width
        slots.append(
            CandidateSlot(
                start=current.time(),
                end=slot_end.time(),
                available=is_interval_free(bookings, current.time(), slot_end.time()),
            )
        )
        current += step

    logger.debug(
        f"Enumerated {len(slots)} slots for listing {listing.id} on {booking_date} "
        f"against {len(bookings)} bookings"
    )
    return slots
