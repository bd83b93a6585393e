"""
Unit tests for the availability service.

Tests interval arithmetic, booking-rule validation, availability checks
against stored bookings and slot enumeration.
"""

import uuid
from datetime import date, time
from decimal import Decimal

import pytest

from space_engine.exceptions import ReservationValidationError
from space_engine.integrations.base import BookingRecord
from space_engine.models.enums import BookingStatus
from space_engine.services.availability import (
    DEFAULT_MAX_BOOKING_HOURS,
    check_availability,
    enumerate_slots,
    hours_between,
    intervals_overlap,
    is_interval_free,
    validate_booking_interval,
    validate_interval,
)

BOOKING_DATE = date(2026, 6, 13)


class CountingStore:
    """In-memory booking source that counts fetches."""

    def __init__(self, bookings=None):
        self.bookings = list(bookings or [])
        self.calls = 0

    def list_bookings(self, listing_id, start_date, end_date, statuses=None, exclude_booking_id=None):
        self.calls += 1
        return [
            b for b in self.bookings
            if b.listing_id == listing_id
            and start_date <= b.booking_date <= end_date
            and b.id != exclude_booking_id
        ]


def _booking(listing_id, start, end, status=BookingStatus.CONFIRMED) -> BookingRecord:
    return BookingRecord(
        id=uuid.uuid4(),
        listing_id=listing_id,
        vendor_id=uuid.uuid4(),
        booking_date=BOOKING_DATE,
        start_time=start,
        end_time=end,
        status=status,
        total_hours=Decimal("1"),
        total_cost=Decimal("10"),
    )


class TestIntervalsOverlap:
    """Test half-open interval overlap."""

    def test_overlapping(self):
        assert intervals_overlap(time(10), time(12), time(11), time(13)) is True

    def test_contained(self):
        assert intervals_overlap(time(9), time(17), time(12), time(13)) is True

    def test_abutting_does_not_overlap(self):
        assert intervals_overlap(time(10), time(12), time(12), time(14)) is False
        assert intervals_overlap(time(12), time(14), time(10), time(12)) is False

    def test_disjoint(self):
        assert intervals_overlap(time(8), time(9), time(15), time(16)) is False


class TestHoursBetween:

    def test_whole_hours(self):
        assert hours_between(time(9), time(17)) == Decimal(8)

    def test_half_hours(self):
        assert hours_between(time(9), time(16, 30)) == Decimal("7.5")


class TestValidateBookingInterval:
    """Test booking-rule validation."""

    def test_end_before_start(self):
        with pytest.raises(ReservationValidationError):
            validate_interval(time(12), time(10))

    def test_zero_length(self):
        with pytest.raises(ReservationValidationError):
            validate_interval(time(12), time(12))

    def test_valid_interval_returns_hours(self, listing_record):
        listing = listing_record()
        assert validate_booking_interval(listing, time(10), time(14)) == Decimal(4)

    def test_before_opening(self, listing_record):
        listing = listing_record(opening_time=time(8), closing_time=time(20))
        with pytest.raises(ReservationValidationError, match="between"):
            validate_booking_interval(listing, time(7), time(10))

    def test_after_closing(self, listing_record):
        listing = listing_record(opening_time=time(8), closing_time=time(20))
        with pytest.raises(ReservationValidationError):
            validate_booking_interval(listing, time(18), time(21))

    def test_below_minimum(self, listing_record):
        listing = listing_record(min_booking_hours=3)
        with pytest.raises(ReservationValidationError, match="3-"):
            validate_booking_interval(listing, time(10), time(12))

    def test_above_maximum(self, listing_record):
        listing = listing_record(max_booking_hours=4)
        with pytest.raises(ReservationValidationError, match="requested: 5h"):
            validate_booking_interval(listing, time(10), time(15))

    def test_default_maximum_when_unset(self, listing_record):
        listing = listing_record(opening_time=time(0), closing_time=time(23, 59))
        assert listing.max_booking_hours is None

        validate_booking_interval(listing, time(6), time(6 + DEFAULT_MAX_BOOKING_HOURS))
        with pytest.raises(ReservationValidationError):
            validate_booking_interval(listing, time(6), time(23))


class TestIsIntervalFree:

    def test_cancelled_and_completed_do_not_block(self):
        listing_id = uuid.uuid4()
        bookings = [
            _booking(listing_id, time(10), time(12), BookingStatus.CANCELLED),
            _booking(listing_id, time(10), time(12), BookingStatus.COMPLETED),
        ]
        assert is_interval_free(bookings, time(10), time(12)) is True

    def test_pending_blocks(self):
        listing_id = uuid.uuid4()
        bookings = [_booking(listing_id, time(10), time(12), BookingStatus.PENDING)]
        assert is_interval_free(bookings, time(11), time(12)) is False


class TestCheckAvailability:
    """Test availability against stored bookings."""

    def test_free_listing(self, reservation_store, sample_listing):
        assert check_availability(
            reservation_store, sample_listing.id, BOOKING_DATE, time(10), time(12)
        ) is True

    def test_overlap_with_confirmed(self, reservation_store, sample_listing, booking_factory):
        booking_factory(sample_listing, time(10), time(12))

        assert check_availability(
            reservation_store, sample_listing.id, BOOKING_DATE, time(11), time(13)
        ) is False

    def test_abutting_booking_is_free(self, reservation_store, sample_listing, booking_factory):
        booking_factory(sample_listing, time(10), time(12))

        assert check_availability(
            reservation_store, sample_listing.id, BOOKING_DATE, time(12), time(14)
        ) is True
        assert check_availability(
            reservation_store, sample_listing.id, BOOKING_DATE, time(8), time(10)
        ) is True

    def test_cancelled_booking_does_not_block(self, reservation_store, sample_listing, booking_factory):
        booking_factory(sample_listing, time(10), time(12), status=BookingStatus.CANCELLED)

        assert check_availability(
            reservation_store, sample_listing.id, BOOKING_DATE, time(10), time(12)
        ) is True

    def test_other_date_does_not_block(self, reservation_store, sample_listing, booking_factory):
        booking_factory(sample_listing, time(10), time(12), booking_date=date(2026, 6, 14))

        assert check_availability(
            reservation_store, sample_listing.id, BOOKING_DATE, time(10), time(12)
        ) is True

    def test_exclude_booking_id(self, reservation_store, sample_listing, booking_factory):
        existing = booking_factory(sample_listing, time(10), time(12))

        assert check_availability(
            reservation_store,
            sample_listing.id,
            BOOKING_DATE,
            time(10),
            time(13),
            exclude_booking_id=existing.id,
        ) is True

    def test_invalid_interval_raises(self, reservation_store, sample_listing):
        with pytest.raises(ReservationValidationError):
            check_availability(
                reservation_store, sample_listing.id, BOOKING_DATE, time(12), time(12)
            )


class TestEnumerateSlots:
    """Test slot grid enumeration."""

    def test_hourly_grid_covers_operating_window(self, listing_record):
        listing = listing_record()
        slots = enumerate_slots(CountingStore(), listing, BOOKING_DATE)

        assert len(slots) == 16
        assert slots[0].start == time(6)
        assert slots[-1].end == time(22)
        assert all(slot.available for slot in slots)

    def test_booked_slots_marked_unavailable(self, listing_record):
        listing = listing_record()
        store = CountingStore([_booking(listing.id, time(10), time(12))])

        slots = {slot.start: slot.available for slot in enumerate_slots(store, listing, BOOKING_DATE)}

        assert slots[time(9)] is True
        assert slots[time(10)] is False
        assert slots[time(11)] is False
        assert slots[time(12)] is True

    def test_bookings_fetched_once(self, listing_record):
        listing = listing_record()
        store = CountingStore([_booking(listing.id, time(10), time(12))])

        enumerate_slots(store, listing, BOOKING_DATE)

        assert store.calls == 1

    def test_wide_slots_end_by_closing(self, listing_record):
        listing = listing_record(opening_time=time(8), closing_time=time(18))
        slots = enumerate_slots(CountingStore(), listing, BOOKING_DATE, duration_hours=3)

        assert [(s.start, s.end) for s in slots][-1] == (time(15), time(18))
        assert len(slots) == 8

    def test_partial_overlap_blocks_wide_slot(self, listing_record):
        listing = listing_record(opening_time=time(8), closing_time=time(18))
        store = CountingStore([_booking(listing.id, time(12), time(13))])

        slots = enumerate_slots(store, listing, BOOKING_DATE, duration_hours=2)
        by_start = {slot.start: slot.available for slot in slots}

        assert by_start[time(10)] is True
        assert by_start[time(11)] is False
        assert by_start[time(12)] is False
        assert by_start[time(13)] is True

    def test_non_positive_duration_rejected(self, listing_record):
        with pytest.raises(ReservationValidationError):
            enumerate_slots(CountingStore(), listing_record(), BOOKING_DATE, duration_hours=0)
