"""
Unit tests for the Booking model and status enums.
"""

import uuid
from datetime import date, time
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from space_engine.models.bookings import Booking
from space_engine.models.enums import ALLOWED_TRANSITIONS, BLOCKING_STATUSES, BookingStatus

BOOKING_DATE = date(2026, 6, 13)


class TestBookingModel:
    """Test Booking persistence and constraints."""

    def test_create_booking(self, db_session, sample_listing, vendor_id):
        booking = Booking(
            listing_id=sample_listing.id,
            vendor_id=vendor_id,
            booking_date=BOOKING_DATE,
            start_time=time(10, 0),
            end_time=time(12, 0),
            total_hours=Decimal("2"),
            total_cost=Decimal("20.00"),
        )
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)

        assert booking.id is not None
        assert booking.status == "pending"
        assert booking.total_cost == Decimal("20.00")
        assert booking.listing.id == sample_listing.id

    def test_end_must_follow_start(self, db_session, sample_listing, vendor_id):
        booking = Booking(
            listing_id=sample_listing.id,
            vendor_id=vendor_id,
            booking_date=BOOKING_DATE,
            start_time=time(12, 0),
            end_time=time(12, 0),
            total_hours=Decimal("0"),
            total_cost=Decimal("0"),
        )
        db_session.add(booking)

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_listing_must_exist(self, db_session, vendor_id):
        booking = Booking(
            listing_id=uuid.uuid4(),
            vendor_id=vendor_id,
            booking_date=BOOKING_DATE,
            start_time=time(10, 0),
            end_time=time(11, 0),
            total_hours=Decimal("1"),
            total_cost=Decimal("10"),
        )
        db_session.add(booking)

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_updated_at_set_on_status_change(self, db_session, sample_listing, booking_factory):
        booking = booking_factory(sample_listing, time(10), time(12), BookingStatus.PENDING)
        assert booking.updated_at is None

        booking.status = BookingStatus.CONFIRMED.value
        db_session.commit()
        db_session.refresh(booking)

        assert booking.updated_at is not None


class TestBookingStatuses:
    """Test the status workflow tables."""

    def test_only_pending_and_confirmed_block(self):
        assert BLOCKING_STATUSES == {BookingStatus.PENDING, BookingStatus.CONFIRMED}

    def test_terminal_statuses_have_no_transitions(self):
        assert ALLOWED_TRANSITIONS[BookingStatus.CANCELLED] == frozenset()
        assert ALLOWED_TRANSITIONS[BookingStatus.COMPLETED] == frozenset()

    def test_pending_cannot_complete_directly(self):
        assert BookingStatus.COMPLETED not in ALLOWED_TRANSITIONS[BookingStatus.PENDING]
