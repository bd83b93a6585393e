"""
Pytest configuration and fixtures for Space Engine tests.

Provides an in-memory database, stores wired to it, and factories for
listings and bookings.
"""

import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Generator, Optional

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from space_engine.database import create_db_engine, create_session_factory, init_db
from space_engine.integrations.base import AmenitySet, Coordinates, ListingRecord
from space_engine.integrations.database import (
    SQLAlchemyListingStore,
    SQLAlchemyReservationStore,
)
from space_engine.models.bookings import Booking
from space_engine.models.enums import BookingStatus, ListingStatus
from space_engine.models.listings import Amenities, Listing

BOOKING_DATE = date(2026, 6, 13)

LONDON = Coordinates(51.5074, -0.1278)
MANCHESTER = Coordinates(53.4808, -2.2426)


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """
    Create a clean in-memory database for each test.

    Tables are created from the models and the engine is disposed after
    the test, so no state leaks between tests.
    """
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Session for arranging test data directly."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def reservation_store(session_factory) -> SQLAlchemyReservationStore:
    return SQLAlchemyReservationStore(session_factory)


@pytest.fixture
def listing_store(session_factory) -> SQLAlchemyListingStore:
    return SQLAlchemyListingStore(session_factory)


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def vendor_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def listing_factory(db_session: Session, owner_id: uuid.UUID):
    """
    Factory for persisted listings.

    Defaults describe an active London pitch at 10/hour, 60/day, open
    06:00-22:00. Pass ``amenities`` as a dict of Amenities columns to
    attach an amenities row.

    Returns:
        Callable returning the persisted Listing
    """
    counter = {"n": 0}

    def _create(amenities: Optional[dict] = None, **overrides) -> Listing:
        counter["n"] += 1
        values = {
            "owner_id": owner_id,
            "title": f"Pitch {counter['n']}",
            "description": "Hard standing pitch",
            "address": "1 Market Street",
            "city": "London",
            "state": "Greater London",
            "postal_code": "E1 6AN",
            "latitude": LONDON.lat,
            "longitude": LONDON.lng,
            "hourly_rate": Decimal("10.00"),
            "daily_rate": Decimal("60.00"),
            "min_booking_hours": 1,
            "opening_time": time(6, 0),
            "closing_time": time(22, 0),
            "max_trucks": 1,
            "status": ListingStatus.ACTIVE.value,
            "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(days=counter["n"]),
        }
        values.update(overrides)

        listing = Listing(**values)
        if amenities is not None:
            listing.amenities = Amenities(**amenities)
        db_session.add(listing)
        db_session.commit()
        return listing

    return _create


@pytest.fixture
def sample_listing(listing_factory) -> Listing:
    """An active London pitch with 240v electricity and running water."""
    return listing_factory(
        title="Spitalfields Yard",
        amenities={"electricity_type": "240v", "running_water": True},
    )


@pytest.fixture
def booking_factory(db_session: Session, vendor_id: uuid.UUID):
    """
    Factory for persisted bookings, bypassing the reservation checks.

    Returns:
        Callable returning the persisted Booking
    """

    def _create(
        listing: Listing,
        start: time,
        end: time,
        status: BookingStatus = BookingStatus.CONFIRMED,
        booking_date: date = BOOKING_DATE,
        total_cost: Decimal = Decimal("10.00"),
    ) -> Booking:
        booking = Booking(
            listing_id=listing.id,
            vendor_id=vendor_id,
            booking_date=booking_date,
            start_time=start,
            end_time=end,
            total_hours=Decimal("1.00"),
            total_cost=total_cost,
            status=status.value,
        )
        db_session.add(booking)
        db_session.commit()
        return booking

    return _create


def make_listing_record(**overrides) -> ListingRecord:
    """Build a ListingRecord without touching the database."""
    values = {
        "id": uuid.uuid4(),
        "title": "Pitch",
        "hourly_rate": Decimal("10.00"),
        "daily_rate": Decimal("60.00"),
        "opening_time": time(6, 0),
        "closing_time": time(22, 0),
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "coordinates": LONDON,
        "amenities": AmenitySet(),
        "city": "London",
    }
    values.update(overrides)
    return ListingRecord(**values)


@pytest.fixture
def listing_record():
    """Factory for in-memory ListingRecords."""
    return make_listing_record
