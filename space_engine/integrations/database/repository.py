"""
SQLAlchemy-backed storage implementations.

Implements the ReservationStore and ListingStore protocols on the
relational database.
"""

import logging
import threading
from datetime import date
from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from space_engine.exceptions import (
    BookingNotFoundError,
    InvalidStatusTransitionError,
    ListingNotFoundError,
    ReservationConflictError,
)
from space_engine.integrations.base import (
    BookingRecord,
    ListingFilter,
    ListingRecord,
    ListingStore,
    ReservationStore,
    ReserveRequest,
)
from space_engine.integrations.database.adapter import DatabaseAdapter, MalformedRowError
from space_engine.models.bookings import Booking
from space_engine.models.enums import (
    ALLOWED_TRANSITIONS,
    BLOCKING_STATUSES,
    BookingStatus,
    ListingOrder,
    ListingStatus,
    PriceType,
)
from space_engine.models.listings import Listing

logger = logging.getLogger(__name__)

# PostgreSQL exclusion constraint created by the booking overlap migration
OVERLAP_CONSTRAINT_NAME = "no_booking_overlap"

_PRICE_COLUMNS = {
    PriceType.HOURLY: Listing.hourly_rate,
    PriceType.DAILY: Listing.daily_rate,
    PriceType.WEEKLY: Listing.weekly_rate,
}


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards in user text."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _is_overlap_violation(error: IntegrityError) -> bool:
    return OVERLAP_CONSTRAINT_NAME in str(error.orig)


def _listing_conditions(filters: ListingFilter):
    conditions = [Listing.status == ListingStatus.ACTIVE.value]

    price_column = _PRICE_COLUMNS[filters.price_type]
    if filters.min_price is not None:
        conditions.append(price_column >= filters.min_price)
    if filters.max_price is not None:
        conditions.append(price_column <= filters.max_price)

    if filters.min_space_sqm is not None:
        conditions.append(Listing.space_size_sqm >= filters.min_space_sqm)
    if filters.min_trucks is not None:
        conditions.append(Listing.max_trucks >= filters.min_trucks)

    if filters.text and filters.text.strip():
        pattern = f"%{_escape_like(filters.text.strip())}%"
        conditions.append(
            or_(
                Listing.city.ilike(pattern, escape="\\"),
                Listing.state.ilike(pattern, escape="\\"),
                Listing.address.ilike(pattern, escape="\\"),
            )
        )
    return and_(*conditions)


def _listing_order(filters: ListingFilter) -> list:
    # A missing rate ranks as 0, the same key the in-memory ranker uses
    if filters.order == ListingOrder.PRICE_LOW:
        rate = func.coalesce(_PRICE_COLUMNS[filters.price_type], 0)
        return [rate.asc(), Listing.created_at.desc()]
    if filters.order == ListingOrder.PRICE_HIGH:
        rate = func.coalesce(_PRICE_COLUMNS[filters.price_type], 0)
        return [rate.desc(), Listing.created_at.desc()]
    return [Listing.created_at.desc()]


class SQLAlchemyReservationStore(ReservationStore):
    """
    ReservationStore implementation on SQLAlchemy.

    Thread-safe; construct once per process and share. Each call opens
    its own short-lived session from the injected factory.

    The conflict re-check and the insert in reserve_if_free run in one
    transaction, under a store-wide lock and a row lock on the listing.
    On PostgreSQL the exclusion constraint is the final guard.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        """
        Initialize the store.

        Args:
            session_factory: Factory producing sessions bound to the database
        """
        self._session_factory = session_factory
        self._reserve_lock = threading.Lock()

    def list_bookings(
        self,
        listing_id: UUID,
        start_date: date,
        end_date: date,
        statuses: Iterable[BookingStatus] = BLOCKING_STATUSES,
        exclude_booking_id: Optional[UUID] = None,
    ) -> Sequence[BookingRecord]:
        conditions = [
            Booking.listing_id == listing_id,
            Booking.booking_date >= start_date,
            Booking.booking_date <= end_date,
            Booking.status.in_([BookingStatus(s).value for s in statuses]),
        ]
        if exclude_booking_id:
            conditions.append(Booking.id != exclude_booking_id)

        stmt = (
            select(Booking)
            .where(and_(*conditions))
            .order_by(Booking.booking_date, Booking.start_time)
        )

        with self._session_factory() as session:
            rows = session.scalars(stmt).all()
            return [DatabaseAdapter.to_booking_record(row) for row in rows]

    def reserve_if_free(self, request: ReserveRequest) -> BookingRecord:
        with self._reserve_lock:
            session = self._session_factory()
            try:
                listing = session.scalars(
                    select(Listing)
                    .where(Listing.id == request.listing_id)
                    .with_for_update()
                ).first()
                if listing is None or listing.status != ListingStatus.ACTIVE.value:
                    raise ListingNotFoundError(
                        f"Listing {request.listing_id} not found or not bookable"
                    )

                conflict = session.scalars(
                    select(Booking)
                    .where(
                        and_(
                            Booking.listing_id == request.listing_id,
                            Booking.booking_date == request.booking_date,
                            Booking.status.in_([s.value for s in BLOCKING_STATUSES]),
                            Booking.start_time < request.end_time,
                            Booking.end_time > request.start_time,
                        )
                    )
                    .limit(1)
                ).first()

                if conflict is not None:
                    logger.info(
                        f"Refused booking on listing {request.listing_id} "
                        f"{request.booking_date} {request.start_time}-{request.end_time}: "
                        f"overlaps booking {conflict.id}"
                    )
                    raise ReservationConflictError(
                        "This time slot is no longer available",
                        conflicting_booking_id=str(conflict.id),
                    )

                booking = Booking(
                    listing_id=request.listing_id,
                    vendor_id=request.vendor_id,
                    booking_date=request.booking_date,
                    start_time=request.start_time,
                    end_time=request.end_time,
                    total_hours=request.total_hours,
                    total_cost=request.total_cost,
                    status=BookingStatus.PENDING.value,
                    vendor_notes=request.vendor_notes,
                )
                session.add(booking)
                session.flush()
                record = DatabaseAdapter.to_booking_record(booking)
                session.commit()
            except IntegrityError as e:
                session.rollback()
                if _is_overlap_violation(e):
                    raise ReservationConflictError(
                        "This time slot is no longer available",
                        original_error=e,
                    ) from e
                raise
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

        logger.info(
            f"Created pending booking {record.id} on listing {record.listing_id} "
            f"{record.booking_date} {record.start_time}-{record.end_time}"
        )
        return record

    def get_booking(self, booking_id: UUID) -> Optional[BookingRecord]:
        with self._session_factory() as session:
            row = session.get(Booking, booking_id)
            return DatabaseAdapter.to_booking_record(row) if row else None

    def update_status(
        self,
        booking_id: UUID,
        new_status: BookingStatus,
        venue_owner_notes: Optional[str] = None,
        cancellation_reason: Optional[str] = None,
    ) -> BookingRecord:
        with self._session_factory() as session:
            row = session.scalars(
                select(Booking).where(Booking.id == booking_id).with_for_update()
            ).first()
            if row is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found")

            current = BookingStatus(row.status)
            if new_status not in ALLOWED_TRANSITIONS[current]:
                raise InvalidStatusTransitionError(
                    f"Cannot move booking {booking_id} from {current.value} to {new_status.value}"
                )

            row.status = new_status.value
            if venue_owner_notes is not None:
                row.venue_owner_notes = venue_owner_notes
            if cancellation_reason is not None:
                row.cancellation_reason = cancellation_reason
            session.flush()
            record = DatabaseAdapter.to_booking_record(row)
            session.commit()

        logger.info(f"Booking {booking_id} moved from {current.value} to {new_status.value}")
        return record

    def list_owner_bookings(
        self,
        owner_id: UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[BookingRecord]:
        conditions = [Listing.owner_id == owner_id]
        if start_date:
            conditions.append(Booking.booking_date >= start_date)
        if end_date:
            conditions.append(Booking.booking_date <= end_date)

        stmt = (
            select(Booking)
            .join(Listing, Booking.listing_id == Listing.id)
            .where(and_(*conditions))
            .order_by(Booking.booking_date.desc(), Booking.start_time)
        )

        with self._session_factory() as session:
            return [DatabaseAdapter.to_booking_record(row) for row in session.scalars(stmt).all()]


class SQLAlchemyListingStore(ListingStore):
    """ListingStore implementation on SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def get_listing(self, listing_id: UUID) -> Optional[ListingRecord]:
        stmt = (
            select(Listing)
            .where(Listing.id == listing_id)
            .options(selectinload(Listing.amenities))
        )
        with self._session_factory() as session:
            row = session.scalars(stmt).first()
            if row is None:
                return None
            try:
                return DatabaseAdapter.to_listing_record(row)
            except MalformedRowError as e:
                logger.warning(f"Skipping malformed listing row: {e}")
                return None

    def list_listings(self, filters: ListingFilter) -> Sequence[ListingRecord]:
        stmt = (
            select(Listing)
            .where(_listing_conditions(filters))
            .options(selectinload(Listing.amenities))
            .order_by(*_listing_order(filters))
            .limit(filters.limit)
        )

        records = []
        with self._session_factory() as session:
            for row in session.scalars(stmt).all():
                try:
                    records.append(DatabaseAdapter.to_listing_record(row))
                except MalformedRowError as e:
                    logger.warning(f"Skipping malformed listing row: {e}")
        return records

    def count_listings(self, filters: ListingFilter) -> int:
        stmt = select(func.count()).select_from(Listing).where(_listing_conditions(filters))
        with self._session_factory() as session:
            return session.scalar(stmt) or 0
