"""
Mapping between ORM rows and the normalized records used by services.

Handles:
- Coordinates (both-or-nothing; a half-set pair is treated as missing)
- Amenity rows to AmenitySet, including the electricity discriminator
- Status strings to enums
- Rate sanity (rows with a missing or negative rate are malformed)
"""

import logging
from decimal import Decimal
from typing import Optional

from space_engine.integrations.base import (
    AmenitySet,
    BookingRecord,
    Coordinates,
    ListingRecord,
)
from space_engine.models.bookings import Booking
from space_engine.models.enums import BookingStatus, ElectricityType, ListingStatus
from space_engine.models.listings import Amenities, Listing

logger = logging.getLogger(__name__)


class MalformedRowError(ValueError):
    """A storage row cannot be mapped to a record."""


class DatabaseAdapter:
    """Maps ORM rows to service-layer records."""

    @staticmethod
    def to_amenity_set(row: Optional[Amenities]) -> Optional[AmenitySet]:
        if row is None:
            return None

        try:
            electricity = ElectricityType(row.electricity_type)
        except ValueError:
            logger.warning(
                f"Amenities for listing {row.listing_id} have unknown electricity type "
                f"'{row.electricity_type}', treating as 'other'"
            )
            electricity = ElectricityType.OTHER

        return AmenitySet(
            electricity_type=electricity,
            running_water=bool(row.running_water),
            gas_supply=bool(row.gas_supply),
            shelter=bool(row.shelter),
            toilet_facilities=bool(row.toilet_facilities),
            wifi=bool(row.wifi),
            customer_seating=bool(row.customer_seating),
            waste_disposal=bool(row.waste_disposal),
            overnight_parking=bool(row.overnight_parking),
            security_cctv=bool(row.security_cctv),
            loading_dock=bool(row.loading_dock),
            refrigeration_access=bool(row.refrigeration_access),
        )

    @staticmethod
    def to_listing_record(row: Listing) -> ListingRecord:
        """
        Convert a Listing row to a ListingRecord.

        Raises:
            MalformedRowError: If rates or the status are unusable
        """
        if row.hourly_rate is None or row.daily_rate is None:
            raise MalformedRowError(f"Listing {row.id} is missing a rate")
        if row.hourly_rate < 0 or row.daily_rate < 0:
            raise MalformedRowError(f"Listing {row.id} has a negative rate")

        try:
            status = ListingStatus(row.status)
        except ValueError as e:
            raise MalformedRowError(f"Listing {row.id} has unknown status '{row.status}'") from e

        coordinates = None
        if row.latitude is not None and row.longitude is not None:
            coordinates = Coordinates(lat=float(row.latitude), lng=float(row.longitude))

        return ListingRecord(
            id=row.id,
            owner_id=row.owner_id,
            title=row.title,
            hourly_rate=Decimal(row.hourly_rate),
            daily_rate=Decimal(row.daily_rate),
            weekly_rate=Decimal(row.weekly_rate) if row.weekly_rate is not None else None,
            opening_time=row.opening_time,
            closing_time=row.closing_time,
            created_at=row.created_at,
            min_booking_hours=row.min_booking_hours,
            max_booking_hours=row.max_booking_hours,
            coordinates=coordinates,
            amenities=DatabaseAdapter.to_amenity_set(row.amenities),
            address=row.address or "",
            city=row.city or "",
            state=row.state or "",
            postal_code=row.postal_code or "",
            space_size_sqm=row.space_size_sqm,
            max_trucks=row.max_trucks,
            status=status,
        )

    @staticmethod
    def to_booking_record(row: Booking) -> BookingRecord:
        return BookingRecord(
            id=row.id,
            listing_id=row.listing_id,
            vendor_id=row.vendor_id,
            booking_date=row.booking_date,
            start_time=row.start_time,
            end_time=row.end_time,
            status=BookingStatus(row.status),
            total_hours=Decimal(row.total_hours),
            total_cost=Decimal(row.total_cost),
            vendor_notes=row.vendor_notes,
            venue_owner_notes=row.venue_owner_notes,
            cancellation_reason=row.cancellation_reason,
            created_at=row.created_at,
        )
