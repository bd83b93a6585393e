"""
Pydantic request and response models for the Space Engine API.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from space_engine.integrations.base import BookingRecord
from space_engine.models.enums import BookingStatus
from space_engine.services.availability import CandidateSlot
from space_engine.services.search import SearchHit, SearchResults
from space_engine.services.stats import BookingStats


# =============================================================================
# Request Models
# =============================================================================


class CreateBookingRequest(BaseModel):
    """Request to reserve an interval on a listing."""

    vendor_id: UUID = Field(..., description="Vendor making the booking")
    booking_date: date = Field(..., description="Date of the booking")
    start_time: time = Field(..., description="Start time (inclusive)")
    end_time: time = Field(..., description="End time (exclusive)")
    vendor_notes: Optional[str] = Field(
        None,
        max_length=1000,
        description="Notes for the venue owner",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "vendor_id": "0b7c6a52-6a9d-4b43-9a0a-3f4d2f7f2b11",
                "booking_date": "2026-06-13",
                "start_time": "10:00",
                "end_time": "14:00",
                "vendor_notes": "Arriving with one van",
            }
        }
    )

    @model_validator(mode="after")
    def validate_interval_order(self) -> "CreateBookingRequest":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ConfirmBookingRequest(BaseModel):
    """Venue owner confirms a pending booking."""

    venue_owner_notes: Optional[str] = Field(None, max_length=1000)


class CancelBookingRequest(BaseModel):
    """Either party cancels a pending or confirmed booking."""

    reason: Optional[str] = Field(None, max_length=1000, description="Cancellation reason")

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


# =============================================================================
# Response Models
# =============================================================================


class BookingResponse(BaseModel):
    """A booking as stored."""

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

    @classmethod
    def from_record(cls, record: BookingRecord) -> "BookingResponse":
        return cls(
            id=record.id,
            listing_id=record.listing_id,
            vendor_id=record.vendor_id,
            booking_date=record.booking_date,
            start_time=record.start_time,
            end_time=record.end_time,
            status=record.status,
            total_hours=record.total_hours,
            total_cost=record.total_cost,
            vendor_notes=record.vendor_notes,
            venue_owner_notes=record.venue_owner_notes,
            cancellation_reason=record.cancellation_reason,
            created_at=record.created_at,
        )


class AvailabilityResponse(BaseModel):
    """Whether an interval is free."""

    listing_id: UUID
    booking_date: date
    start_time: time
    end_time: time
    available: bool


class SlotResponse(BaseModel):
    start_time: time
    end_time: time
    available: bool

    @classmethod
    def from_slot(cls, slot: CandidateSlot) -> "SlotResponse":
        return cls(start_time=slot.start, end_time=slot.end, available=slot.available)


class SlotListResponse(BaseModel):
    """Slot grid for one listing on one date."""

    listing_id: UUID
    booking_date: date
    duration_hours: float
    slots: list[SlotResponse]


class PriceResponse(BaseModel):
    """Price quote for an interval."""

    listing_id: UUID
    start_time: time
    end_time: time
    total_hours: Decimal
    total_cost: Decimal
    rate_applied: Literal["hourly", "daily"] = Field(
        ..., description="Which rate the quote was charged at"
    )


class SearchHitResponse(BaseModel):
    """One listing in a search page."""

    id: UUID
    title: str
    address: str
    city: str
    state: str
    postal_code: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_km: Optional[float] = Field(None, description="Distance from the search origin")
    hourly_rate: Decimal
    daily_rate: Decimal
    weekly_rate: Optional[Decimal] = None
    space_size_sqm: Optional[int] = None
    max_trucks: int
    created_at: datetime

    @classmethod
    def from_hit(cls, hit: SearchHit) -> "SearchHitResponse":
        listing = hit.listing
        coordinates = listing.coordinates
        return cls(
            id=listing.id,
            title=listing.title,
            address=listing.address,
            city=listing.city,
            state=listing.state,
            postal_code=listing.postal_code,
            latitude=coordinates.lat if coordinates else None,
            longitude=coordinates.lng if coordinates else None,
            distance_km=hit.distance_km,
            hourly_rate=listing.hourly_rate,
            daily_rate=listing.daily_rate,
            weekly_rate=listing.weekly_rate,
            space_size_sqm=listing.space_size_sqm,
            max_trucks=listing.max_trucks,
            created_at=listing.created_at,
        )


class SearchResponse(BaseModel):
    """
    Search page.

    ``degraded`` is true when a location was given but could not be
    resolved, and results come from text matching instead of distance.
    """

    results: list[SearchHitResponse]
    total: int = Field(..., description="Total matches before paging")
    page_size: int
    offset: int
    has_more: bool
    origin_latitude: Optional[float] = None
    origin_longitude: Optional[float] = None
    resolved_location: Optional[str] = None
    location_source: Optional[Literal["gazetteer", "geocoder"]] = None
    degraded: bool = False

    @classmethod
    def from_results(cls, results: SearchResults) -> "SearchResponse":
        resolved = results.resolved_location
        return cls(
            results=[SearchHitResponse.from_hit(hit) for hit in results.hits],
            total=results.total_matches,
            page_size=results.page_size,
            offset=results.offset,
            has_more=results.has_more,
            origin_latitude=results.origin.lat if results.origin else None,
            origin_longitude=results.origin.lng if results.origin else None,
            resolved_location=resolved.label if resolved else None,
            location_source=resolved.source if resolved else None,
            degraded=results.degraded,
        )


class BookingStatsResponse(BaseModel):
    """Booking counts and revenue for a venue owner."""

    owner_id: UUID
    total: int
    pending: int
    confirmed: int
    cancelled: int
    completed: int
    total_revenue: Decimal

    @classmethod
    def from_stats(cls, owner_id: UUID, stats: BookingStats) -> "BookingStatsResponse":
        return cls(
            owner_id=owner_id,
            total=stats.total,
            pending=stats.pending,
            confirmed=stats.confirmed,
            cancelled=stats.cancelled,
            completed=stats.completed,
            total_revenue=stats.total_revenue,
        )


class ErrorResponse(BaseModel):
    """Error information for failed requests."""

    error_type: Literal[
        "validation_error",
        "conflict",
        "not_found",
        "invalid_transition",
        "http_error",
        "internal_error",
    ] = Field(..., description="Type of error")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(None, description="Additional error details")
    retryable: bool = Field(default=False, description="Whether request can be retried")
    request_id: Optional[str] = Field(None, description="Id echoed in the X-Request-ID header")


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    database_connected: bool = Field(..., description="Database connection status")
    geocoder_enabled: bool = Field(..., description="External geocoder fallback configured")
