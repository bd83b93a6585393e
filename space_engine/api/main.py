"""
FastAPI application for Space Engine.

This is the main entry point for the HTTP API, providing:
- Availability, slot and price endpoints per listing
- Atomic reservation and booking status transitions
- Listing search by location, price and amenities
- Health and owner statistics endpoints
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from dateutil.parser import parse as parse_date
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from space_engine.api.dependencies import (
    ServiceContainer,
    build_container,
    get_booking_service,
    get_container,
    get_reservation_store,
    get_search_service,
)
from space_engine.api.middleware import RequestLoggingMiddleware, get_request_id
from space_engine.api.models import (
    AvailabilityResponse,
    BookingResponse,
    BookingStatsResponse,
    CancelBookingRequest,
    ConfirmBookingRequest,
    CreateBookingRequest,
    ErrorResponse,
    HealthResponse,
    PriceResponse,
    SearchResponse,
    SlotListResponse,
    SlotResponse,
)
from space_engine.config import get_settings
from space_engine.database import check_connection
from space_engine.exceptions import (
    BookingNotFoundError,
    InvalidStatusTransitionError,
    ListingNotFoundError,
    ReservationConflictError,
    ReservationValidationError,
    SpaceEngineError,
)
from space_engine.integrations.base import Coordinates, ReservationStore
from space_engine.models.enums import PriceType
from space_engine.services.amenities import parse_amenities
from space_engine.services.booking_service import BookingService
from space_engine.services.search import SearchQuery, SearchService, SortKey
from space_engine.services.stats import get_booking_stats

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


# =============================================================================
# Application Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Space Engine API")
    if getattr(app.state, "container", None) is None:
        settings = get_settings()
        logging.getLogger("space_engine").setLevel(settings.log_level)
        app.state.container = build_container(settings)
        app.state.owns_container = True
    logger.info("Space Engine API started")

    yield

    # Shutdown
    logger.info("Shutting down Space Engine API")
    if getattr(app.state, "owns_container", False):
        app.state.container.engine.dispose()
        app.state.container = None


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: Pre-built services (tests); built from settings at startup if None
    """
    application = FastAPI(
        title="Space Engine API",
        description="""
# Space Engine API

Availability, pricing and search for bookable spaces.

## Booking Flow
1. **GET /search** - Find listings near a place, within a price range, with amenities
2. **GET /listings/{id}/slots** - See which slots are open on a date
3. **GET /listings/{id}/price** - Quote an interval
4. **POST /listings/{id}/bookings** - Reserve it (pending until the owner confirms)

## Error Handling

- **404** - Listing or booking not found
- **409** - Interval already taken, or status change not allowed
- **422** - Invalid interval or request
        """,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    application.state.container = container
    application.state.owns_container = False

    application.add_middleware(RequestLoggingMiddleware)
    _register_exception_handlers(application)
    _register_routes(application)
    return application


# =============================================================================
# Exception Handlers
# =============================================================================


def _error_response(
    status_code: int,
    error_type: str,
    exc: SpaceEngineError,
    details: Optional[dict] = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_type=error_type,
        message=exc.message,
        details=details,
        retryable=exc.retryable,
        request_id=get_request_id() or None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _register_exception_handlers(application: FastAPI) -> None:
    @application.exception_handler(ReservationValidationError)
    async def validation_error_handler(request, exc: ReservationValidationError):
        return _error_response(422, "validation_error", exc)

    @application.exception_handler(ReservationConflictError)
    async def conflict_error_handler(request, exc: ReservationConflictError):
        details = None
        if exc.conflicting_booking_id:
            details = {"conflicting_booking_id": exc.conflicting_booking_id}
        return _error_response(409, "conflict", exc, details)

    @application.exception_handler(ListingNotFoundError)
    async def listing_not_found_handler(request, exc: ListingNotFoundError):
        return _error_response(404, "not_found", exc)

    @application.exception_handler(BookingNotFoundError)
    async def booking_not_found_handler(request, exc: BookingNotFoundError):
        return _error_response(404, "not_found", exc)

    @application.exception_handler(InvalidStatusTransitionError)
    async def transition_error_handler(request, exc: InvalidStatusTransitionError):
        return _error_response(409, "invalid_transition", exc)

    @application.exception_handler(HTTPException)
    async def http_exception_handler(request, exc: HTTPException):
        """Handle HTTP exceptions with consistent format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error_type": "http_error",
                "message": exc.detail,
                "retryable": exc.status_code >= 500,
            },
        )

    @application.exception_handler(Exception)
    async def general_exception_handler(request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error_type": "internal_error",
                "message": "An unexpected error occurred",
                "retryable": True,
            },
        )


# =============================================================================
# Routes
# =============================================================================


def _parse_optional_date(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_date(value).date()
    except (ValueError, OverflowError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {e}")


def _register_routes(application: FastAPI) -> None:
    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @application.get(
        "/health",
        response_model=HealthResponse,
        summary="Health check",
        tags=["System"],
    )
    def health_check(container: ServiceContainer = Depends(get_container)):
        """Check API health including database connectivity."""
        database_connected = check_connection(container.engine)
        return HealthResponse(
            status="healthy" if database_connected else "unhealthy",
            version=API_VERSION,
            database_connected=database_connected,
            geocoder_enabled=container.settings.geocoder_enabled,
        )

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    @application.get(
        "/listings/{listing_id}/availability",
        response_model=AvailabilityResponse,
        summary="Check whether an interval is free",
        tags=["Availability"],
    )
    def get_availability(
        listing_id: UUID,
        booking_date: date = Query(..., alias="date", description="Date to check"),
        start: time = Query(..., description="Start time (HH:MM)"),
        end: time = Query(..., description="End time (HH:MM, exclusive)"),
        exclude_booking_id: Optional[UUID] = Query(
            None, description="Booking to ignore, when editing it"
        ),
        service: BookingService = Depends(get_booking_service),
    ) -> AvailabilityResponse:
        available = service.check_availability(
            listing_id,
            booking_date,
            start,
            end,
            exclude_booking_id=exclude_booking_id,
        )
        return AvailabilityResponse(
            listing_id=listing_id,
            booking_date=booking_date,
            start_time=start,
            end_time=end,
            available=available,
        )

    @application.get(
        "/listings/{listing_id}/slots",
        response_model=SlotListResponse,
        summary="List slots across the operating window",
        tags=["Availability"],
    )
    def get_slots(
        listing_id: UUID,
        booking_date: date = Query(..., alias="date", description="Date to enumerate"),
        duration_hours: float = Query(1.0, gt=0, le=24, description="Slot width in hours"),
        service: BookingService = Depends(get_booking_service),
    ) -> SlotListResponse:
        slots = service.enumerate_slots(listing_id, booking_date, duration_hours=duration_hours)
        return SlotListResponse(
            listing_id=listing_id,
            booking_date=booking_date,
            duration_hours=duration_hours,
            slots=[SlotResponse.from_slot(slot) for slot in slots],
        )

    @application.get(
        "/listings/{listing_id}/price",
        response_model=PriceResponse,
        summary="Quote an interval",
        tags=["Pricing"],
    )
    def get_price(
        listing_id: UUID,
        start: time = Query(..., description="Start time (HH:MM)"),
        end: time = Query(..., description="End time (HH:MM, exclusive)"),
        service: BookingService = Depends(get_booking_service),
    ) -> PriceResponse:
        quote = service.quote(listing_id, start, end)
        return PriceResponse(
            listing_id=listing_id,
            start_time=start,
            end_time=end,
            total_hours=quote.total_hours,
            total_cost=quote.total_cost,
            rate_applied=quote.rate_applied,
        )

    # -------------------------------------------------------------------------
    # Bookings
    # -------------------------------------------------------------------------

    @application.post(
        "/listings/{listing_id}/bookings",
        response_model=BookingResponse,
        status_code=201,
        summary="Reserve an interval",
        description="""
Create a pending booking.

The availability check is repeated atomically with the insert, so two
concurrent requests for overlapping intervals never both succeed.
        """,
        responses={
            201: {"description": "Booking created (pending)"},
            404: {"description": "Listing not found or not bookable"},
            409: {"description": "Interval already taken"},
            422: {"description": "Interval breaks the listing's booking rules"},
        },
        tags=["Bookings"],
    )
    def create_booking(
        listing_id: UUID,
        request: CreateBookingRequest,
        service: BookingService = Depends(get_booking_service),
    ) -> BookingResponse:
        logger.info(
            f"Reserving listing {listing_id} on {request.booking_date} "
            f"{request.start_time}-{request.end_time} for vendor {request.vendor_id}"
        )
        record = service.reserve(
            listing_id,
            request.booking_date,
            request.start_time,
            request.end_time,
            vendor_id=request.vendor_id,
            vendor_notes=request.vendor_notes,
        )
        return BookingResponse.from_record(record)

    @application.post(
        "/bookings/{booking_id}/confirm",
        response_model=BookingResponse,
        summary="Confirm a pending booking",
        tags=["Bookings"],
    )
    def confirm_booking(
        booking_id: UUID,
        request: Optional[ConfirmBookingRequest] = None,
        service: BookingService = Depends(get_booking_service),
    ) -> BookingResponse:
        notes = request.venue_owner_notes if request else None
        return BookingResponse.from_record(service.confirm(booking_id, venue_owner_notes=notes))

    @application.post(
        "/bookings/{booking_id}/cancel",
        response_model=BookingResponse,
        summary="Cancel a booking",
        tags=["Bookings"],
    )
    def cancel_booking(
        booking_id: UUID,
        request: Optional[CancelBookingRequest] = None,
        service: BookingService = Depends(get_booking_service),
    ) -> BookingResponse:
        reason = request.reason if request else None
        return BookingResponse.from_record(service.cancel(booking_id, reason=reason))

    @application.post(
        "/bookings/{booking_id}/complete",
        response_model=BookingResponse,
        summary="Mark a confirmed booking completed",
        tags=["Bookings"],
    )
    def complete_booking(
        booking_id: UUID,
        service: BookingService = Depends(get_booking_service),
    ) -> BookingResponse:
        return BookingResponse.from_record(service.complete(booking_id))

    @application.get(
        "/owners/{owner_id}/booking-stats",
        response_model=BookingStatsResponse,
        summary="Booking counts and revenue for an owner",
        tags=["Bookings"],
    )
    def owner_booking_stats(
        owner_id: UUID,
        start_date: Optional[str] = Query(None, description="First booking date (ISO 8601)"),
        end_date: Optional[str] = Query(None, description="Last booking date (ISO 8601)"),
        store: ReservationStore = Depends(get_reservation_store),
    ) -> BookingStatsResponse:
        start = _parse_optional_date(start_date, "start_date")
        end = _parse_optional_date(end_date, "end_date")
        stats = get_booking_stats(store, owner_id, start, end)
        return BookingStatsResponse.from_stats(owner_id, stats)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    @application.get(
        "/search",
        response_model=SearchResponse,
        summary="Search listings",
        description="""
Search active listings.

- `location` is resolved against a table of popular UK cities, then the
  external geocoder. If it cannot be resolved the search falls back to a
  text match on city, state and address and `degraded` is set.
- `lat`/`lng` skip resolution entirely.
- `amenities` may be repeated or comma-separated; all must be present.
        """,
        tags=["Search"],
    )
    async def search_listings(
        location: Optional[str] = Query(None, max_length=200),
        lat: Optional[float] = Query(None, ge=-90, le=90),
        lng: Optional[float] = Query(None, ge=-180, le=180),
        radius_km: Optional[float] = Query(None, gt=0, le=500),
        min_price: Optional[Decimal] = Query(None, ge=0),
        max_price: Optional[Decimal] = Query(None, ge=0),
        price_type: PriceType = Query(PriceType.HOURLY),
        amenities: list[str] = Query([]),
        min_space_sqm: Optional[int] = Query(None, ge=0),
        min_trucks: Optional[int] = Query(None, ge=1),
        sort: SortKey = Query(SortKey.RELEVANCE),
        page_size: Optional[int] = Query(None, ge=1, le=100),
        offset: int = Query(0, ge=0),
        service: SearchService = Depends(get_search_service),
    ) -> SearchResponse:
        if (lat is None) != (lng is None):
            raise HTTPException(status_code=422, detail="lat and lng must be given together")
        if min_price is not None and max_price is not None and min_price > max_price:
            raise HTTPException(status_code=422, detail="min_price cannot exceed max_price")

        try:
            required = parse_amenities(
                part for value in amenities for part in value.split(",")
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=f"Unknown amenity: {e}")

        query = SearchQuery(
            location=location,
            coordinates=Coordinates(lat, lng) if lat is not None else None,
            radius_km=radius_km,
            min_price=min_price,
            max_price=max_price,
            price_type=price_type,
            amenities=required,
            min_space_sqm=min_space_sqm,
            min_trucks=min_trucks,
            sort=sort,
            page_size=page_size,
            offset=offset,
        )
        results = await service.search(query)
        return SearchResponse.from_results(results)


# =============================================================================
# FastAPI Application
# =============================================================================


app = create_app()


# =============================================================================
# Run with Uvicorn
# =============================================================================


def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Run the API server with Uvicorn."""
    import uvicorn

    uvicorn.run(
        "space_engine.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    settings = get_settings()
    run_server(host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
