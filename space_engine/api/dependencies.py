"""
FastAPI dependency injection providers.

Services are built once per application into a ServiceContainer held on
``app.state`` and handed to endpoints through the providers below.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from space_engine.config import Settings
from space_engine.database import create_engine_from_settings, create_session_factory
from space_engine.integrations.base import Geocoder
from space_engine.integrations.database import (
    SQLAlchemyListingStore,
    SQLAlchemyReservationStore,
)
from space_engine.integrations.nominatim import NominatimGeocoder
from space_engine.services.booking_service import BookingService
from space_engine.services.location import LocationResolver
from space_engine.services.search import SearchService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything an endpoint may need, wired against one database."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    reservation_store: SQLAlchemyReservationStore
    listing_store: SQLAlchemyListingStore
    booking_service: BookingService
    search_service: SearchService


def build_container(
    settings: Settings,
    engine: Optional[Engine] = None,
    geocoder: Optional[Geocoder] = None,
) -> ServiceContainer:
    """
    Wire stores and services from settings.

    Args:
        settings: Application settings
        engine: Existing engine to reuse (a new one is created if None)
        geocoder: Geocoder override; by default Nominatim when enabled

    Returns:
        ServiceContainer ready to attach to ``app.state``
    """
    engine = engine or create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)

    reservation_store = SQLAlchemyReservationStore(session_factory)
    listing_store = SQLAlchemyListingStore(session_factory)

    if geocoder is None and settings.geocoder_enabled:
        geocoder = NominatimGeocoder.from_settings(settings)

    resolver = LocationResolver(
        geocoder=geocoder,
        timeout_seconds=settings.geocoder_timeout_seconds,
    )

    booking_service = BookingService(
        reservation_store,
        listing_store,
        daily_threshold_hours=settings.daily_rate_threshold_hours,
    )
    search_service = SearchService(
        listing_store,
        resolver,
        page_size=settings.search_page_size,
        overfetch_limit=settings.search_overfetch_limit,
        default_radius_km=settings.default_search_radius_km,
    )

    logger.info(
        f"Services initialized (geocoder {'enabled' if geocoder else 'disabled'})"
    )
    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        reservation_store=reservation_store,
        listing_store=listing_store,
        booking_service=booking_service,
        search_service=search_service,
    )


def get_container(request: Request) -> ServiceContainer:
    """
    Dependency injection for the service container.

    Raises:
        HTTPException: If services are not initialized
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        logger.error("Service container not initialized")
        raise HTTPException(
            status_code=503,
            detail="Service temporarily unavailable - services not initialized",
        )
    return container


def get_booking_service(
    container: ServiceContainer = Depends(get_container),
) -> BookingService:
    return container.booking_service


def get_search_service(
    container: ServiceContainer = Depends(get_container),
) -> SearchService:
    return container.search_service


def get_reservation_store(
    container: ServiceContainer = Depends(get_container),
) -> SQLAlchemyReservationStore:
    return container.reservation_store
