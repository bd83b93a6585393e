"""
Relational database storage for listings and bookings.
"""

from space_engine.integrations.database.adapter import DatabaseAdapter, MalformedRowError
from space_engine.integrations.database.repository import (
    SQLAlchemyListingStore,
    SQLAlchemyReservationStore,
)

__all__ = [
    "DatabaseAdapter",
    "MalformedRowError",
    "SQLAlchemyListingStore",
    "SQLAlchemyReservationStore",
]
