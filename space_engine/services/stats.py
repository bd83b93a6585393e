"""
Booking statistics for venue owners.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from space_engine.integrations.base import ReservationStore
from space_engine.models.enums import BookingStatus


@dataclass
class BookingStats:
    """Counts per status and realised revenue over an owner's listings."""

    total: int = 0
    pending: int = 0
    confirmed: int = 0
    cancelled: int = 0
    completed: int = 0
    total_revenue: Decimal = Decimal("0.00")


def get_booking_stats(
    store: ReservationStore,
    owner_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> BookingStats:
    """
    Summarize bookings across every listing an owner has.

    Revenue counts completed bookings only.

    Args:
        store: Booking storage
        owner_id: Venue owner
        start_date: First booking date included (optional)
        end_date: Last booking date included (optional)
    """
    stats = BookingStats()
    for booking in store.list_owner_bookings(owner_id, start_date, end_date):
        stats.total += 1
        if booking.status == BookingStatus.PENDING:
            stats.pending += 1
        elif booking.status == BookingStatus.CONFIRMED:
            stats.confirmed += 1
        elif booking.status == BookingStatus.CANCELLED:
            stats.cancelled += 1
        elif booking.status == BookingStatus.COMPLETED:
            stats.completed += 1
            stats.total_revenue += booking.total_cost
    return stats
