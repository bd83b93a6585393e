"""
Booking price calculation.

Bookings of DAILY_RATE_THRESHOLD_HOURS or more are charged the daily rate
flat; shorter bookings are charged the hourly rate per hour. The weekly
rate on a listing is not consulted.
"""

from datetime import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from space_engine.integrations.base import ListingRecord
from space_engine.services.availability import (
    hours_between,
    validate_booking_interval,
    validate_interval,
)

DAILY_RATE_THRESHOLD_HOURS = Decimal(8)

_CENT = Decimal("0.01")

Money = Union[int, float, Decimal, str]


def _to_decimal(value: Money) -> Decimal:
    # str() first so floats like 10.1 stay 10.1
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to whole pence/cents."""
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def calculate_price(
    hourly_rate: Money,
    daily_rate: Money,
    start: time,
    end: time,
    daily_threshold_hours: Money = DAILY_RATE_THRESHOLD_HOURS,
) -> Decimal:
    """
    Price a booking interval.

    Args:
        hourly_rate: Rate per hour
        daily_rate: Flat rate for a full-day booking
        start: Interval start
        end: Interval end (exclusive)
        daily_threshold_hours: Length at which the daily rate applies

    Returns:
        Cost rounded to 2 decimal places

    Raises:
        ReservationValidationError: If end is not after start

    Example:
        >>> calculate_price(10, 60, time(9), time(17))
        Decimal('60.00')
        >>> calculate_price(10, 60, time(9), time(16))
        Decimal('70.00')
    """
    validate_interval(start, end)

    total_hours = hours_between(start, end)
    if total_hours >= _to_decimal(daily_threshold_hours):
        return round_currency(_to_decimal(daily_rate))
    return round_currency(_to_decimal(hourly_rate) * total_hours)


def calculate_booking_cost(
    listing: ListingRecord,
    start: time,
    end: time,
    daily_threshold_hours: Money = DAILY_RATE_THRESHOLD_HOURS,
) -> Decimal:
    """
    Price an interval on a listing after checking its booking rules.

    Raises:
        ReservationValidationError: If the interval breaks the listing's rules
    """
    validate_booking_interval(listing, start, end)
    return calculate_price(
        listing.hourly_rate,
        listing.daily_rate,
        start,
        end,
        daily_threshold_hours=daily_threshold_hours,
    )
