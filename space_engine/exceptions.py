"""
Exceptions raised by the availability, pricing and search engine.

Provides structured error handling with retryable flags.
"""


class SpaceEngineError(Exception):
    """Base exception for engine operations."""

    retryable: bool = False

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ReservationValidationError(SpaceEngineError):
    """
    Requested interval is not acceptable for the listing.

    Causes:
    - End time not after start time
    - Duration shorter than the listing's minimum booking hours
    - Duration longer than the listing's maximum booking hours
    - Interval outside the listing's operating window

    Nothing is written when this is raised.
    """

    retryable = False


class ReservationConflictError(SpaceEngineError):
    """
    Interval overlaps a pending or confirmed booking.

    Raised by the atomic reserve when another booking won the race.
    Retryable after re-querying availability.
    """

    retryable = True

    def __init__(
        self,
        message: str,
        conflicting_booking_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error=original_error)
        self.conflicting_booking_id = conflicting_booking_id


class ListingNotFoundError(SpaceEngineError):
    """
    Listing does not exist or is not bookable.

    Causes:
    - Unknown listing ID
    - Listing is inactive or suspended
    """

    retryable = False


class BookingNotFoundError(SpaceEngineError):
    """Booking ID is unknown."""

    retryable = False


class InvalidStatusTransitionError(SpaceEngineError):
    """
    Booking status change is not allowed.

    Example: confirming a cancelled booking.
    """

    retryable = False


class LocationResolutionError(SpaceEngineError):
    """
    Free-text location could not be turned into coordinates.

    Non-fatal: search degrades to text matching.
    """

    retryable = False


class GeocoderTimeoutError(LocationResolutionError):
    """
    External geocoder did not answer within its time bound.

    Handled exactly like LocationResolutionError.
    """

    retryable = True
