"""
Great-circle distance and radius filtering.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from space_engine.integrations.base import Coordinates, ListingRecord

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class DistanceMatch:
    """A listing inside the search radius, annotated with its distance."""

    listing: ListingRecord
    distance_km: float


def calculate_distance(a: Coordinates, b: Coordinates) -> float:
    """
    Haversine distance between two points in kilometres.

    Returns:
        Distance rounded to one decimal place

    Example:
        >>> london = Coordinates(51.5074, -0.1278)
        >>> manchester = Coordinates(53.4808, -2.2426)
        >>> round(calculate_distance(london, manchester))
        262
    """
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat))
        * math.cos(math.radians(b.lat))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return round(EARTH_RADIUS_KM * c, 1)


def filter_by_distance(
    listings: Iterable[ListingRecord],
    origin: Coordinates,
    radius_km: float,
) -> list[DistanceMatch]:
    """
    Keep listings within ``radius_km`` of ``origin``.

    The comparison uses the rounded distance and is inclusive. Listings
    without coordinates are skipped with a warning.

    Returns:
        Matches in input order, each carrying its distance
    """
    matches = []
    for listing in listings:
        if listing.coordinates is None:
            logger.warning(f"Listing {listing.id} has no coordinates; skipped in radius search")
            continue

        distance = calculate_distance(origin, listing.coordinates)
        if distance <= radius_km:
            matches.append(DistanceMatch(listing=listing, distance_km=distance))
    return matches
