"""
Free-text location resolution.

Resolution order:
1. Static gazetteer (exact, case-insensitive; no network)
2. External geocoder, bounded by a timeout

An unresolved location is reported as None, never raised, so search can
fall back to text matching.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Literal, Optional

from space_engine.exceptions import GeocoderTimeoutError, LocationResolutionError
from space_engine.integrations.base import Coordinates, Geocoder
from space_engine.services.gazetteer import Gazetteer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedLocation:
    coordinates: Coordinates
    label: str
    source: Literal["gazetteer", "geocoder"]


class LocationResolver:
    """Resolves free text to coordinates, gazetteer first."""

    def __init__(
        self,
        gazetteer: Optional[Gazetteer] = None,
        geocoder: Optional[Geocoder] = None,
        timeout_seconds: float = 5.0,
    ):
        """
        Initialize the resolver.

        Args:
            gazetteer: Static place table (defaults to popular UK cities)
            geocoder: External geocoder, or None to disable the network fallback
            timeout_seconds: Bound on the whole geocoder call, retries included
        """
        self._gazetteer = gazetteer or Gazetteer()
        self._geocoder = geocoder
        self._timeout_seconds = timeout_seconds

    async def resolve(self, text: Optional[str]) -> Optional[ResolvedLocation]:
        """
        Resolve a location string.

        Returns:
            ResolvedLocation, or None when neither source resolves it
        """
        if not text or not text.strip():
            return None

        entry = self._gazetteer.lookup(text)
        if entry is not None:
            return ResolvedLocation(
                coordinates=entry.coordinates,
                label=entry.name,
                source="gazetteer",
            )

        if self._geocoder is None:
            return None

        query = text.strip()
        try:
            # wait_for cancels the lookup when the bound expires
            result = await asyncio.wait_for(
                self._geocoder.geocode(query),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Geocoding '{query}' exceeded {self._timeout_seconds}s; continuing without coordinates"
            )
            return None
        except GeocoderTimeoutError as e:
            logger.warning(f"Geocoder timed out for '{query}': {e.message}")
            return None
        except LocationResolutionError as e:
            logger.warning(f"Could not geocode '{query}': {e.message}")
            return None

        if result is None:
            logger.info(f"Could not find location: '{query}'")
            return None

        logger.info(f"Geocoded '{query}' to ({result.coordinates.lat}, {result.coordinates.lng})")
        return ResolvedLocation(
            coordinates=result.coordinates,
            label=result.place_name,
            source="geocoder",
        )
