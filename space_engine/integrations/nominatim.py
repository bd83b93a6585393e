"""
OpenStreetMap Nominatim geocoder with retry and error handling.

Nominatim is free and needs no API key, but its usage policy requires an
identifying User-Agent and at most one request per second.
"""

import logging
from typing import Optional, Sequence

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from space_engine.config import Settings
from space_engine.exceptions import GeocoderTimeoutError, LocationResolutionError
from space_engine.integrations.base import Coordinates, Geocoder, GeocodingResult

logger = logging.getLogger(__name__)


class GeocoderUnavailableError(LocationResolutionError):
    """
    Geocoder answered with a rate-limit or server error (429, 5xx).

    Retryable after a short backoff.
    """

    retryable = True


def _is_retryable_error(exception: Exception) -> bool:
    """Only transient upstream errors are retried; timeouts are not."""
    return isinstance(exception, GeocoderUnavailableError)


def _handle_status(response: httpx.Response) -> None:
    """Convert non-2xx responses to resolution errors."""
    status = response.status_code
    if 200 <= status < 300:
        return
    if status == 429 or status >= 500:
        raise GeocoderUnavailableError(f"Geocoder unavailable ({status})")
    raise LocationResolutionError(f"Geocoder rejected request ({status})")


class NominatimGeocoder(Geocoder):
    """
    Geocoder backed by the Nominatim search API.

    Provides:
    - Single best match per query (limit=1)
    - Country restriction
    - Retry with exponential backoff on 429/5xx
    - Timeouts surfaced as GeocoderTimeoutError
    """

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        country_codes: Sequence[str] = ("gb",),
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the geocoder.

        Args:
            base_url: Nominatim search endpoint
            user_agent: Identifying User-Agent header
            country_codes: ISO codes to restrict results to (empty for worldwide)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._base_url = base_url
        self._user_agent = user_agent
        self._country_codes = list(country_codes)
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "NominatimGeocoder":
        return cls(
            base_url=settings.geocoder_base_url,
            user_agent=settings.geocoder_user_agent,
            country_codes=settings.geocoder_country_list,
            timeout=settings.geocoder_timeout_seconds,
            transport=transport,
        )

    async def geocode(self, text: str) -> Optional[GeocodingResult]:
        query = text.strip()
        if not query:
            return None

        results = await self._search(query)
        if not results:
            logger.info(f"Geocoder found no match for '{query}'")
            return None

        return self._parse_result(results[0], query)

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=1),
        retry=retry_if_exception(_is_retryable_error),
        reraise=True,
    )
    async def _search(self, query: str) -> list:
        params = {
            "format": "json",
            "q": query,
            "limit": 1,
            "addressdetails": 1,
        }
        if self._country_codes:
            params["countrycodes"] = ",".join(self._country_codes)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                headers={"User-Agent": self._user_agent},
            ) as client:
                response = await client.get(self._base_url, params=params)
        except httpx.TimeoutException as e:
            raise GeocoderTimeoutError(
                f"Geocoder timed out after {self._timeout}s",
                original_error=e,
            ) from e
        except httpx.RequestError as e:
            raise LocationResolutionError(
                f"Geocoder request failed: {e}",
                original_error=e,
            ) from e

        _handle_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise LocationResolutionError("Geocoder returned invalid JSON", original_error=e) from e

        if not isinstance(data, list):
            raise LocationResolutionError("Geocoder returned an unexpected payload")
        return data

    @staticmethod
    def _parse_result(item: dict, query: str) -> GeocodingResult:
        try:
            coordinates = Coordinates(lat=float(item["lat"]), lng=float(item["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise LocationResolutionError(
                f"Geocoder result for '{query}' has no usable coordinates",
                original_error=e,
            ) from e

        address = item.get("address") or {}
        return GeocodingResult(
            coordinates=coordinates,
            formatted_address=item.get("display_name", query),
            place_name=item.get("name") or query,
            country=address.get("country") or "UK",
            raw=item,
        )
