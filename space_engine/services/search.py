"""
Listing search and ranking.

Pipeline, each stage applied only when the query asks for it:
1. Radius filter (when an origin is known)
2. Amenity filter (conjunctive)
3. Price range on the rate selected by the query's price type
4. Sort (relevance means distance with an origin, newest without)
5. Page truncation

When a free-text location cannot be resolved the search degrades to a
substring match on city, state and address instead of failing.

Without an origin or amenity filter storage applies every remaining stage
itself, so only one page is fetched and the total comes from a count.
"""

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field
from datetime import timezone
from decimal import Decimal
from enum import Enum
from functools import partial
from typing import Iterable, Optional

from space_engine.integrations.base import (
    Coordinates,
    ListingFilter,
    ListingRecord,
    ListingStore,
)
from space_engine.models.enums import ListingOrder, PriceType
from space_engine.services.amenities import Amenity, satisfies_all
from space_engine.services.geo import filter_by_distance
from space_engine.services.location import LocationResolver, ResolvedLocation

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
DEFAULT_OVERFETCH_LIMIT = 100
DEFAULT_RADIUS_KM = 25.0


class SortKey(str, Enum):
    RELEVANCE = "relevance"
    DISTANCE = "distance"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
    NEWEST = "newest"


# Sorts storage can apply itself; distance is only known after fetching
_STORAGE_ORDER = {
    SortKey.NEWEST: ListingOrder.NEWEST,
    SortKey.PRICE_LOW: ListingOrder.PRICE_LOW,
    SortKey.PRICE_HIGH: ListingOrder.PRICE_HIGH,
}


@dataclass(frozen=True)
class SearchQuery:
    """
    Search request.

    Explicit ``coordinates`` win over ``location``; ``location`` is only
    resolved when no coordinates are given. ``radius_km`` and ``page_size``
    fall back to service defaults when None.
    """

    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    radius_km: Optional[float] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    price_type: PriceType = PriceType.HOURLY
    amenities: frozenset[Amenity] = field(default_factory=frozenset)
    min_space_sqm: Optional[int] = None
    min_trucks: Optional[int] = None
    sort: SortKey = SortKey.RELEVANCE
    page_size: Optional[int] = None
    offset: int = 0


@dataclass(frozen=True)
class SearchHit:
    listing: ListingRecord
    distance_km: Optional[float] = None


@dataclass
class RankedPage:
    hits: list[SearchHit]
    total_matches: int


@dataclass
class SearchResults:
    """A page of ranked listings plus how the query was interpreted."""

    hits: list[SearchHit]
    total_matches: int
    page_size: int
    offset: int
    origin: Optional[Coordinates] = None
    resolved_location: Optional[ResolvedLocation] = None
    degraded: bool = False

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.hits) < self.total_matches


def rate_for(listing: ListingRecord, price_type: PriceType) -> Optional[Decimal]:
    """Rate column selected by a price type."""
    if price_type == PriceType.HOURLY:
        return listing.hourly_rate
    if price_type == PriceType.DAILY:
        return listing.daily_rate
    return listing.weekly_rate


def within_price_range(
    listing: ListingRecord,
    price_type: PriceType,
    min_price: Optional[Decimal],
    max_price: Optional[Decimal],
) -> bool:
    """
    Check the selected rate against optional bounds (inclusive).

    A listing without the selected rate fails any bound.
    """
    if min_price is None and max_price is None:
        return True
    rate = rate_for(listing, price_type)
    if rate is None:
        return False
    if min_price is not None and rate < min_price:
        return False
    if max_price is not None and rate > max_price:
        return False
    return True


def _meets_capacity(listing: ListingRecord, query: SearchQuery) -> bool:
    if query.min_space_sqm is not None:
        if listing.space_size_sqm is None or listing.space_size_sqm < query.min_space_sqm:
            return False
    if query.min_trucks is not None and listing.max_trucks < query.min_trucks:
        return False
    return True


def effective_sort(sort: SortKey, has_origin: bool) -> SortKey:
    """
    Resolve the sort actually applied.

    Relevance means nearest first when an origin is known and newest first
    otherwise. Distance without an origin also falls back to newest.
    """
    if sort == SortKey.RELEVANCE:
        return SortKey.DISTANCE if has_origin else SortKey.NEWEST
    if sort == SortKey.DISTANCE and not has_origin:
        return SortKey.NEWEST
    return sort


def _created_key(hit: SearchHit) -> float:
    created = hit.listing.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


def sort_hits(hits: list[SearchHit], sort: SortKey, price_type: PriceType) -> list[SearchHit]:
    """
    Sort hits for an already-resolved sort key. Ties keep input order.

    A listing without the selected rate (only possible for weekly) sorts
    as if its rate were 0: first for price_low, last for price_high.
    """
    if sort == SortKey.DISTANCE:
        return sorted(hits, key=lambda h: h.distance_km if h.distance_km is not None else 0.0)
    if sort == SortKey.PRICE_LOW:
        return sorted(hits, key=lambda h: rate_for(h.listing, price_type) or Decimal(0))
    if sort == SortKey.PRICE_HIGH:
        return sorted(
            hits,
            key=lambda h: rate_for(h.listing, price_type) or Decimal(0),
            reverse=True,
        )
    return sorted(hits, key=_created_key, reverse=True)


def rank_listings(
    listings: Iterable[ListingRecord],
    query: SearchQuery,
    origin: Optional[Coordinates] = None,
    radius_km: float = DEFAULT_RADIUS_KM,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> RankedPage:
    """
    Filter, sort and page candidate listings.

    Args:
        listings: Candidates from storage
        query: Search request
        origin: Resolved search centre, if any
        radius_km: Radius used when the query has none
        page_size: Page size used when the query has none

    Returns:
        RankedPage with the requested page and the total match count
    """
    if origin is not None:
        radius = query.radius_km if query.radius_km is not None else radius_km
        hits = [
            SearchHit(listing=m.listing, distance_km=m.distance_km)
            for m in filter_by_distance(listings, origin, radius)
        ]
    else:
        hits = [SearchHit(listing=listing) for listing in listings]

    if query.amenities:
        hits = [h for h in hits if satisfies_all(h.listing.amenities, query.amenities)]

    hits = [
        h for h in hits
        if within_price_range(h.listing, query.price_type, query.min_price, query.max_price)
        and _meets_capacity(h.listing, query)
    ]

    ordered = sort_hits(hits, effective_sort(query.sort, origin is not None), query.price_type)

    size = query.page_size or page_size
    return RankedPage(
        hits=ordered[query.offset:query.offset + size],
        total_matches=len(ordered),
    )


class SearchService:
    """
    Runs the full search: resolve location, fetch candidates, rank.

    Holds no per-query state; one instance serves concurrent searches.
    """

    def __init__(
        self,
        listing_store: ListingStore,
        resolver: LocationResolver,
        page_size: int = DEFAULT_PAGE_SIZE,
        overfetch_limit: int = DEFAULT_OVERFETCH_LIMIT,
        default_radius_km: float = DEFAULT_RADIUS_KM,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize the service.

        Args:
            listing_store: Listing storage
            resolver: Location resolver (gazetteer + geocoder)
            page_size: Default results per page
            overfetch_limit: Rows fetched when results are narrowed in memory
            default_radius_km: Radius when the query has none
            executor: Executor for blocking storage calls (loop default if None)
        """
        self._listing_store = listing_store
        self._resolver = resolver
        self._page_size = page_size
        self._overfetch_limit = overfetch_limit
        self._default_radius_km = default_radius_km
        self._executor = executor

    async def search(self, query: SearchQuery) -> SearchResults:
        """
        Search listings.

        Never raises for an unresolvable location; the result is marked
        degraded and text matching is used instead.
        """
        origin = query.coordinates
        resolved: Optional[ResolvedLocation] = None
        degraded = False

        if origin is None and query.location and query.location.strip():
            resolved = await self._resolver.resolve(query.location)
            if resolved is not None:
                origin = resolved.coordinates
            else:
                degraded = True
                logger.info(f"Location '{query.location}' unresolved; using text match")

        sort = effective_sort(query.sort, origin is not None)
        page_size = query.page_size or self._page_size
        # Radius and amenity filters run in memory, so storage cannot page for us
        narrowed = origin is not None or bool(query.amenities)
        if narrowed:
            limit = max(self._overfetch_limit, query.offset + page_size)
        else:
            limit = query.offset + page_size

        filters = ListingFilter(
            text=query.location.strip() if degraded else None,
            price_type=query.price_type,
            min_price=query.min_price,
            max_price=query.max_price,
            min_space_sqm=query.min_space_sqm,
            min_trucks=query.min_trucks,
            order=_STORAGE_ORDER.get(sort, ListingOrder.NEWEST),
            limit=limit,
        )
        candidates = await self._run(self._listing_store.list_listings, filters)

        page = rank_listings(
            candidates,
            query,
            origin=origin,
            radius_km=self._default_radius_km,
            page_size=page_size,
        )

        total = page.total_matches
        if not narrowed:
            # Storage applied every filter but was only asked for one page
            total = await self._run(self._listing_store.count_listings, filters)

        logger.info(
            f"Search returned {len(page.hits)} of {total} matches "
            f"from {len(candidates)} candidates"
            + (f" near ({origin.lat}, {origin.lng})" if origin else "")
        )

        return SearchResults(
            hits=page.hits,
            total_matches=total,
            page_size=page_size,
            offset=query.offset,
            origin=origin,
            resolved_location=resolved,
            degraded=degraded,
        )

    async def _run(self, fn, *args):
        """Run a blocking storage call in the executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(fn, *args))
