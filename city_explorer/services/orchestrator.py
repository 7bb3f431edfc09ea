"""Cache-or-fetch flows, one per resource type.

Locations are looked up locally and geocoded only on a miss; they never
expire. Every other resource type goes through `cache_or_fetch`, which asks
the freshness policy whether the stored set for (type, location) can be
served or must be purged and fetched again.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from city_explorer.db.base import utcnow
from city_explorer.schemas.records import LocationRecord, Record
from city_explorer.services import normalize
from city_explorer.services.freshness import Decision, ResourceType, decide
from city_explorer.services.providers import (
    DarkSkyClient,
    GoogleGeocodingClient,
    MeetupClient,
    MovieDbClient,
    YelpClient,
)
from city_explorer.services.store import CacheStore


logger = logging.getLogger(__name__)


Clock = Callable[[], dt.datetime]
Fetch = Callable[[], Awaitable[list[dict[str, Any]]]]
Normalize = Callable[..., Record]


async def get_location(
    store: CacheStore,
    geocoder: GoogleGeocodingClient,
    query: str,
    *,
    now: Clock = utcnow,
) -> LocationRecord:
    cached = await store.find_location(query)
    if cached is not None:
        logger.debug("Location cache hit for %r", query)
        return cached

    logger.info("Location cache miss for %r; geocoding", query)
    # Raises ProviderEmptyResult when the geocoder has no match.
    result = await geocoder.geocode(query)
    record = normalize.normalize_location(result, query=query, now=now())
    location_id = await store.insert_location(record)
    return record.model_copy(update={"id": location_id})


async def cache_or_fetch(
    store: CacheStore,
    resource_type: ResourceType,
    location_id: int,
    *,
    fetch: Fetch,
    normalize_item: Normalize,
    now: Clock = utcnow,
) -> list[Record]:
    fetched_at, cached = await store.cached_set(resource_type, location_id)
    decision = decide(resource_type, fetched_at, now())

    # A marker without rows means a purge raced the read; never serve it empty.
    if decision is Decision.SERVE_CACHED and cached:
        logger.debug(
            "Serving cached %s rows for location %s", resource_type.value, location_id
        )
        return cached

    if fetched_at is not None:
        purged = await store.purge_by_type_and_location(resource_type, location_id)
        logger.info(
            "Purged %d stale %s rows for location %s",
            purged,
            resource_type.value,
            location_id,
        )

    items = await fetch()
    # One fetch instant shared by the whole set.
    fetched_now = now()
    records = [
        normalize_item(item, location_id=location_id, now=fetched_now)
        for item in items
    ]
    await store.insert_many(resource_type, records)
    logger.info(
        "Cached %d %s rows for location %s",
        len(records),
        resource_type.value,
        location_id,
    )
    return records


async def get_forecasts(
    store: CacheStore,
    client: DarkSkyClient,
    *,
    location_id: int,
    latitude: float,
    longitude: float,
    now: Clock = utcnow,
) -> list[Record]:
    return await cache_or_fetch(
        store,
        ResourceType.FORECAST,
        location_id,
        fetch=lambda: client.daily_forecast(latitude=latitude, longitude=longitude),
        normalize_item=normalize.normalize_forecast,
        now=now,
    )


async def get_events(
    store: CacheStore,
    client: MeetupClient,
    *,
    location_id: int,
    latitude: float,
    longitude: float,
    now: Clock = utcnow,
) -> list[Record]:
    return await cache_or_fetch(
        store,
        ResourceType.EVENT,
        location_id,
        fetch=lambda: client.upcoming_events(latitude=latitude, longitude=longitude),
        normalize_item=normalize.normalize_event,
        now=now,
    )


async def get_movies(
    store: CacheStore,
    client: MovieDbClient,
    *,
    location_id: int,
    search_query: str,
    now: Clock = utcnow,
) -> list[Record]:
    return await cache_or_fetch(
        store,
        ResourceType.MOVIE,
        location_id,
        fetch=lambda: client.search(search_query),
        normalize_item=normalize.normalize_movie,
        now=now,
    )


async def get_businesses(
    store: CacheStore,
    client: YelpClient,
    *,
    location_id: int,
    latitude: float,
    longitude: float,
    now: Clock = utcnow,
) -> list[Record]:
    return await cache_or_fetch(
        store,
        ResourceType.BUSINESS,
        location_id,
        fetch=lambda: client.search(latitude=latitude, longitude=longitude),
        normalize_item=normalize.normalize_business,
        now=now,
    )
