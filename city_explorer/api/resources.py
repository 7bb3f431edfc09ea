from __future__ import annotations

from fastapi import APIRouter, Depends

from city_explorer.api.deps import (
    get_location_ref,
    get_providers,
    get_store,
    require_coordinates,
)
from city_explorer.core.errors import APIError
from city_explorer.schemas.records import (
    BusinessRecord,
    EventRecord,
    ForecastRecord,
    LocationRef,
    MovieRecord,
)
from city_explorer.services import orchestrator
from city_explorer.services.providers import Providers
from city_explorer.services.store import CacheStore


router = APIRouter(tags=["resources"])


@router.get("/weather", response_model=list[ForecastRecord])
async def get_weather(
    location: LocationRef = Depends(get_location_ref),
    store: CacheStore = Depends(get_store),
    providers: Providers = Depends(get_providers),
):
    latitude, longitude = require_coordinates(location)
    return await orchestrator.get_forecasts(
        store,
        providers.forecast,
        location_id=location.id,
        latitude=latitude,
        longitude=longitude,
    )


@router.get("/meetups", response_model=list[EventRecord])
async def get_meetups(
    location: LocationRef = Depends(get_location_ref),
    store: CacheStore = Depends(get_store),
    providers: Providers = Depends(get_providers),
):
    latitude, longitude = require_coordinates(location)
    return await orchestrator.get_events(
        store,
        providers.events,
        location_id=location.id,
        latitude=latitude,
        longitude=longitude,
    )


@router.get("/movies", response_model=list[MovieRecord])
async def get_movies(
    location: LocationRef = Depends(get_location_ref),
    store: CacheStore = Depends(get_store),
    providers: Providers = Depends(get_providers),
):
    if not location.search_query:
        raise APIError(
            code="LOCATION_INVALID",
            message="Location needs a search_query",
        )
    return await orchestrator.get_movies(
        store,
        providers.movies,
        location_id=location.id,
        search_query=location.search_query,
    )


@router.get("/yelp", response_model=list[BusinessRecord])
async def get_yelp(
    location: LocationRef = Depends(get_location_ref),
    store: CacheStore = Depends(get_store),
    providers: Providers = Depends(get_providers),
):
    latitude, longitude = require_coordinates(location)
    return await orchestrator.get_businesses(
        store,
        providers.businesses,
        location_id=location.id,
        latitude=latitude,
        longitude=longitude,
    )
