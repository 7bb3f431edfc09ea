from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from city_explorer.api.deps import get_providers, get_store
from city_explorer.schemas.records import LocationRecord
from city_explorer.services import orchestrator
from city_explorer.services.providers import Providers
from city_explorer.services.store import CacheStore


router = APIRouter(tags=["location"])


@router.get("/location", response_model=LocationRecord)
async def get_location(
    data: str = Query(min_length=1),
    store: CacheStore = Depends(get_store),
    providers: Providers = Depends(get_providers),
) -> LocationRecord:
    return await orchestrator.get_location(store, providers.geocoding, data)
