from __future__ import annotations

from fastapi import APIRouter

from city_explorer.api.health import router as health_router
from city_explorer.api.locations import router as locations_router
from city_explorer.api.resources import router as resources_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(locations_router)
api_router.include_router(resources_router)
