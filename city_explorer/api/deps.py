from __future__ import annotations

import json
from typing import Any

from fastapi import Depends, Request
from pydantic import ValidationError

from city_explorer.core.errors import APIError
from city_explorer.core.settings import Settings, get_settings
from city_explorer.db.session import get_sessionmaker
from city_explorer.schemas.records import LocationRef
from city_explorer.services.providers import Providers, build_providers
from city_explorer.services.store import CacheStore


def get_store() -> CacheStore:
    return CacheStore(get_sessionmaker())


def get_providers(settings: Settings = Depends(get_settings)) -> Providers:
    return build_providers(settings)


def _raw_location_ref(request: Request) -> dict[str, Any]:
    """Collect the `data` location either as JSON or as qs-style brackets.

    Browsers send `data[id]=1&data[latitude]=..`; scripts may send
    `data={"id": 1, ...}`.
    """

    params = request.query_params
    raw = params.get("data")
    if raw is not None:
        try:
            value = json.loads(raw)
        except ValueError:
            raise APIError(
                code="LOCATION_INVALID",
                message="Query parameter `data` is not valid JSON",
            )
        if not isinstance(value, dict):
            raise APIError(
                code="LOCATION_INVALID",
                message="Query parameter `data` must be an object",
            )
        return value

    collected: dict[str, Any] = {}
    for key, value in params.multi_items():
        if key.startswith("data[") and key.endswith("]"):
            collected[key[len("data[") : -1]] = value
    if not collected:
        raise APIError(
            code="LOCATION_MISSING",
            message="Missing query parameter `data`",
        )
    return collected


def get_location_ref(request: Request) -> LocationRef:
    try:
        return LocationRef.model_validate(_raw_location_ref(request))
    except ValidationError as exc:
        raise APIError(
            code="LOCATION_INVALID",
            message="Invalid location in query parameter `data`",
            details=exc.errors(include_url=False),
        )


def require_coordinates(location: LocationRef) -> tuple[float, float]:
    if location.latitude is None or location.longitude is None:
        raise APIError(
            code="LOCATION_INVALID",
            message="Location needs latitude and longitude",
        )
    return location.latitude, location.longitude
