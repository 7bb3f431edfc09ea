from __future__ import annotations

import datetime as dt
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from city_explorer.db.base import as_utc


class _CachedRecord(BaseModel):
    # Built either from ORM rows (from_attributes) or by the normalizer.
    model_config = ConfigDict(from_attributes=True, frozen=True)

    created_at: dt.datetime

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: dt.datetime) -> dt.datetime:
        return as_utc(value)


class LocationRecord(_CachedRecord):
    id: int | None = None
    search_query: str
    formatted_query: str
    latitude: float
    longitude: float


class ForecastRecord(_CachedRecord):
    forecast_summary: str | None
    day_label: str
    location_id: int


class EventRecord(_CachedRecord):
    link: str | None
    name: str
    creation_date: str
    host: str | None
    location_id: int


class MovieRecord(_CachedRecord):
    title: str
    overview: str | None
    average_votes: float | None
    total_votes: int | None
    image_url: str | None
    popularity: float | None
    released_on: str | None
    location_id: int


class BusinessRecord(_CachedRecord):
    name: str
    image_url: str | None
    price: str | None
    rating: float | None
    url: str | None
    location_id: int


Record = Union[ForecastRecord, EventRecord, MovieRecord, BusinessRecord]


class LocationRef(BaseModel):
    """The location a client passes back to the per-resource endpoints."""

    id: int
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    search_query: str | None = None
