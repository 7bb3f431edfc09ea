"""Canonical, provider-independent record shapes."""

from __future__ import annotations

from city_explorer.schemas.records import (
    BusinessRecord,
    EventRecord,
    ForecastRecord,
    LocationRecord,
    LocationRef,
    MovieRecord,
    Record,
)

__all__ = [
    "BusinessRecord",
    "EventRecord",
    "ForecastRecord",
    "LocationRecord",
    "LocationRef",
    "MovieRecord",
    "Record",
]
