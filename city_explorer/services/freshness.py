from __future__ import annotations

import datetime as dt
import enum

from city_explorer.db.base import as_utc


class ResourceType(str, enum.Enum):
    FORECAST = "forecast"
    EVENT = "event"
    MOVIE = "movie"
    BUSINESS = "business"
    # Reserved: has a max age but no provider, table or endpoint yet.
    TRAIL = "trail"


class Decision(str, enum.Enum):
    SERVE_CACHED = "serve_cached"
    PURGE_AND_REFETCH = "purge_and_refetch"


_SECOND_MS = 1000
_HOUR_MS = 60 * 60 * _SECOND_MS
_DAY_MS = 24 * _HOUR_MS

MAX_AGE_MS: dict[ResourceType, int] = {
    ResourceType.FORECAST: 15 * _SECOND_MS,
    ResourceType.EVENT: 6 * _HOUR_MS,
    ResourceType.BUSINESS: 24 * _HOUR_MS,
    ResourceType.MOVIE: 30 * _DAY_MS,
    ResourceType.TRAIL: 7 * _DAY_MS,
}


def max_age(resource_type: ResourceType) -> dt.timedelta:
    return dt.timedelta(milliseconds=MAX_AGE_MS[resource_type])


def age_ms(fetched_at: dt.datetime, now: dt.datetime) -> float:
    return (as_utc(now) - as_utc(fetched_at)).total_seconds() * 1000.0


def decide(
    resource_type: ResourceType,
    fetched_at: dt.datetime | None,
    now: dt.datetime,
) -> Decision:
    """Serve the cached set or throw it away and ask the provider again.

    `fetched_at` is None when nothing is cached for the pair. An age exactly
    equal to the max age is still fresh.
    """

    if fetched_at is None:
        return Decision.PURGE_AND_REFETCH
    if age_ms(fetched_at, now) > MAX_AGE_MS[resource_type]:
        return Decision.PURGE_AND_REFETCH
    return Decision.SERVE_CACHED
