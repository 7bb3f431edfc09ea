"""Map raw provider items onto canonical records.

Each function takes exactly one item from a provider's result list. Emptiness
of the list itself is the provider client's concern (ProviderEmptyResult).
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Mapping

from city_explorer.core.errors import ProviderPayloadError
from city_explorer.schemas.records import (
    BusinessRecord,
    EventRecord,
    ForecastRecord,
    LocationRecord,
    MovieRecord,
)


TMDB_IMAGE_PREFIX = "http://image.tmdb.org/t/p/w500"

SHORT_DATE_LEN = 15


def format_short_date(ms: int | float) -> str:
    """Render epoch milliseconds as e.g. "Tue Jan 30 2024" (UTC)."""

    value = dt.datetime.fromtimestamp(ms / 1000.0, tz=dt.timezone.utc)
    return value.strftime("%a %b %d %Y")[:SHORT_DATE_LEN]


def _require(item: Mapping[str, Any], *path: str) -> Any:
    value: Any = item
    for key in path:
        if not isinstance(value, Mapping) or value.get(key) is None:
            raise ProviderPayloadError(f"Provider item missing {'.'.join(path)}")
        value = value[key]
    return value


def normalize_location(
    result: Mapping[str, Any], *, query: str, now: dt.datetime
) -> LocationRecord:
    return LocationRecord(
        search_query=query,
        formatted_query=_require(result, "formatted_address"),
        latitude=float(_require(result, "geometry", "location", "lat")),
        longitude=float(_require(result, "geometry", "location", "lng")),
        created_at=now,
    )


def normalize_forecast(
    day: Mapping[str, Any], *, location_id: int, now: dt.datetime
) -> ForecastRecord:
    # Dark Sky reports epoch seconds.
    return ForecastRecord(
        forecast_summary=day.get("summary"),
        day_label=format_short_date(int(_require(day, "time")) * 1000),
        location_id=location_id,
        created_at=now,
    )


def normalize_event(
    event: Mapping[str, Any], *, location_id: int, now: dt.datetime
) -> EventRecord:
    # Meetup reports epoch milliseconds.
    group = event.get("group")
    return EventRecord(
        link=event.get("link"),
        name=_require(event, "name"),
        creation_date=format_short_date(_require(event, "created")),
        host=group.get("name") if isinstance(group, Mapping) else None,
        location_id=location_id,
        created_at=now,
    )


def normalize_movie(
    result: Mapping[str, Any], *, location_id: int, now: dt.datetime
) -> MovieRecord:
    poster_path = result.get("poster_path")
    return MovieRecord(
        title=_require(result, "title"),
        overview=result.get("overview"),
        average_votes=result.get("vote_average"),
        total_votes=result.get("vote_count"),
        image_url=f"{TMDB_IMAGE_PREFIX}{poster_path}" if poster_path else None,
        popularity=result.get("popularity"),
        released_on=result.get("release_date") or None,
        location_id=location_id,
        created_at=now,
    )


def normalize_business(
    business: Mapping[str, Any], *, location_id: int, now: dt.datetime
) -> BusinessRecord:
    return BusinessRecord(
        name=_require(business, "name"),
        image_url=business.get("image_url") or None,
        price=business.get("price"),
        rating=business.get("rating"),
        url=business.get("url"),
        location_id=location_id,
        created_at=now,
    )
