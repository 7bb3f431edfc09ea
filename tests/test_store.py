from __future__ import annotations

import asyncio
import datetime as dt

import pytest
import sqlalchemy as sa

from city_explorer.db.base import utcnow
from city_explorer.db.session import get_sessionmaker
from city_explorer.models import Forecast, Location
from city_explorer.schemas.records import ForecastRecord, LocationRecord
from city_explorer.services import orchestrator
from city_explorer.services.freshness import ResourceType
from city_explorer.services.store import CacheStore


def _location(query: str = "seattle") -> LocationRecord:
    return LocationRecord(
        search_query=query,
        formatted_query="Seattle, WA, USA",
        latitude=47.6062,
        longitude=-122.3321,
        created_at=utcnow(),
    )


def _forecasts(location_id: int, created_at: dt.datetime, n: int = 3) -> list[ForecastRecord]:
    return [
        ForecastRecord(
            forecast_summary=f"day {i}",
            day_label="Tue Jan 30 2024",
            location_id=location_id,
            created_at=created_at,
        )
        for i in range(n)
    ]


def test_location_insert_and_find(store: CacheStore) -> None:
    async def _run() -> None:
        assert await store.find_location("seattle") is None

        location_id = await store.insert_location(_location())
        found = await store.find_location("seattle")

        assert found is not None
        assert found.id == location_id
        assert found.formatted_query == "Seattle, WA, USA"
        assert found.created_at.tzinfo is not None

    asyncio.run(_run())


def test_duplicate_search_query_returns_the_stored_id(store: CacheStore) -> None:
    async def _run() -> None:
        first = await store.insert_location(_location())
        second = await store.insert_location(_location())

        assert second == first
        sessionmaker = get_sessionmaker()
        async with sessionmaker() as session:
            count = (
                await session.execute(sa.select(sa.func.count()).select_from(Location))
            ).scalar_one()
        assert count == 1

    asyncio.run(_run())


class SlowGeocoder:
    """Yields to the loop before answering so concurrent misses overlap."""

    def __init__(self) -> None:
        self.calls = 0

    async def geocode(self, address: str) -> dict:
        self.calls += 1
        await asyncio.sleep(0.05)
        return {
            "formatted_address": "Seattle, WA, USA",
            "geometry": {"location": {"lat": 47.6062, "lng": -122.3321}},
        }


def test_concurrent_location_misses_share_one_row(store: CacheStore) -> None:
    geocoder = SlowGeocoder()

    async def _run():
        return await asyncio.gather(
            orchestrator.get_location(store, geocoder, "seattle"),
            orchestrator.get_location(store, geocoder, "seattle"),
        )

    first, second = asyncio.run(_run())

    # Both requests missed and geocoded; neither failed on the unique key.
    assert geocoder.calls == 2
    assert first.id is not None
    assert first.id == second.id

    found = asyncio.run(store.find_location("seattle"))
    assert found is not None
    assert found.id == first.id


def test_cached_set_reads_marker_and_rows_together(store: CacheStore) -> None:
    fetched = utcnow() - dt.timedelta(seconds=5)

    async def _run() -> None:
        location_id = await store.insert_location(_location())
        assert await store.cached_set(ResourceType.FORECAST, location_id) == (None, [])

        await store.insert_many(ResourceType.FORECAST, _forecasts(location_id, fetched))

        fetched_at, rows = await store.cached_set(ResourceType.FORECAST, location_id)
        assert fetched_at == fetched
        assert [r.forecast_summary for r in rows] == ["day 0", "day 1", "day 2"]

        await store.purge_by_type_and_location(ResourceType.FORECAST, location_id)
        assert await store.cached_set(ResourceType.FORECAST, location_id) == (None, [])

    asyncio.run(_run())


def test_insert_many_find_and_fetch_marker(store: CacheStore) -> None:
    fetched = utcnow() - dt.timedelta(seconds=5)

    async def _run() -> None:
        location_id = await store.insert_location(_location())
        other_id = await store.insert_location(_location("tacoma"))

        assert await store.fetched_at(ResourceType.FORECAST, location_id) is None
        assert await store.find_by_type_and_location(ResourceType.FORECAST, location_id) == []

        await store.insert_many(ResourceType.FORECAST, _forecasts(location_id, fetched))
        await store.insert_many(ResourceType.FORECAST, _forecasts(other_id, fetched, n=1))

        rows = await store.find_by_type_and_location(ResourceType.FORECAST, location_id)
        assert [r.forecast_summary for r in rows] == ["day 0", "day 1", "day 2"]
        assert all(r.location_id == location_id for r in rows)
        assert await store.fetched_at(ResourceType.FORECAST, location_id) == fetched

        # Other resource types for the same location are untouched.
        assert await store.fetched_at(ResourceType.EVENT, location_id) is None

    asyncio.run(_run())


def test_purge_removes_rows_and_marker_and_is_idempotent(store: CacheStore) -> None:
    async def _run() -> None:
        location_id = await store.insert_location(_location())
        other_id = await store.insert_location(_location("tacoma"))
        await store.insert_many(ResourceType.FORECAST, _forecasts(location_id, utcnow()))
        await store.insert_many(ResourceType.FORECAST, _forecasts(other_id, utcnow()))

        assert await store.purge_by_type_and_location(ResourceType.FORECAST, location_id) == 3
        assert await store.find_by_type_and_location(ResourceType.FORECAST, location_id) == []
        assert await store.fetched_at(ResourceType.FORECAST, location_id) is None

        assert await store.purge_by_type_and_location(ResourceType.FORECAST, location_id) == 0

        remaining = await store.find_by_type_and_location(ResourceType.FORECAST, other_id)
        assert len(remaining) == 3

    asyncio.run(_run())


def test_fetched_at_falls_back_to_oldest_row_without_marker(store: CacheStore) -> None:
    newer = utcnow()
    older = newer - dt.timedelta(minutes=2)

    async def _run() -> None:
        location_id = await store.insert_location(_location())

        sessionmaker = get_sessionmaker()
        async with sessionmaker() as session:
            session.add_all(
                [
                    Forecast(location_id=location_id, day_label="a", created_at=newer),
                    Forecast(location_id=location_id, day_label="b", created_at=older),
                ]
            )
            await session.commit()

        assert await store.fetched_at(ResourceType.FORECAST, location_id) == older

    asyncio.run(_run())


def test_trail_has_no_storage(store: CacheStore) -> None:
    async def _run() -> None:
        with pytest.raises(ValueError):
            await store.find_by_type_and_location(ResourceType.TRAIL, 1)

    asyncio.run(_run())
