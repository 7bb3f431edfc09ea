from __future__ import annotations

import datetime as dt

import pytest

from city_explorer.services.freshness import (
    MAX_AGE_MS,
    Decision,
    ResourceType,
    decide,
    max_age,
)


NOW = dt.datetime(2026, 10, 18, 12, 0, tzinfo=dt.timezone.utc)


def test_max_ages() -> None:
    assert MAX_AGE_MS == {
        ResourceType.FORECAST: 15_000,
        ResourceType.EVENT: 21_600_000,
        ResourceType.BUSINESS: 86_400_000,
        ResourceType.MOVIE: 2_592_000_000,
        ResourceType.TRAIL: 604_800_000,
    }
    assert max_age(ResourceType.MOVIE) == dt.timedelta(days=30)


@pytest.mark.parametrize("resource_type", list(ResourceType))
def test_nothing_cached_means_fetch(resource_type: ResourceType) -> None:
    assert decide(resource_type, None, NOW) is Decision.PURGE_AND_REFETCH


def test_forecast_20s_old_is_stale_10s_old_is_fresh() -> None:
    stale = NOW - dt.timedelta(milliseconds=20_000)
    fresh = NOW - dt.timedelta(milliseconds=10_000)

    assert decide(ResourceType.FORECAST, stale, NOW) is Decision.PURGE_AND_REFETCH
    assert decide(ResourceType.FORECAST, fresh, NOW) is Decision.SERVE_CACHED


@pytest.mark.parametrize(
    "resource_type",
    [ResourceType.EVENT, ResourceType.BUSINESS, ResourceType.MOVIE],
)
def test_exact_max_age_is_still_fresh(resource_type: ResourceType) -> None:
    fetched_at = NOW - max_age(resource_type)
    assert decide(resource_type, fetched_at, NOW) is Decision.SERVE_CACHED

    older = fetched_at - dt.timedelta(milliseconds=1)
    assert decide(resource_type, older, NOW) is Decision.PURGE_AND_REFETCH


def test_naive_timestamps_are_treated_as_utc() -> None:
    fetched_at = (NOW - dt.timedelta(hours=5)).replace(tzinfo=None)
    assert decide(ResourceType.EVENT, fetched_at, NOW) is Decision.SERVE_CACHED
