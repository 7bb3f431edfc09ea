from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from city_explorer.core.errors import ProviderEmptyResult, ProviderTransportError
from city_explorer.core.settings import Settings


logger = logging.getLogger(__name__)


def _result_items(payload: Any, *path: str, provider: str) -> list[dict[str, Any]]:
    """Dig the result list out of a provider payload.

    A missing or empty list is the provider telling us it has nothing.
    """

    value = payload
    for key in path:
        if not isinstance(value, dict):
            value = None
            break
        value = value.get(key)
    items: list[dict[str, Any]] = []
    if isinstance(value, list):
        items = [item for item in value if isinstance(item, dict)]
    if not items:
        raise ProviderEmptyResult(f"{provider} returned no {'.'.join(path)}")
    return items


class ProviderClient:
    """Single-shot JSON GET against one upstream API.

    No retries: a failure surfaces once to the caller.
    """

    name = "provider"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_s: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout_s
        self._client = http_client

    async def _get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        close_client = False
        client = self._client
        if client is None:
            close_client = True
            client = httpx.AsyncClient()

        logger.debug("Calling %s", self.name)
        try:
            try:
                resp = await client.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=self._timeout,
                )
            except httpx.HTTPError as e:
                raise ProviderTransportError(f"{self.name} request failed") from e

            if not resp.is_success:
                raise ProviderTransportError(
                    f"{self.name} responded with status {resp.status_code}"
                )
            try:
                return resp.json()
            except ValueError as e:
                raise ProviderTransportError(f"{self.name} returned invalid JSON") from e
        finally:
            if close_client:
                await client.aclose()


class GoogleGeocodingClient(ProviderClient):
    name = "google-geocoding"

    async def geocode(self, address: str) -> dict[str, Any]:
        data = await self._get_json(
            self._base_url,
            params={"key": self._api_key, "address": address},
        )
        # Only the best match is used.
        return _result_items(data, "results", provider=self.name)[0]


class DarkSkyClient(ProviderClient):
    name = "dark-sky"

    async def daily_forecast(
        self, *, latitude: float, longitude: float
    ) -> list[dict[str, Any]]:
        data = await self._get_json(
            f"{self._base_url}/{self._api_key}/{latitude},{longitude}"
        )
        return _result_items(data, "daily", "data", provider=self.name)


class MeetupClient(ProviderClient):
    name = "meetup"

    async def upcoming_events(
        self, *, latitude: float, longitude: float
    ) -> list[dict[str, Any]]:
        data = await self._get_json(
            self._base_url,
            params={
                "lat": latitude,
                "lon": longitude,
                "sign": "true",
                "photo-host": "public",
                "page": 20,
                "key": self._api_key,
            },
        )
        return _result_items(data, "events", provider=self.name)


class MovieDbClient(ProviderClient):
    name = "tmdb"

    async def search(self, query: str) -> list[dict[str, Any]]:
        data = await self._get_json(
            self._base_url,
            params={
                "api_key": self._api_key,
                "language": "en-US",
                "page": 1,
                "include_adult": "false",
                "query": query,
            },
        )
        return _result_items(data, "results", provider=self.name)


class YelpClient(ProviderClient):
    name = "yelp"

    async def search(
        self, *, latitude: float, longitude: float
    ) -> list[dict[str, Any]]:
        data = await self._get_json(
            self._base_url,
            params={"latitude": latitude, "longitude": longitude},
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        return _result_items(data, "businesses", provider=self.name)


@dataclass(frozen=True)
class Providers:
    geocoding: GoogleGeocodingClient
    forecast: DarkSkyClient
    events: MeetupClient
    movies: MovieDbClient
    businesses: YelpClient


def build_providers(
    settings: Settings, *, http_client: httpx.AsyncClient | None = None
) -> Providers:
    common: dict[str, Any] = {
        "timeout_s": settings.provider_timeout_s,
        "http_client": http_client,
    }
    return Providers(
        geocoding=GoogleGeocodingClient(
            base_url=settings.geocode_base_url,
            api_key=settings.google_maps_api_key,
            **common,
        ),
        forecast=DarkSkyClient(
            base_url=settings.dark_sky_base_url,
            api_key=settings.dark_sky_api_key,
            **common,
        ),
        events=MeetupClient(
            base_url=settings.meetup_base_url,
            api_key=settings.meetup_api_key,
            **common,
        ),
        movies=MovieDbClient(
            base_url=settings.movie_db_base_url,
            api_key=settings.movie_db_api_key,
            **common,
        ),
        businesses=YelpClient(
            base_url=settings.yelp_base_url,
            api_key=settings.yelp_api_key,
            **common,
        ),
    )
