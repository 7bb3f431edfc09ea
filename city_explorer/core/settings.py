from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CITY_EXPLORER_",
        case_sensitive=False,
    )

    # Design default: local async sqlite database.
    db_url: str = "sqlite+aiosqlite:///./data/dev.db"

    log_level: str = "INFO"

    # The browser front end is served from a different origin.
    cors_allow_origin: str = "*"

    # Provider credentials
    google_maps_api_key: str = ""
    dark_sky_api_key: str = ""
    meetup_api_key: str = ""
    movie_db_api_key: str = ""
    yelp_api_key: str = ""

    # Provider endpoints
    geocode_base_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    dark_sky_base_url: str = "https://api.darksky.net/forecast"
    meetup_base_url: str = "https://api.meetup.com/find/upcoming_events"
    movie_db_base_url: str = "https://api.themoviedb.org/3/search/movie"
    yelp_base_url: str = "https://api.yelp.com/v3/businesses/search"

    # None keeps httpx from timing out; a hung provider hangs its request.
    provider_timeout_s: float | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
