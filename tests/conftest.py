from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
import sys
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient


# Ensure `import city_explorer.*` works when pytest chooses an import mode
# that doesn't automatically add the project root to sys.path.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    # Isolated sqlite DB per test.
    db_path = tmp_path / "test.db"
    monkeypatch.setenv(
        "CITY_EXPLORER_DB_URL", f"sqlite+aiosqlite:///{db_path.as_posix()}"
    )

    # Deterministic provider credentials for URL/header assertions.
    monkeypatch.setenv("CITY_EXPLORER_GOOGLE_MAPS_API_KEY", "google-key")
    monkeypatch.setenv("CITY_EXPLORER_DARK_SKY_API_KEY", "darksky-key")
    monkeypatch.setenv("CITY_EXPLORER_MEETUP_API_KEY", "meetup-key")
    monkeypatch.setenv("CITY_EXPLORER_MOVIE_DB_API_KEY", "tmdb-key")
    monkeypatch.setenv("CITY_EXPLORER_YELP_API_KEY", "yelp-key")

    # Clear settings cache and reset DB engine/sessionmaker.
    from city_explorer.core.settings import get_settings

    get_settings.cache_clear()

    from city_explorer.db import session as db_session

    db_session._engine = None  # noqa: SLF001
    db_session._sessionmaker = None  # noqa: SLF001

    # Import models so Base.metadata is fully populated.
    import city_explorer.models  # noqa: F401

    from city_explorer.db.base import Base

    async def _init_schema() -> None:
        engine = db_session.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_init_schema())

    from city_explorer.main import create_app

    app = create_app()
    return TestClient(app)


@pytest.fixture()
def store(client):  # noqa: ARG001
    from city_explorer.db.session import get_sessionmaker
    from city_explorer.services.store import CacheStore

    return CacheStore(get_sessionmaker())


@dataclass
class FakeUpstream:
    """Canned provider responses keyed by host."""

    responses: dict[str, tuple[int, Any]] = field(default_factory=dict)
    calls: list[httpx.Request] = field(default_factory=list)

    def reply(self, host: str, payload: Any, *, status: int = 200) -> None:
        self.responses[host] = (status, payload)

    def hosts_called(self) -> list[str]:
        return [r.url.host for r in self.calls]


@pytest.fixture()
def upstream(monkeypatch: pytest.MonkeyPatch) -> FakeUpstream:
    fake = FakeUpstream()

    async def fake_get(self, url, params=None, headers=None, timeout=None):  # noqa: ANN001
        req = httpx.Request("GET", url, params=params, headers=headers)
        fake.calls.append(req)
        if req.url.host not in fake.responses:
            raise httpx.ConnectError("no route to provider", request=req)
        status, payload = fake.responses[req.url.host]
        return httpx.Response(status, json=payload, request=req)

    monkeypatch.setattr(httpx.AsyncClient, "get", fake_get)
    return fake
