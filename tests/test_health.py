from __future__ import annotations

from fastapi.testclient import TestClient


def test_healthz(client: TestClient) -> None:
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers.get("X-Trace-Id")


def test_readyz_with_schema(client: TestClient) -> None:
    r = client.get("/readyz")
    assert r.status_code == 200
    assert r.json() == {"status": "ready"}


def test_trace_id_is_echoed(client: TestClient) -> None:
    r = client.get("/healthz", headers={"X-Trace-Id": "trace-123"})
    assert r.headers["X-Trace-Id"] == "trace-123"


def test_unknown_route_keeps_its_status(client: TestClient) -> None:
    r = client.get("/trails")
    assert r.status_code == 404
