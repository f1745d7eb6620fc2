"""Health endpoint tests."""

from httpx import AsyncClient


async def test_api_health_reports_connected_database(client: AsyncClient, db_session):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "connected"}


async def test_api_health_stays_200_when_database_is_down(client: AsyncClient, db_session):
    db_session.execute.side_effect = ConnectionRefusedError("connection refused")
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "disconnected"}


async def test_liveness(client: AsyncClient):
    resp = await client.get("/health/live")
    assert resp.status_code == 200
    assert resp.json() == {"status": "live"}


async def test_readiness_with_cache_disabled(client: AsyncClient):
    resp = await client.get("/health/ready")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ready"
    assert body["checks"]["postgresql"]["status"] == "ok"
    assert body["checks"]["redis"]["status"] == "disabled"


async def test_readiness_fails_without_database(client: AsyncClient, db_session):
    db_session.execute.side_effect = ConnectionRefusedError("connection refused")
    resp = await client.get("/health/ready")
    assert resp.status_code == 503
    assert resp.json()["status"] == "not_ready"


async def test_metrics_endpoint(client: AsyncClient):
    await client.get("/health/live")
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "projecthub_http_requests_total" in resp.text
