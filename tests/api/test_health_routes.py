"""Health & Readiness — verifies liveness, readiness and missing-services behaviour."""

from credit_ledger.main import app


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_ready_with_database(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


async def test_not_ready_while_draining(client, services):
    await services.pool.drain(timeout_s=1)

    res = await client.get("/api/v1/health/ready")

    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"


async def test_missing_services_is_503(client, monkeypatch):
    monkeypatch.delattr(app.state, "services")

    res = await client.get("/api/v1/accounts")

    assert res.status_code == 503
    assert res.json()["error"]["code"] == "SERVICE_UNAVAILABLE"
