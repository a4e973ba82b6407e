"""Health Probes — tests for liveness and readiness."""

from tests.api.api_helpers import seed


class DownSlotStorage:
    async def health_check(self):
        return False


async def test_liveness(client):
    response = await client.get("/api/v1/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_readiness_with_storage(client):
    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 200
    assert response.json()["checks"]["storage"] == "healthy"


async def test_readiness_storage_down(app, client):
    app.state.storage = DownSlotStorage()

    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 503
    assert response.json()["reason"] == "storage_unavailable"


async def test_readiness_reports_loaded_records(client):
    await seed(client)

    body = (await client.get("/api/v1/health/ready")).json()

    assert body["records"] == {"students": 2, "groups": 1}


async def test_liveness_reports_app_version(client):
    body = (await client.get("/api/v1/health/")).json()

    assert body["service"] == "teacherhub-api"
    assert body["version"] == "1.0.0"
