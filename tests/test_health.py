import pytest
from httpx import AsyncClient

from muchtodo.config import APP_NAME, APP_VERSION


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test the /health endpoint."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "Application is running normally."}


@pytest.mark.asyncio
async def test_get_version(client: AsyncClient):
    """Test the /version endpoint."""
    response = await client.get("/version")
    assert response.status_code == 200
    assert response.json()["app_name"] == APP_NAME
    assert response.json()["version"] == APP_VERSION


@pytest.mark.asyncio
async def test_get_config_hides_secrets(client: AsyncClient):
    response = await client.get("/config")
    assert response.status_code == 200
    body = response.json()
    assert body["server_port"] == "8080"
    assert body["allowed_origins"] == ["http://localhost:5173"]
    assert body["jwt_expiration_hours"] == 72
    for secret in ("mongo_uri", "jwt_secret_key", "redis_password"):
        assert secret not in body


@pytest.mark.asyncio
async def test_cors_allows_configured_origin(client: AsyncClient):
    response = await client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


@pytest.mark.asyncio
async def test_cors_rejects_other_origin(client: AsyncClient):
    response = await client.get("/health", headers={"Origin": "http://evil.example"})
    assert "access-control-allow-origin" not in response.headers
