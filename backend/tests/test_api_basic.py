"""
Basic API tests for the WonderLens API
"""
import pytest

from wonderlens.config import settings


@pytest.mark.asyncio
async def test_health_check(client):
    """Test health endpoint"""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_cors_allows_known_frontend_origin(client):
    response = await client.options(
        "/api/kidnews",
        headers={
            "Origin": "https://wonderlens.app",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://wonderlens.app"


@pytest.mark.asyncio
async def test_cors_rejects_unknown_origin(client):
    response = await client.options(
        "/api/kidnews",
        headers={
            "Origin": "https://evil.example.com",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert "access-control-allow-origin" not in response.headers


@pytest.mark.asyncio
async def test_oversized_body_rejected(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BODY_BYTES", 16)
    response = await client.post("/api/analyze-image", json={"image": "x" * 64})
    assert response.status_code == 413
    assert response.json()["error"] == "Request body too large"


@pytest.mark.asyncio
async def test_unknown_route_is_json_404(client):
    response = await client.get("/api/nope")
    assert response.status_code == 404
    assert "error" in response.json()
