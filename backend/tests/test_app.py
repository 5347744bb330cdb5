"""
PlaceBook Backend: Application Wiring Tests
===========================================

What:  Behaviour that belongs to the app rather than one resource: unknown
       routes, CORS, request ids, health, rate limiting, lifecycle.
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from placebook.config import settings
from placebook.main import create_app
from placebook.services.user_service import user_service


class TestRouting:

    @pytest.mark.asyncio
    async def test_unknown_route_404(self, client):
        response = await client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"message": "Could not find this route."}

    @pytest.mark.asyncio
    async def test_wrong_method_has_message(self, client):
        response = await client.put("/api/users")

        assert response.status_code == 405
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_request_id_header(self, client):
        response = await client.get("/api/users")
        assert response.headers["X-Request-ID"]

        echoed = await client.get("/api/users", headers={"X-Request-ID": "trace-123"})
        assert echoed.headers["X-Request-ID"] == "trace-123"


class TestCors:

    @pytest.mark.asyncio
    async def test_preflight_bypasses_auth(self, client):
        response = await client.options(
            "/api/places",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PATCH" in response.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    async def test_simple_request_gets_cors_header(self, client):
        response = await client.get("/api/users", headers={"Origin": "http://localhost:3000"})
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_rate_limited_response_gets_cors_header(self, client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 1)
        credentials = {"email": "nobody@example.com", "password": "secret1"}
        origin = {"Origin": "http://frontend"}

        await client.post("/api/users/login", json=credentials, headers=origin)
        response = await client.post("/api/users/login", json=credentials, headers=origin)

        assert response.status_code == 429
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.json()["message"].startswith("Too many requests.")

    @pytest.mark.asyncio
    async def test_unexpected_error_gets_cors_header(self, client, monkeypatch):
        monkeypatch.setattr(
            user_service, "get_users", AsyncMock(side_effect=RuntimeError("boom"))
        )

        response = await client.get("/api/users", headers={"Origin": "http://frontend"})

        assert response.status_code == 500
        assert response.json() == {"message": "An unknown error occurred."}
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_bare_options_lists_allowed_methods(self, client):
        response = await client.options("/api/places")

        assert response.status_code == 200
        assert "POST" in response.headers["allow"]

    @pytest.mark.asyncio
    async def test_bare_options_on_unknown_route_404(self, client):
        response = await client.options("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"message": "Could not find this route."}


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["geocoding"] == "configured"
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_degraded_without_api_key(self, client, monkeypatch):
        monkeypatch.setattr(settings, "google_api_key", "")

        body = (await client.get("/health")).json()

        assert body["status"] == "degraded"
        assert body["geocoding"] == "missing_api_key"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_login_attempts_limited_per_ip(self, client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 2)
        credentials = {"email": "nobody@example.com", "password": "secret1"}

        first = await client.post("/api/users/login", json=credentials)
        second = await client.post("/api/users/login", json=credentials)
        third = await client.post("/api/users/login", json=credentials)

        assert first.status_code == second.status_code == 403
        assert third.status_code == 429
        assert int(third.headers["Retry-After"]) > 0
        assert third.json()["message"].startswith("Too many requests.")

    @pytest.mark.asyncio
    async def test_other_endpoints_not_limited(self, client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 1)

        for _ in range(3):
            response = await client.get("/api/users")
            assert response.status_code == 200


class TestLifespan:

    @pytest.mark.asyncio
    async def test_shutdown_closes_geocoder_and_database(self, database, geocoder):
        app = create_app(database=database, geocoder=geocoder)

        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                assert (await client.get("/health")).status_code == 200

        assert geocoder.closed is True
