"""
tests.test_smoke

Smoke tests: the service boots, serves probes and the dev sign-in flow.
"""

from __future__ import annotations

import httpx
import pytest

from identity_admin.api.app import create_app
from tests.support import make_settings


@pytest.mark.asyncio
async def test_health_endpoints(tmp_path) -> None:
    app = create_app(settings=make_settings(tmp_path))

    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/health")
            assert r.status_code == 200
            assert r.json()["status"] == "OK"
            assert "timestamp" in r.json()

            r = await client.get("/readyz")
            assert r.status_code == 200
            assert r.json()["status"] == "ready"

            r = await client.get("/health", headers={"x-request-id": "req-123"})
            assert r.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_dev_principal_and_token_flow(tmp_path) -> None:
    app = create_app(settings=make_settings(tmp_path))

    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.post("/v1/dev/principals", json={"email": "Alice@Example.com"})
            assert r.status_code == 200
            assert r.json()["email"] == "alice@example.com"

            r = await client.post("/v1/dev/token", json={"email": "alice@example.com"})
            assert r.status_code == 200
            token = r.json()["access_token"]

            r = await client.get(
                "/api/auth/verify-token", headers={"Authorization": f"Bearer {token}"}
            )
            assert r.status_code == 200
            assert r.json()["valid"] is True
            assert r.json()["user"]["email"] == "alice@example.com"

            r = await client.post("/v1/dev/principals", json={"email": "alice@example.com"})
            assert r.status_code == 400


@pytest.mark.asyncio
async def test_dev_routes_absent_in_prod(tmp_path) -> None:
    app = create_app(settings=make_settings(tmp_path, env="prod"))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.post("/v1/dev/token", json={"email": "alice@example.com"})
        assert r.status_code == 404
