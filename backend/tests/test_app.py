"""
Tests for the application entry point: health, metrics and the injected
connection manager.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.db.connection import ConnectionManager
from eventbook.main import create_app, get_db


def client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_health_before_connect(settings):
    """App starts without touching the database."""
    app = create_app(settings)

    async with client_for(app) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "unconnected"
    assert data["version"] == settings.APP_VERSION


@pytest.mark.asyncio
async def test_health_reports_connected(settings, connections):
    app = create_app(settings, connections=connections)

    async with client_for(app) as client:
        response = await client.get("/health")

    assert response.json()["database"] == "connected"


@pytest.mark.asyncio
async def test_metrics_endpoint(settings):
    async with client_for(create_app(settings)) as client:
        response = await client.get("/metrics")

    assert response.status_code == 200
    assert "db_connection_attempts_total" in response.text


@pytest.mark.asyncio
async def test_get_db_connects_lazily(settings):
    """The session dependency connects on first use and reuses the engine."""
    manager = ConnectionManager(settings)

    sessions = get_db(manager)
    session = await sessions.__anext__()
    assert isinstance(session, AsyncSession)
    await sessions.aclose()

    sessions = get_db(manager)
    await sessions.__anext__()
    await sessions.aclose()

    assert manager.attempts == 1
    await manager.dispose()
