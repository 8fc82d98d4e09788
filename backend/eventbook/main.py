"""
Eventbook - process entry point.

Builds the FastAPI application that owns the process-wide ConnectionManager.
Settings are loaded inside create_app(), so a missing DATABASE_URL raises
ConfigurationError before the server accepts any traffic.

Run with:
    uvicorn eventbook.main:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.core.config import Settings, load_settings
from eventbook.core.logging import setup_logging, get_logger
from eventbook.core.metrics import metrics_endpoint
from eventbook.db.connection import ConnectionManager


def create_app(
    settings: Optional[Settings] = None,
    connections: Optional[ConnectionManager] = None,
) -> FastAPI:
    if settings is None:
        settings = load_settings()
    if connections is None:
        connections = ConnectionManager(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle: startup and shutdown hooks."""
        setup_logging(settings)
        logger = get_logger(__name__)

        logger.info(
            "application_starting",
            app=settings.APP_NAME,
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
        )

        yield

        await app.state.connections.dispose()
        logger.info("application_shutdown")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.connections = connections

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        manager: ConnectionManager = request.app.state.connections
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "database": manager.state.value,
        }

    @app.get("/metrics", tags=["Health"])
    def metrics():
        return metrics_endpoint()

    return app


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.connections


async def get_db(
    connections: ConnectionManager = Depends(get_connection_manager),
) -> AsyncGenerator[AsyncSession, None]:
    """Per-request session on the shared engine, connecting on first use."""
    await connections.get_connection()
    async with connections.session() as session:
        yield session
