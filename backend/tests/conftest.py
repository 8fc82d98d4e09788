"""
Pytest fixtures for settings, connection manager, session and events.

Each test gets a fresh in-memory SQLite database (aiosqlite), so tables are
created per test and disappear when the manager is disposed.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.core.config import Settings
from eventbook.db.base import create_schema
from eventbook.db.connection import ConnectionManager
from eventbook.models.event import Event
from eventbook.services.event_checker import SqlEventExistenceChecker

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings() -> Settings:
    return Settings(DATABASE_URL=TEST_DATABASE_URL, ENVIRONMENT="test")


@pytest_asyncio.fixture
async def connections(settings: Settings) -> AsyncGenerator[ConnectionManager, None]:
    """Connected manager with the schema created."""
    manager = ConnectionManager(settings)
    engine = await manager.get_connection()
    await create_schema(engine)
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def db_session(connections: ConnectionManager) -> AsyncGenerator[AsyncSession, None]:
    async with connections.session() as session:
        yield session


@pytest.fixture
def checker(db_session: AsyncSession) -> SqlEventExistenceChecker:
    return SqlEventExistenceChecker(db_session)


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    event = Event(title="Test Concert")
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def other_event(db_session: AsyncSession) -> Event:
    event = Event(title="Second Show")
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event
