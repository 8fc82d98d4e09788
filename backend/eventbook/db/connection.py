"""
Process-wide database connection management.

CONNECTION STRATEGY: lazy, memoized, failure-resettable
=======================================================

Creating an engine and opening its first connection is expensive, so it
happens once per ConnectionManager. The manager moves through three states:

  UNCONNECTED -> CONNECTING   first get_connection() starts one attempt task
  CONNECTING  -> CONNECTED    engine cached; later calls return it directly
  CONNECTING  -> UNCONNECTED  attempt discarded; the error reaches every
                              caller awaiting it and the next call retries

Concurrent callers arriving while an attempt is in flight await the same
task, so N simultaneous first requests produce exactly one connection
attempt. The task is awaited through asyncio.shield so a cancelled caller
does not cancel the attempt the others are waiting on. The transitions out of
CONNECTING are made by a done-callback on the attempt task, so they happen
even when every caller has been cancelled; dispose() abandons an attempt
still in flight.

Work is never queued behind a pending connection: session() raises
immediately when the manager is not CONNECTED.

The manager is an explicit object created by the process entry point
(see eventbook.main.create_app) and injected where it is needed.
"""

import asyncio
import enum
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from eventbook.core.config import Settings
from eventbook.core.errors import DatabaseConnectionError
from eventbook.core.logging import get_logger
from eventbook.core.metrics import record_connection_attempt

logger = get_logger(__name__)

EngineFactory = Callable[..., AsyncEngine]


class ConnectionState(str, enum.Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionManager:
    """Lazily establishes and shares a single AsyncEngine."""

    def __init__(self, settings: Settings, engine_factory: EngineFactory = create_async_engine):
        self._settings = settings
        self._engine_factory = engine_factory
        self._engine: Optional[AsyncEngine] = None
        self._pending: Optional[asyncio.Task] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None
        self.attempts = 0

    @property
    def state(self) -> ConnectionState:
        if self._engine is not None:
            return ConnectionState.CONNECTED
        if self._pending is not None:
            return ConnectionState.CONNECTING
        return ConnectionState.UNCONNECTED

    async def get_connection(self) -> AsyncEngine:
        """Return the shared engine, connecting first if needed."""
        if self._engine is not None:
            return self._engine

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._connect())
            self._pending.add_done_callback(self._attempt_finished)

        return await asyncio.shield(self._pending)

    def _attempt_finished(self, attempt: asyncio.Task) -> None:
        # Runs whether or not any caller is still awaiting the attempt
        if self._pending is not attempt:
            return  # discarded by dispose()
        self._pending = None
        if attempt.cancelled() or attempt.exception() is not None:
            return
        engine = attempt.result()
        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    async def _connect(self) -> AsyncEngine:
        self.attempts += 1
        engine = None
        try:
            url = make_url(self._settings.DATABASE_URL)
            logger.info(
                "db_connecting",
                backend=url.get_backend_name(),
                host=url.host,
                database=url.database,
                attempt=self.attempts,
            )
            engine = self._engine_factory(self._settings.DATABASE_URL, **self._engine_options(url))
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except asyncio.CancelledError:
            if engine is not None:
                await engine.dispose()
            raise
        except Exception as e:
            record_connection_attempt(success=False)
            logger.error("db_connection_failed", error=str(e), attempt=self.attempts)
            if engine is not None:
                await engine.dispose()
            raise DatabaseConnectionError(f"Could not connect to database: {e}") from e

        record_connection_attempt(success=True)
        logger.info("db_connected", attempt=self.attempts)
        return engine

    def _engine_options(self, url) -> dict:
        options = {"pool_pre_ping": True}
        # SQLite uses a static or null pool, which rejects sizing arguments
        if url.get_backend_name() != "sqlite":
            options.update(
                pool_size=self._settings.DB_POOL_SIZE,
                max_overflow=self._settings.DB_MAX_OVERFLOW,
                pool_timeout=self._settings.DB_POOL_TIMEOUT,
                pool_recycle=self._settings.DB_POOL_RECYCLE,
            )
        return options

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            raise DatabaseConnectionError(
                f"Database is not connected (state={self.state.value}); call get_connection() first"
            )
        return self._sessionmaker

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session on the established engine. Fails fast when not connected."""
        factory = self.sessionmaker
        async with factory() as session:
            yield session

    async def dispose(self) -> None:
        """Close pooled connections and return to UNCONNECTED, abandoning any attempt in flight."""
        engine, self._engine = self._engine, None
        pending, self._pending = self._pending, None
        self._sessionmaker = None

        if pending is not None:
            pending.cancel()
            (outcome,) = await asyncio.gather(pending, return_exceptions=True)
            if isinstance(outcome, AsyncEngine):
                await outcome.dispose()

        if engine is not None:
            await engine.dispose()
            logger.info("db_disposed")
