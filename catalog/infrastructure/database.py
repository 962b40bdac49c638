"""Persistence Gateway: session-scoped units of work over an async SQLAlchemy engine.

Invariants:
    - Exactly one AsyncSession per with_session() call; never reused or shared
    - A unit of work that returns is committed before its result is delivered
    - A unit of work that raises is rolled back; no partial writes are visible
    - Every SQLAlchemy / driver exception leaves as PersistenceError
      (TRANSIENT for connection-level, PERMANENT for data-level)
    - Sessions are closed on every exit path, returning the connection to the pool

Design Decisions:
    - build() is synchronous: engine and session factory construction plus mapper
      configuration run on the startup worker pool, not on the event loop
    - Store I/O goes through async drivers (asyncpg, aiosqlite), so handlers
      suspend on the loop instead of occupying a worker thread
    - expire_on_commit=False: committed records stay readable after the session closes
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy import select, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.orm import configure_mappers

from catalog import models  # noqa: F401  registers tables on Base.metadata
from catalog.core.errors import PersistenceError, PersistenceErrorKind
from catalog.db.base import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=Base)

_TRANSIENT_ERRORS = (
    OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError,
    OSError,
)


def classify_error(exc: BaseException, operation: str) -> PersistenceError:
    """Map a store exception to a PersistenceError of the right kind."""
    if isinstance(exc, PersistenceError):
        return exc
    if isinstance(exc, IntegrityError):
        return PersistenceError(
            "Integrity constraint violated", PersistenceErrorKind.PERMANENT,
            operation, constraint_violation=True,
        )
    if isinstance(exc, _TRANSIENT_ERRORS) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    ):
        return PersistenceError(
            "Connection or operational error", PersistenceErrorKind.TRANSIENT,
            operation,
        )
    if isinstance(exc, DataError):
        return PersistenceError(
            "Value rejected by the store", PersistenceErrorKind.PERMANENT, operation,
        )
    return PersistenceError(
        "Database operation failed", PersistenceErrorKind.PERMANENT, operation,
    )


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    """Pool sizing only applies to server backends; SQLite picks its own pool."""
    if make_url(database_url).get_backend_name() == "sqlite":
        return {}
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


class PersistenceGateway:
    """Owns the session factory; exposes session-scoped query/mutate operations."""

    def __init__(self, engine: AsyncEngine, create_schema: bool = True):
        self.engine = engine
        self.create_schema = create_schema
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def build(
        cls,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        create_schema: bool = True,
    ) -> "PersistenceGateway":
        """Construct engine and session factory. Blocking-capable: run off the loop."""
        configure_mappers()
        engine = create_async_engine(
            database_url, **_engine_options(database_url, pool_size, max_overflow),
        )
        return cls(engine, create_schema=create_schema)

    async def prepare(self) -> None:
        """Validate connectivity and bootstrap the tables."""
        try:
            async with self.engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                if self.create_schema:
                    await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            error = classify_error(e, "connect")
            logger.error(
                f"DB prepare failed: {e}",
                extra={"subsystem": "persistence", "operation": "connect", "kind": error.kind.value},
            )
            raise error from e

    @asynccontextmanager
    async def session(self, operation: str = "query") -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except (SQLAlchemyError, OSError) as e:
            await session.rollback()
            error = classify_error(e, operation)
            logger.error(
                f"DB {operation} error: {e}",
                extra={"operation": operation, "kind": error.kind.value},
            )
            raise error from e
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def with_session(
        self,
        unit_of_work: Callable[[AsyncSession], Awaitable[T]],
        operation: str = "query",
    ) -> T:
        """Run unit_of_work in a fresh session; commit on success, roll back on failure."""
        async with self.session(operation) as session:
            result = await unit_of_work(session)
            await session.commit()
            return result

    async def find_by_id(self, model: type[M], record_id: int) -> M | None:
        """Look up one record; None when absent."""
        async def work(session: AsyncSession) -> M | None:
            return await session.get(model, record_id)

        return await self.with_session(work, "find")

    async def persist(self, record: M) -> M:
        """Insert a transient record and return it with its assigned id."""
        async def work(session: AsyncSession) -> M:
            session.add(record)
            await session.flush()
            return record

        return await self.with_session(work, "persist")

    async def find_all(self, model: type[M]) -> list[M]:
        """All records in store default order."""
        async def work(session: AsyncSession) -> list[M]:
            result = await session.execute(select(model))
            return list(result.scalars().all())

        return await self.with_session(work, "list")

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session("health") as db:
                await db.execute(text("SELECT 1"))
            return True
        except PersistenceError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
