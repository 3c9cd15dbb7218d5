"""
Database engine and session management.

Provides async SQLAlchemy engine and session factory for FastAPI, plus the
savepoint helper every mutating deck operation runs inside.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from deckbuilder.config import settings
from deckbuilder.models.db import Base
from deckbuilder.models.failure import StoreError

logger = logging.getLogger(__name__)


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Make SAVEPOINT and foreign keys work on SQLite.

    The sqlite3 driver defers BEGIN on its own, which breaks nested
    transactions. Take over BEGIN and turn on foreign key enforcement.
    No-op for other backends.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)
enable_sqlite_savepoints(engine)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    One session per request; commits on success, rolls back on store errors.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[None]:
    """
    Run a block inside a savepoint.

    Everything written in the block is rolled back if it raises.
    IntegrityError propagates unchanged so callers can treat it as a
    conflict; any other store failure is raised as StoreError.
    """
    try:
        async with session.begin_nested():
            yield
    except IntegrityError:
        raise
    except SQLAlchemyError as e:
        logger.exception("Store operation failed")
        raise StoreError(type(e).__name__) from e


async def init_db() -> None:
    """
    Initialize database tables.

    Creates all tables defined in the ORM models.
    Should be called once at application startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

