"""Database session and engine management."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from disaster_reports.core.config import get_settings
from disaster_reports.db.base import Base


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy issue BEGIN on SQLite so SAVEPOINTs nest inside the transaction."""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


_settings = get_settings()
engine = create_async_engine(_settings.database_url, future=True, echo=False)
if engine.dialect.name == "sqlite":
    enable_sqlite_savepoints(engine)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_models() -> None:
    # Registers every mapped class on Base.metadata before create_all.
    import disaster_reports.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
