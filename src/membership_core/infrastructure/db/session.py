"""Async SQLAlchemy engine and session factory helpers."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record) -> None:
    """Enforce foreign keys per connection; SQLite leaves them off by default."""

    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database_engine(database_url: str) -> AsyncEngine:
    """Create an async engine for the provided database URL."""

    engine = create_async_engine(database_url)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(
    database_url: str | None = None,
    *,
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a reusable async session factory bound to engine or a new one for database_url."""

    if engine is None:
        if database_url is None:
            raise ValueError("database_url or engine is required")
        engine = create_database_engine(database_url)
    return async_sessionmaker(engine, expire_on_commit=False)
