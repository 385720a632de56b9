"""
Async engine and session factory for the record store.

PostgreSQL/TimescaleDB is reached through asyncpg in production; tests use
aiosqlite. The runtime owns the engine and disposes it on shutdown, and the
Alembic environment builds its own engine from the same URL.

CHANGELOG:
- 2026-10-06: Engine ownership moved to the runtime; drop module singletons
- 2026-10-03: Initial creation
"""

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def get_database_url() -> str:
    """Return DATABASE_URL.

    Raises:
        RuntimeError: If DATABASE_URL is unset or empty.
    """
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL environment variable is required")
    return url


def create_engine(url: str | None = None) -> AsyncEngine:
    """Build an async engine for ``url`` (DATABASE_URL when omitted)."""
    return create_async_engine(url or get_database_url(), echo=False)


def create_session_factory(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to ``engine``.

    Sessions keep attribute state after commit, so records read inside a
    store call stay usable once the session is closed.
    """
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
