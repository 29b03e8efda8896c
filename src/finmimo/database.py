"""Async SQLAlchemy engine and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


class Database:
    """Owns one engine and the session factory bound to it."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, url: str) -> Database:
        """Build a pooled engine for a PostgreSQL (asyncpg) URL."""
        engine = create_async_engine(
            url,
            pool_size=20,
            max_overflow=10,
            pool_pre_ping=True,
            echo=False,
            connect_args={"statement_cache_size": 0},
        )
        return cls(engine)

    def session(self) -> AsyncSession:
        """Open a new session; use as an async context manager."""
        return self.session_factory()

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Return the Database attached to the running application."""
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        msg = "Database not initialized. Start the app through its lifespan first."
        raise RuntimeError(msg)
    return database


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency).

    Uncommitted work is rolled back when the session closes, so a request that
    fails before its router commits leaves no trace.
    """
    async with get_database(request).session() as session:
        yield session
