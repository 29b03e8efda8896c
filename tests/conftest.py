"""Shared test fixtures.

Everything runs against an in-memory SQLite database (aiosqlite) whose schema
is created from the ORM metadata. ASGITransport does not run the lifespan, so
the app gets its Database attached directly.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from finmimo.config import Settings
from finmimo.database import Database
from finmimo.db.base import Base
from finmimo.gamification.seed import seed_achievements
from finmimo.main import create_app
from tests.factories import SeededContent, seed_content


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        redis_url=None,
        jwt_secret="test-secret-with-enough-length-for-hs256",
        log_format="console",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory database with all tables and the achievement catalog."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    database = Database(engine)
    async with database.session() as session:
        await seed_achievements(session)

    yield database
    await database.close()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def content(db_session: AsyncSession) -> SeededContent:
    return await seed_content(db_session)


@pytest.fixture
def app(settings: Settings, database: Database) -> FastAPI:
    app = create_app(settings)
    app.state.database = database
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app (no network, no Redis)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
