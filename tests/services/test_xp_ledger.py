"""XP ledger: events and cached total stay reconciled."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import create_async_engine

from finmimo.database import Database
from finmimo.db.base import Base
from finmimo.db.models import UserProfile, XPEvent
from finmimo.gamification.xp_service import (
    CORRECT_ANSWER_XP,
    LESSON_COMPLETE_XP,
    XP_CORRECT_ANSWER,
    XP_LESSON_COMPLETE,
    award_xp,
    sum_xp_events,
)
from tests.factories import make_user


async def _cached_total(db, user_id: str) -> int:
    return await db.scalar(select(UserProfile.total_xp).where(UserProfile.user_id == user_id))


@pytest.mark.asyncio
async def test_award_appends_event_and_bumps_total(db_session):
    user = await make_user(db_session)

    total = await award_xp(db_session, user.id, XP_LESSON_COMPLETE, LESSON_COMPLETE_XP)
    await db_session.commit()

    assert total == LESSON_COMPLETE_XP
    events = (await db_session.execute(select(XPEvent).where(XPEvent.user_id == user.id))).scalars().all()
    assert [(e.type, e.amount) for e in events] == [(XP_LESSON_COMPLETE, LESSON_COMPLETE_XP)]


@pytest.mark.asyncio
async def test_total_equals_sum_of_events_after_many_awards(db_session):
    user = await make_user(db_session)

    for _ in range(7):
        await award_xp(db_session, user.id, XP_CORRECT_ANSWER, CORRECT_ANSWER_XP)
    await award_xp(db_session, user.id, XP_LESSON_COMPLETE, LESSON_COMPLETE_XP)
    await db_session.commit()

    expected = 7 * CORRECT_ANSWER_XP + LESSON_COMPLETE_XP
    assert await _cached_total(db_session, user.id) == expected
    assert await sum_xp_events(db_session, user.id) == expected


@pytest.mark.asyncio
async def test_rollback_discards_event_and_total(db_session):
    user = await make_user(db_session)

    await award_xp(db_session, user.id, XP_LESSON_COMPLETE, LESSON_COMPLETE_XP)
    await db_session.rollback()

    assert await _cached_total(db_session, user.id) == 0
    count = await db_session.scalar(select(func.count(XPEvent.id)).where(XPEvent.user_id == user.id))
    assert count == 0


@pytest.mark.asyncio
async def test_sum_since(db_session):
    user = await make_user(db_session)
    now = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

    await award_xp(db_session, user.id, XP_CORRECT_ANSWER, 2, now=now - timedelta(days=1))
    await award_xp(db_session, user.id, XP_LESSON_COMPLETE, 5, now=now)
    await db_session.commit()

    midnight = datetime(2026, 3, 2, tzinfo=timezone.utc)
    assert await sum_xp_events(db_session, user.id, since=midnight) == 5
    assert await sum_xp_events(db_session, user.id) == 7


@pytest_asyncio.fixture
async def shared_database(tmp_path) -> AsyncGenerator[Database, None]:
    """File-backed SQLite where each session gets its own connection.

    Transactions open with BEGIN IMMEDIATE, so concurrent writers queue on
    SQLite's write lock instead of failing with "database is locked".
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _no_implicit_begin(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    database = Database(engine)
    yield database
    await database.close()


@pytest.mark.asyncio
async def test_concurrent_awards_keep_total_equal_to_events(shared_database):
    async with shared_database.session() as session:
        user = await make_user(session)

    async def _award(amount: int) -> None:
        async with shared_database.session() as session:
            await award_xp(session, user.id, XP_CORRECT_ANSWER, amount)
            await session.commit()

    amounts = [CORRECT_ANSWER_XP, LESSON_COMPLETE_XP, 3, 7, 11, 13]
    await asyncio.gather(*(_award(amount) for amount in amounts))

    async with shared_database.session() as session:
        assert await _cached_total(session, user.id) == sum(amounts)
        assert await sum_xp_events(session, user.id) == sum(amounts)
        count = await session.scalar(select(func.count(XPEvent.id)).where(XPEvent.user_id == user.id))
        assert count == len(amounts)
