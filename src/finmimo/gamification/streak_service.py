"""Daily streak tracking with freeze tokens.

Only calendar-day identity matters: the gap between two activities is the
difference of their dates, never of their timestamps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.db.models import Streak
from finmimo.db.upsert import insert_for

logger = logging.getLogger(__name__)

# A freeze bridges exactly one missed day: last activity two days ago.
FREEZE_BRIDGE_GAP_DAYS = 2


@dataclass(frozen=True)
class StreakState:
    current: int
    longest: int
    last_active_date: date | None
    freeze_count: int


def utc_today(now: datetime | None = None) -> date:
    """Calendar day (UTC) of ``now``."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date()


def advance_streak(state: StreakState, today: date) -> StreakState:
    """Apply one qualifying activity on ``today`` to ``state``.

    - same day: unchanged
    - previous day: current + 1
    - two days ago with a freeze left: current + 1, one freeze consumed
    - anything else (first activity, longer gap, no freeze): current = 1
    """
    last = state.last_active_date
    if last == today:
        return state

    current = 1
    freeze_count = state.freeze_count
    if last is not None:
        gap = (today - last).days
        if gap == 1:
            current = state.current + 1
        elif gap == FREEZE_BRIDGE_GAP_DAYS and freeze_count > 0:
            current = state.current + 1
            freeze_count -= 1

    return replace(
        state,
        current=current,
        longest=max(state.longest, current),
        last_active_date=today,
        freeze_count=freeze_count,
    )


def effective_current(state: StreakState, today: date) -> int:
    """Streak length as the learner sees it today.

    The stored count only moves on activity, so after a long break it still
    holds the old value. It is alive while one more activity today would
    continue it.
    """
    last = state.last_active_date
    if last is None:
        return 0
    gap = (today - last).days
    if gap in (0, 1):
        return state.current
    if gap == FREEZE_BRIDGE_GAP_DAYS and state.freeze_count > 0:
        return state.current
    return 0


def state_of(streak: Streak) -> StreakState:
    return StreakState(
        current=streak.current,
        longest=streak.longest,
        last_active_date=streak.last_active_date,
        freeze_count=streak.freeze_count,
    )


async def get_or_create_streak(db: AsyncSession, user_id: str, lock: bool = False) -> Streak:
    """Get or create the streak row for a user, optionally locking it for update."""
    stmt = insert_for(db, Streak).values(user_id=user_id)
    await db.execute(stmt.on_conflict_do_nothing(index_elements=["user_id"]))

    query = select(Streak).where(Streak.user_id == user_id)
    if lock:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one()


async def touch_streak(db: AsyncSession, user_id: str, now: datetime | None = None) -> Streak:
    """Record a qualifying activity. Idempotent per calendar day."""
    if now is None:
        now = datetime.now(timezone.utc)
    today = utc_today(now)

    streak = await get_or_create_streak(db, user_id, lock=True)
    before = state_of(streak)
    after = advance_streak(before, today)
    if after == before:
        return streak

    streak.current = after.current
    streak.longest = after.longest
    streak.last_active_date = after.last_active_date
    streak.freeze_count = after.freeze_count
    streak.updated_at = now
    await db.flush()

    if after.freeze_count < before.freeze_count:
        logger.info("streak_freeze_used user=%s current=%d", user_id, after.current)
    elif after.current == 1 and before.current > 1:
        logger.info("streak_reset user=%s previous=%d", user_id, before.current)
    logger.debug("streak_updated user=%s current=%d longest=%d", user_id, after.current, after.longest)
    return streak
