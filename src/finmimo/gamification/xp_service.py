"""XP ledger: append-only events plus the cached total on the user's profile."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.db.models import UserProfile, XPEvent
from finmimo.db.upsert import insert_for

logger = logging.getLogger(__name__)

# Fixed award amounts per triggering action.
CORRECT_ANSWER_XP = 2
LESSON_COMPLETE_XP = 5
PRACTICE_SESSION_XP = 15
PROJECT_COMPLETE_XP = 20

XP_CORRECT_ANSWER = "correct_answer"
XP_LESSON_COMPLETE = "lesson_complete"
XP_PRACTICE_SESSION = "practice_session"
XP_PROJECT_COMPLETE = "project_complete"


async def get_or_create_profile(db: AsyncSession, user_id: str) -> UserProfile:
    """Get or create the profile row holding the cached XP total."""
    stmt = insert_for(db, UserProfile).values(user_id=user_id)
    await db.execute(stmt.on_conflict_do_nothing(index_elements=["user_id"]))
    result = await db.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    return result.scalar_one()


async def award_xp(
    db: AsyncSession,
    user_id: str,
    xp_type: str,
    amount: int,
    now: datetime | None = None,
) -> int:
    """Append an XP event and bump the cached total in the same transaction.

    The total is incremented in SQL (``total_xp = total_xp + amount``) so
    concurrent awards never lose an update. Returns the new total.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    await get_or_create_profile(db, user_id)

    db.add(XPEvent(user_id=user_id, type=xp_type, amount=amount, created_at=now))

    result = await db.execute(
        update(UserProfile)
        .where(UserProfile.user_id == user_id)
        .values(total_xp=UserProfile.total_xp + amount)
        .returning(UserProfile.total_xp)
        .execution_options(synchronize_session="fetch")
    )
    total = result.scalar_one()
    await db.flush()

    logger.debug("xp_awarded user=%s type=%s amount=%d total=%d", user_id, xp_type, amount, total)
    return total


async def sum_xp_events(db: AsyncSession, user_id: str, since: datetime | None = None) -> int:
    """Sum a user's XP events, optionally only those created at or after ``since``."""
    stmt = select(func.coalesce(func.sum(XPEvent.amount), 0)).where(XPEvent.user_id == user_id)
    if since is not None:
        stmt = stmt.where(XPEvent.created_at >= since)
    result = await db.execute(stmt)
    return int(result.scalar_one())
