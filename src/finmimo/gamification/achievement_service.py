"""Achievement evaluation with duplicate prevention."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.db.models import Achievement, Progress, ProjectSubmission, Streak, UserAchievement, UserProfile
from finmimo.db.upsert import insert_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LearnerStats:
    """Aggregate stats the unlock predicates are checked against."""

    total_xp: int
    completed_lessons: int
    current_streak: int
    submission_count: int


ACHIEVEMENT_RULES: dict[str, Callable[[LearnerStats], bool]] = {
    "first_lesson": lambda s: s.completed_lessons >= 1,
    "streak_3": lambda s: s.current_streak >= 3,
    "streak_7": lambda s: s.current_streak >= 7,
    "xp_100": lambda s: s.total_xp >= 100,
    "first_project": lambda s: s.submission_count >= 1,
}


async def count_completed_lessons(db: AsyncSession, user_id: str, since: datetime | None = None) -> int:
    """Count completed progress rows, optionally only those updated at or after ``since``."""
    stmt = select(func.count(Progress.id)).where(
        Progress.user_id == user_id,
        Progress.status == "completed",
    )
    if since is not None:
        stmt = stmt.where(Progress.updated_at >= since)
    result = await db.execute(stmt)
    return result.scalar() or 0


async def collect_stats(db: AsyncSession, user_id: str) -> LearnerStats:
    """Recompute the learner's aggregate stats from the store."""
    total_xp = await db.scalar(select(UserProfile.total_xp).where(UserProfile.user_id == user_id))
    current_streak = await db.scalar(select(Streak.current).where(Streak.user_id == user_id))
    submissions = await db.scalar(
        select(func.count(ProjectSubmission.id)).where(ProjectSubmission.user_id == user_id)
    )
    return LearnerStats(
        total_xp=total_xp or 0,
        completed_lessons=await count_completed_lessons(db, user_id),
        current_streak=current_streak or 0,
        submission_count=submissions or 0,
    )


def satisfied_keys(stats: LearnerStats) -> set[str]:
    """Keys of every rule the given stats satisfy."""
    return {key for key, rule in ACHIEVEMENT_RULES.items() if rule(stats)}


async def get_unlocked_keys(db: AsyncSession, user_id: str) -> set[str]:
    result = await db.execute(
        select(Achievement.key)
        .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
    )
    return set(result.scalars().all())


async def evaluate_achievements(
    db: AsyncSession,
    user_id: str,
    now: datetime | None = None,
) -> list[str]:
    """Unlock every catalog achievement whose rule the learner now satisfies.

    Idempotent: already-earned achievements are skipped, and the
    UNIQUE(user_id, achievement_id) constraint turns a concurrent duplicate
    insert into a no-op. Returns the keys unlocked by this call.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    stats = await collect_stats(db, user_id)
    earned = await get_unlocked_keys(db, user_id)
    catalog = (await db.execute(select(Achievement))).scalars().all()

    unlocked: list[str] = []
    for achievement in catalog:
        if achievement.key in earned:
            continue
        rule = ACHIEVEMENT_RULES.get(achievement.key)
        if rule is None or not rule(stats):
            continue

        stmt = insert_for(db, UserAchievement).values(
            user_id=user_id,
            achievement_id=achievement.id,
            unlocked_at=now,
        )
        result = await db.execute(
            stmt.on_conflict_do_nothing(index_elements=["user_id", "achievement_id"])
        )
        if result.rowcount:
            unlocked.append(achievement.key)
            logger.info("achievement_unlocked user=%s key=%s", user_id, achievement.key)

    return unlocked


async def list_user_achievements(db: AsyncSession, user_id: str) -> list[UserAchievement]:
    """Earned achievements with their catalog entries, oldest first."""
    result = await db.execute(
        select(UserAchievement)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.unlocked_at.asc())
    )
    return list(result.scalars().unique().all())
