"""Lesson progress and unlock gating."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.db.models import Lesson, Progress
from finmimo.db.upsert import insert_for

logger = logging.getLogger(__name__)

STATUS_NOT_STARTED = "not_started"
STATUS_COMPLETED = "completed"


async def mark_lesson_completed(
    db: AsyncSession,
    user_id: str,
    lesson: Lesson,
    now: datetime | None = None,
) -> None:
    """Upsert the (user, lesson) progress row to completed with full mastery.

    Calling this again simply rewrites the same state.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    stmt = insert_for(db, Progress).values(
        user_id=user_id,
        skill_id=lesson.skill_id,
        lesson_id=lesson.id,
        status=STATUS_COMPLETED,
        mastery_score=1.0,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "lesson_id"],
        set_={
            "status": STATUS_COMPLETED,
            "mastery_score": 1.0,
            "updated_at": now,
        },
    )
    await db.execute(stmt)
    logger.debug("progress_completed user=%s lesson=%s", user_id, lesson.id)


async def get_user_progress(db: AsyncSession, user_id: str) -> list[Progress]:
    result = await db.execute(
        select(Progress)
        .where(Progress.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_completed_lesson_ids(db: AsyncSession, user_id: str) -> set[str]:
    result = await db.execute(
        select(Progress.lesson_id).where(
            Progress.user_id == user_id,
            Progress.status == STATUS_COMPLETED,
        )
    )
    return set(result.scalars().all())


async def completed_counts_by_skill(db: AsyncSession, user_id: str) -> dict[str, int]:
    """Completed-lesson count per skill id for a user."""
    result = await db.execute(
        select(Progress.skill_id, func.count(Progress.id))
        .where(Progress.user_id == user_id, Progress.status == STATUS_COMPLETED)
        .group_by(Progress.skill_id)
    )
    return {skill_id: count for skill_id, count in result.all()}


# --- Unlock gating ---


def lesson_unlock_flags(lesson_ids: Sequence[str], completed: Iterable[str]) -> list[bool]:
    """Lessons unlock one at a time: lesson i needs lesson i-1 completed.

    ``lesson_ids`` must be in lesson order. The first lesson is always open.
    """
    done = set(completed)
    return [i == 0 or lesson_ids[i - 1] in done for i in range(len(lesson_ids))]


def skill_unlock_flags(
    skill_ids: Sequence[str],
    completed_counts: dict[str, int],
    threshold: int,
) -> list[bool]:
    """Skills unlock one at a time once the previous skill has ``threshold`` completed lessons.

    The threshold is a fixed policy value and does not depend on how many
    lessons the previous skill actually has.
    """
    return [
        i == 0 or completed_counts.get(skill_ids[i - 1], 0) >= threshold
        for i in range(len(skill_ids))
    ]
