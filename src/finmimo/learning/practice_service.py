"""Practice queue construction for spaced review."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.db.models import Attempt, Exercise, Lesson, Path, Progress, Skill
from finmimo.learning.progress_service import STATUS_COMPLETED

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 10
DEFAULT_MISS_WINDOW = 20


async def recently_missed_exercise_ids(db: AsyncSession, user_id: str, window: int) -> list[str]:
    """Distinct exercise ids among the last ``window`` incorrect attempts, most recent first.

    Attempts sharing a timestamp are ordered by id so the result is stable.
    """
    result = await db.execute(
        select(Attempt.exercise_id)
        .where(Attempt.user_id == user_id, Attempt.is_correct.is_(False))
        .order_by(Attempt.created_at.desc(), Attempt.id.desc())
        .limit(window)
    )
    return list(dict.fromkeys(result.scalars().all()))


async def build_practice_queue(
    db: AsyncSession,
    user_id: str,
    size: int = DEFAULT_QUEUE_SIZE,
    miss_window: int = DEFAULT_MISS_WINDOW,
) -> list[Exercise]:
    """Select up to ``size`` exercises for a review session.

    1. Exercises from the last ``miss_window`` incorrect attempts, most
       recently missed first, without duplicates.
    2. Backfill from exercises of lessons the user has completed, in content
       order (path, skill, lesson, exercise), skipping ones already picked.
    """
    missed_ids = await recently_missed_exercise_ids(db, user_id, miss_window)

    queue: list[Exercise] = []
    if missed_ids:
        result = await db.execute(select(Exercise).where(Exercise.id.in_(missed_ids)))
        by_id = {exercise.id: exercise for exercise in result.scalars().all()}
        queue = [by_id[exercise_id] for exercise_id in missed_ids if exercise_id in by_id][:size]

    if len(queue) < size:
        completed_lessons = (
            select(Progress.lesson_id)
            .where(Progress.user_id == user_id, Progress.status == STATUS_COMPLETED)
        )
        stmt = (
            select(Exercise)
            .join(Lesson, Exercise.lesson_id == Lesson.id)
            .join(Skill, Lesson.skill_id == Skill.id)
            .join(Path, Skill.path_id == Path.id)
            .where(Exercise.lesson_id.in_(completed_lessons))
            .order_by(
                Path.order_index,
                Skill.order_index,
                Lesson.order_index,
                Exercise.order_index,
                Exercise.id,
            )
            .limit(size - len(queue))
        )
        picked = [exercise.id for exercise in queue]
        if picked:
            stmt = stmt.where(Exercise.id.not_in(picked))
        result = await db.execute(stmt)
        queue.extend(result.scalars().all())

    logger.debug("practice_queue user=%s missed=%d size=%d", user_id, len(missed_ids), len(queue))
    return queue[:size]
