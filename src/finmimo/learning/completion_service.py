"""Completion orchestrator: attempts, lesson/practice completion, project submission.

Every public method runs inside the caller's session and never commits. The
router commits once the whole cascade has succeeded, so XP, streak, progress
and achievement writes of one operation land together or not at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.db.models import Attempt, ProjectSubmission
from finmimo.gamification.achievement_service import evaluate_achievements
from finmimo.gamification.streak_service import touch_streak
from finmimo.gamification.xp_service import (
    CORRECT_ANSWER_XP,
    LESSON_COMPLETE_XP,
    PRACTICE_SESSION_XP,
    PROJECT_COMPLETE_XP,
    XP_CORRECT_ANSWER,
    XP_LESSON_COMPLETE,
    XP_PRACTICE_SESSION,
    XP_PROJECT_COMPLETE,
    award_xp,
)
from finmimo.learning.content_service import ContentService
from finmimo.learning.grading import grade
from finmimo.learning.progress_service import mark_lesson_completed

logger = logging.getLogger(__name__)


@dataclass
class AttemptResult:
    is_correct: bool
    explanation: str | None
    hint: str | None = None
    correct_answer: Any = None


@dataclass
class CompletionResult:
    xp_awarded: int
    total_xp: int
    achievements_unlocked: list[str] = field(default_factory=list)


class CompletionService:
    """Coordinates grading, XP, streaks, progress and achievements."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.content = ContentService(db)

    async def submit_attempt(
        self,
        user_id: str,
        exercise_id: str,
        answer: Any,
        now: datetime | None = None,
    ) -> AttemptResult:
        """Grade an answer, record the attempt and award XP when correct.

        The answer key is only revealed on an incorrect response.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        exercise = await self.content.get_exercise(exercise_id)
        correct = grade(exercise.type, exercise.answer_json, answer)

        self.db.add(
            Attempt(
                user_id=user_id,
                exercise_id=exercise.id,
                answer_json=answer,
                is_correct=correct,
                created_at=now,
            )
        )
        await self.db.flush()

        if correct:
            await award_xp(self.db, user_id, XP_CORRECT_ANSWER, CORRECT_ANSWER_XP, now=now)
            return AttemptResult(is_correct=True, explanation=exercise.explanation)

        return AttemptResult(
            is_correct=False,
            explanation=exercise.explanation,
            hint=exercise.hint,
            correct_answer=exercise.answer_json,
        )

    async def complete_lesson(
        self,
        user_id: str,
        lesson_id: str,
        now: datetime | None = None,
    ) -> CompletionResult:
        """Progress upsert, then XP, then streak, then achievements.

        Repeated calls keep awarding lesson XP.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        lesson = await self.content.get_lesson(lesson_id)
        await mark_lesson_completed(self.db, user_id, lesson, now=now)
        total = await award_xp(self.db, user_id, XP_LESSON_COMPLETE, LESSON_COMPLETE_XP, now=now)
        await touch_streak(self.db, user_id, now=now)
        unlocked = await evaluate_achievements(self.db, user_id, now=now)

        logger.info("lesson_completed user=%s lesson=%s", user_id, lesson.id)
        return CompletionResult(
            xp_awarded=LESSON_COMPLETE_XP,
            total_xp=total,
            achievements_unlocked=unlocked,
        )

    async def complete_practice_session(
        self,
        user_id: str,
        now: datetime | None = None,
    ) -> CompletionResult:
        """XP, then streak, then achievements."""
        if now is None:
            now = datetime.now(timezone.utc)

        total = await award_xp(self.db, user_id, XP_PRACTICE_SESSION, PRACTICE_SESSION_XP, now=now)
        await touch_streak(self.db, user_id, now=now)
        unlocked = await evaluate_achievements(self.db, user_id, now=now)

        logger.info("practice_completed user=%s", user_id)
        return CompletionResult(
            xp_awarded=PRACTICE_SESSION_XP,
            total_xp=total,
            achievements_unlocked=unlocked,
        )

    async def submit_project(
        self,
        user_id: str,
        project_id: str,
        data: dict,
        now: datetime | None = None,
    ) -> ProjectSubmission:
        """Store a submission, award project XP and re-check achievements.

        Submitting does not count toward the daily streak.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        project = await self.content.get_project(project_id)
        submission = ProjectSubmission(
            project_id=project.id,
            user_id=user_id,
            data_json=data,
            created_at=now,
        )
        self.db.add(submission)
        await self.db.flush()

        await award_xp(self.db, user_id, XP_PROJECT_COMPLETE, PROJECT_COMPLETE_XP, now=now)
        await evaluate_achievements(self.db, user_id, now=now)

        logger.info("project_submitted user=%s project=%s", user_id, project.id)
        return submission
