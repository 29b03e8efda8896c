"""Completion cascades: attempts, lessons, practice, projects."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from finmimo.db.models import Attempt, Progress, ProjectSubmission, Streak, UserProfile, XPEvent
from finmimo.errors import NotFoundError
from finmimo.gamification.achievement_service import get_unlocked_keys
from finmimo.gamification.xp_service import sum_xp_events
from finmimo.learning.completion_service import CompletionService
from tests.factories import make_user

DAY1 = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)


async def _total_xp(db, user_id: str) -> int:
    return await db.scalar(select(UserProfile.total_xp).where(UserProfile.user_id == user_id))


async def _streak(db, user_id: str) -> Streak:
    result = await db.execute(
        select(Streak).where(Streak.user_id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


@pytest.mark.asyncio
class TestSubmitAttempt:
    async def test_correct_awards_xp_and_hides_key(self, db_session, content):
        user = await make_user(db_session)
        exercise = content.exercises[content.lesson(0, 0).id][0]  # multiple_choice, correct=1

        result = await CompletionService(db_session).submit_attempt(user.id, exercise.id, {"selected": 1})
        await db_session.commit()

        assert result.is_correct is True
        assert result.explanation == exercise.explanation
        assert result.hint is None
        assert result.correct_answer is None
        assert await _total_xp(db_session, user.id) == 2

    async def test_incorrect_reveals_hint_and_key(self, db_session, content):
        user = await make_user(db_session)
        exercise = content.exercises[content.lesson(0, 0).id][0]

        result = await CompletionService(db_session).submit_attempt(user.id, exercise.id, {"selected": 0})
        await db_session.commit()

        assert result.is_correct is False
        assert result.hint == exercise.hint
        assert result.correct_answer == {"correct": 1}
        assert await _total_xp(db_session, user.id) == 0

    async def test_every_attempt_is_recorded(self, db_session, content):
        user = await make_user(db_session)
        exercise = content.exercises[content.lesson(0, 0).id][1]  # true_false
        svc = CompletionService(db_session)

        await svc.submit_attempt(user.id, exercise.id, {"selected": False})
        await svc.submit_attempt(user.id, exercise.id, {"selected": True})
        await db_session.commit()

        rows = (await db_session.execute(
            select(Attempt.is_correct).where(Attempt.user_id == user.id).order_by(Attempt.created_at)
        )).scalars().all()
        assert rows == [False, True]

    async def test_unknown_exercise(self, db_session):
        user = await make_user(db_session)
        with pytest.raises(NotFoundError, match="Exercise not found"):
            await CompletionService(db_session).submit_attempt(user.id, "missing", {"selected": 1})


@pytest.mark.asyncio
class TestCompleteLesson:
    async def test_cascade(self, db_session, content):
        user = await make_user(db_session)
        lesson = content.lesson(0, 0)

        result = await CompletionService(db_session).complete_lesson(user.id, lesson.id, now=DAY1)
        await db_session.commit()

        assert result.xp_awarded == 5
        assert result.total_xp == 5
        assert result.achievements_unlocked == ["first_lesson"]
        streak = await _streak(db_session, user.id)
        assert (streak.current, streak.longest, streak.last_active_date) == (1, 1, DAY1.date())

    async def test_repeat_keeps_one_row_and_awards_again(self, db_session, content):
        user = await make_user(db_session)
        lesson = content.lesson(0, 0)
        svc = CompletionService(db_session)

        await svc.complete_lesson(user.id, lesson.id, now=DAY1)
        await svc.complete_lesson(user.id, lesson.id, now=DAY1 + timedelta(minutes=5))
        await db_session.commit()

        rows = (await db_session.execute(
            select(Progress).where(Progress.user_id == user.id)
        )).scalars().all()
        assert len(rows) == 1
        assert rows[0].status == "completed"
        assert rows[0].mastery_score == 1.0
        assert await _total_xp(db_session, user.id) == 10
        assert await sum_xp_events(db_session, user.id) == 10
        assert (await _streak(db_session, user.id)).current == 1

    async def test_streak_over_days_with_freeze(self, db_session, content):
        user = await make_user(db_session)
        svc = CompletionService(db_session)

        await svc.complete_lesson(user.id, content.lesson(0, 0).id, now=DAY1)
        await svc.complete_lesson(user.id, content.lesson(0, 1).id, now=DAY1 + timedelta(days=1))
        result = await svc.complete_lesson(user.id, content.lesson(0, 2).id, now=DAY1 + timedelta(days=3))
        await db_session.commit()

        streak = await _streak(db_session, user.id)
        assert (streak.current, streak.longest, streak.freeze_count) == (3, 3, 0)
        assert "streak_3" in result.achievements_unlocked

    async def test_unknown_lesson_changes_nothing(self, db_session):
        user = await make_user(db_session)
        with pytest.raises(NotFoundError):
            await CompletionService(db_session).complete_lesson(user.id, "missing")
        await db_session.rollback()

        count = await db_session.scalar(select(func.count(XPEvent.id)).where(XPEvent.user_id == user.id))
        assert count == 0


@pytest.mark.asyncio
class TestPracticeAndProjects:
    async def test_practice_session(self, db_session):
        user = await make_user(db_session)

        result = await CompletionService(db_session).complete_practice_session(user.id, now=DAY1)
        await db_session.commit()

        assert result.total_xp == 15
        assert (await _streak(db_session, user.id)).current == 1

    async def test_project_submission(self, db_session, content):
        user = await make_user(db_session)
        svc = CompletionService(db_session)

        first = await svc.submit_project(user.id, content.project.id, {"income": 3000}, now=DAY1)
        second = await svc.submit_project(user.id, content.project.id, {"income": 3100}, now=DAY1)
        await db_session.commit()

        assert first.id != second.id
        count = await db_session.scalar(
            select(func.count(ProjectSubmission.id)).where(ProjectSubmission.user_id == user.id)
        )
        assert count == 2
        assert await _total_xp(db_session, user.id) == 40
        assert "first_project" in await get_unlocked_keys(db_session, user.id)
        # Submitting a project does not count as daily activity.
        assert (await _streak(db_session, user.id)).last_active_date is None

    async def test_unknown_project(self, db_session):
        user = await make_user(db_session)
        with pytest.raises(NotFoundError, match="Project not found"):
            await CompletionService(db_session).submit_project(user.id, "missing", {})
