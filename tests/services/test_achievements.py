"""Achievement evaluation against stored learner state."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from finmimo.db.models import Achievement, UserAchievement
from finmimo.gamification import achievement_service
from finmimo.gamification.achievement_service import evaluate_achievements, get_unlocked_keys
from finmimo.gamification.xp_service import award_xp
from finmimo.learning.progress_service import mark_lesson_completed
from tests.factories import make_user


@pytest.mark.asyncio
async def test_nothing_unlocked_for_new_user(db_session):
    user = await make_user(db_session)
    assert await evaluate_achievements(db_session, user.id) == []


@pytest.mark.asyncio
async def test_first_lesson_unlocks_once(db_session, content):
    user = await make_user(db_session)
    await mark_lesson_completed(db_session, user.id, content.lesson(0, 0))

    first = await evaluate_achievements(db_session, user.id)
    second = await evaluate_achievements(db_session, user.id)
    await db_session.commit()

    assert first == ["first_lesson"]
    assert second == []
    rows = await db_session.scalar(
        select(func.count(UserAchievement.id)).where(UserAchievement.user_id == user.id)
    )
    assert rows == 1


@pytest.mark.asyncio
async def test_xp_100(db_session):
    user = await make_user(db_session)
    await award_xp(db_session, user.id, "practice_session", 99)
    assert "xp_100" not in await evaluate_achievements(db_session, user.id)

    await award_xp(db_session, user.id, "correct_answer", 1)
    assert await evaluate_achievements(db_session, user.id) == ["xp_100"]
    assert await get_unlocked_keys(db_session, user.id) == {"xp_100"}


@pytest.mark.asyncio
async def test_stale_earned_set_does_not_duplicate(db_session, content, monkeypatch):
    """A row written after the earned set was read is absorbed by the unique constraint."""
    user = await make_user(db_session)
    await mark_lesson_completed(db_session, user.id, content.lesson(0, 0))
    achievement = await db_session.scalar(select(Achievement).where(Achievement.key == "first_lesson"))
    db_session.add(UserAchievement(user_id=user.id, achievement_id=achievement.id))
    await db_session.commit()

    async def _nothing_earned(_db, _user_id):
        return set()

    monkeypatch.setattr(achievement_service, "get_unlocked_keys", _nothing_earned)

    assert await evaluate_achievements(db_session, user.id) == []
    await db_session.commit()
    rows = await db_session.scalar(
        select(func.count(UserAchievement.id)).where(UserAchievement.user_id == user.id)
    )
    assert rows == 1
