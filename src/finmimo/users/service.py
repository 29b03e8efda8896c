"""User profile and learner dashboard logic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import TYPE_CHECKING

import structlog

from finmimo.db.models import Progress, Streak, UserAchievement, UserProfile
from finmimo.errors import ValidationFailureError
from finmimo.gamification.achievement_service import count_completed_lessons, list_user_achievements
from finmimo.gamification.streak_service import (
    effective_current,
    get_or_create_streak,
    state_of,
    utc_today,
)
from finmimo.gamification.xp_service import get_or_create_profile, sum_xp_events
from finmimo.learning.content_service import ContentService, NextLesson
from finmimo.learning.progress_service import get_user_progress

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

MIN_DAILY_GOAL_MINUTES = 1
MAX_DAILY_GOAL_MINUTES = 240


@dataclass
class UserStats:
    profile: UserProfile
    streak: Streak
    effective_streak: int
    total_xp: int
    today_xp: int
    completed_lessons: int
    today_lessons: int
    achievements: list[UserAchievement]
    next_lesson: NextLesson | None
    progress: list[Progress]


def start_of_utc_day(now: datetime) -> datetime:
    """Midnight UTC of the calendar day containing ``now``."""
    return datetime.combine(utc_today(now), time.min, tzinfo=timezone.utc)


async def get_user_stats(db: AsyncSession, user_id: str, now: datetime | None = None) -> UserStats:
    """Aggregate everything the home screen shows for a learner."""
    if now is None:
        now = datetime.now(timezone.utc)
    midnight = start_of_utc_day(now)

    profile = await get_or_create_profile(db, user_id)
    streak = await get_or_create_streak(db, user_id)

    return UserStats(
        profile=profile,
        streak=streak,
        effective_streak=effective_current(state_of(streak), utc_today(now)),
        total_xp=profile.total_xp,
        today_xp=await sum_xp_events(db, user_id, since=midnight),
        completed_lessons=await count_completed_lessons(db, user_id),
        today_lessons=await count_completed_lessons(db, user_id, since=midnight),
        achievements=await list_user_achievements(db, user_id),
        next_lesson=await ContentService(db).get_next_lesson(user_id),
        progress=await get_user_progress(db, user_id),
    )


async def update_profile(
    db: AsyncSession,
    user_id: str,
    daily_goal_minutes: int | None = None,
    focus_area: str | None = None,
) -> UserProfile:
    """
    Partially update profile settings.

    Raises:
        ValidationFailureError: If the daily goal is outside 1..240 minutes.
    """
    profile = await get_or_create_profile(db, user_id)

    if daily_goal_minutes is not None:
        if not MIN_DAILY_GOAL_MINUTES <= daily_goal_minutes <= MAX_DAILY_GOAL_MINUTES:
            msg = f"Daily goal must be between {MIN_DAILY_GOAL_MINUTES} and {MAX_DAILY_GOAL_MINUTES} minutes"
            raise ValidationFailureError(msg)
        profile.daily_goal_minutes = daily_goal_minutes
    if focus_area is not None:
        profile.focus_area = focus_area

    await db.flush()
    logger.info("profile_updated", user_id=user_id)
    return profile
