"""Profile router: /api/me endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.auth.dependencies import get_current_user
from finmimo.auth.schemas import UserResponse
from finmimo.database import get_session
from finmimo.db.models import User
from finmimo.gamification.schemas import EarnedAchievementResponse, StreakResponse
from finmimo.learning.schemas import (
    LessonResponse,
    NextLessonResponse,
    PathResponse,
    ProgressResponse,
    SkillResponse,
)
from finmimo.users.schemas import MeResponse, ProfileResponse, ProfileUpdateRequest
from finmimo.users.service import get_user_stats, update_profile

router = APIRouter(prefix="/api/me", tags=["Users"])


@router.get("", response_model=MeResponse)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MeResponse:
    """Profile, streak, XP, progress and achievements of the caller."""
    stats = await get_user_stats(db, user.id)
    # get_or_create_profile/streak may have inserted rows
    await db.commit()

    next_lesson = None
    if stats.next_lesson is not None:
        next_lesson = NextLessonResponse(
            path=PathResponse.model_validate(stats.next_lesson.path),
            skill=SkillResponse.model_validate(stats.next_lesson.skill),
            lesson=LessonResponse.model_validate(stats.next_lesson.lesson),
        )

    return MeResponse(
        user=UserResponse.model_validate(user),
        profile=ProfileResponse.model_validate(stats.profile),
        streak=StreakResponse(
            current=stats.streak.current,
            longest=stats.streak.longest,
            last_active_date=stats.streak.last_active_date,
            freeze_count=stats.streak.freeze_count,
            effective_current=stats.effective_streak,
        ),
        total_xp=stats.total_xp,
        today_xp=stats.today_xp,
        completed_lessons=stats.completed_lessons,
        today_lessons=stats.today_lessons,
        achievements=[
            EarnedAchievementResponse(
                key=ua.achievement.key,
                title=ua.achievement.title,
                description=ua.achievement.description,
                icon_name=ua.achievement.icon_name,
                unlocked_at=ua.unlocked_at,
            )
            for ua in stats.achievements
        ],
        next_lesson=next_lesson,
        progress=[ProgressResponse.model_validate(p) for p in stats.progress],
    )


@router.put("/profile", response_model=ProfileResponse)
async def put_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Update daily goal and/or focus area."""
    profile = await update_profile(
        db,
        user.id,
        daily_goal_minutes=body.daily_goal_minutes,
        focus_area=body.focus_area,
    )
    await db.commit()
    return ProfileResponse.model_validate(profile)
