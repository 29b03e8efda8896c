"""Request/response schemas for the profile endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from finmimo.auth.schemas import UserResponse
from finmimo.gamification.schemas import EarnedAchievementResponse, StreakResponse
from finmimo.learning.schemas import NextLessonResponse, ProgressResponse


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    daily_goal_minutes: int
    focus_area: str | None
    total_xp: int


class ProfileUpdateRequest(BaseModel):
    daily_goal_minutes: int | None = None
    focus_area: str | None = Field(None, max_length=64)


class MeResponse(BaseModel):
    user: UserResponse
    profile: ProfileResponse
    streak: StreakResponse
    total_xp: int
    today_xp: int
    completed_lessons: int
    today_lessons: int
    achievements: list[EarnedAchievementResponse]
    next_lesson: NextLessonResponse | None
    progress: list[ProgressResponse]
