"""Pydantic response models for gamification endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


# --- Achievements ---


class AchievementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    key: str
    title: str
    description: str
    icon_name: str


class EarnedAchievementResponse(BaseModel):
    key: str
    title: str
    description: str
    icon_name: str
    unlocked_at: datetime


# --- Streak ---


class StreakResponse(BaseModel):
    current: int
    longest: int
    last_active_date: date | None
    freeze_count: int
    effective_current: int
