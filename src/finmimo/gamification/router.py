"""Gamification API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.database import get_session
from finmimo.db.models import Achievement
from finmimo.gamification.schemas import AchievementResponse

router = APIRouter(prefix="/api", tags=["Gamification"])


@router.get("/achievements", response_model=list[AchievementResponse])
async def list_achievements(db: AsyncSession = Depends(get_session)) -> list[AchievementResponse]:
    """The achievement catalog."""
    result = await db.execute(select(Achievement).order_by(Achievement.key))
    return [AchievementResponse.model_validate(a) for a in result.scalars().all()]
