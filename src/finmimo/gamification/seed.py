"""Achievement catalog seed data."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from finmimo.db.models import Achievement
from finmimo.db.upsert import insert_for

logger = logging.getLogger(__name__)

ACHIEVEMENT_SEED_DATA: list[dict] = [
    {
        "key": "first_lesson",
        "title": "First Steps",
        "description": "Complete your first lesson",
        "icon_name": "award",
    },
    {
        "key": "streak_3",
        "title": "On Fire",
        "description": "Maintain a 3-day streak",
        "icon_name": "zap",
    },
    {
        "key": "first_project",
        "title": "Builder",
        "description": "Complete your first project",
        "icon_name": "tool",
    },
    {
        "key": "streak_7",
        "title": "Dedicated Learner",
        "description": "Maintain a 7-day streak",
        "icon_name": "trending-up",
    },
    {
        "key": "xp_100",
        "title": "Century Club",
        "description": "Earn 100 XP",
        "icon_name": "star",
    },
]


async def seed_achievements(db: AsyncSession) -> int:
    """Upsert the achievement catalog. Returns number of entries seeded."""
    seeded = 0
    for data in ACHIEVEMENT_SEED_DATA:
        stmt = insert_for(db, Achievement).values(**data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["key"],
            set_={
                "title": stmt.excluded.title,
                "description": stmt.excluded.description,
                "icon_name": stmt.excluded.icon_name,
            },
        )
        await db.execute(stmt)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d achievements", seeded)
    return seeded
