"""FastAPI application factory.

Run with ``uvicorn finmimo.main:create_app --factory``.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from finmimo.auth.router import router as auth_router
from finmimo.config import Settings
from finmimo.database import Database
from finmimo.gamification.router import router as gamification_router
from finmimo.gamification.seed import seed_achievements
from finmimo.health.router import router as health_router
from finmimo.learning.router import router as learning_router
from finmimo.middleware import setup_middleware
from finmimo.redis_client import close_redis, create_redis
from finmimo.tutor.router import router as tutor_router
from finmimo.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    database = Database.from_url(settings.database_url)
    app.state.database = database
    app.state.redis = create_redis(settings.redis_url) if settings.redis_url else None

    # Seed the achievement catalog (idempotent)
    try:
        async with database.session() as db:
            await seed_achievements(db)
    except SQLAlchemyError:
        logger.warning("Achievement seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await database.close()
    await close_redis(app.state.redis)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Finmimo API",
        description="Backend API for Finmimo, a gamified personal-finance course",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.redis = None

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(learning_router)
    app.include_router(gamification_router)
    app.include_router(tutor_router)

    return app
