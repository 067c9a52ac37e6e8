"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gamelib.activity.router import router as activity_router
from gamelib.badges.router import router as badges_router
from gamelib.badges.service import seed_badge_tiers
from gamelib.catalog.router import router as catalog_router
from gamelib.collection.router import router as collection_router
from gamelib.config import get_settings
from gamelib.database import close_db, get_session_factory, init_db
from gamelib.health.router import router as health_router
from gamelib.middleware import setup_middleware
from gamelib.redis_client import close_redis, init_redis
from gamelib.social.router import router as social_router
from gamelib.stats.router import router as stats_router
from gamelib.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url, settings.redis_max_connections)

    # Badge tiers are reference data (idempotent)
    try:
        async with get_session_factory()() as db:
            await seed_badge_tiers(db)
    except Exception:
        logger.warning("Badge tier seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="GameLib API",
        description="Game collection tracking with derived stats, badges and activity feeds",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(stats_router)
    app.include_router(activity_router)
    app.include_router(catalog_router)
    app.include_router(collection_router)
    app.include_router(badges_router)
    app.include_router(social_router)

    return app


app = create_app()
