"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from fastapi import Query

from gamelib.config import get_settings
from gamelib.redis_client import get_redis_or_none


async def get_redis_dep() -> AsyncGenerator[object, None]:
    """Yield the Redis client (or None when not initialized) as a FastAPI dependency."""
    yield get_redis_or_none()


def pagination(
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, ge=1),
) -> tuple[int, int]:
    """Resolve (page, per_page), clamping per_page to the configured maximum."""
    settings = get_settings()
    size = per_page or settings.feed_default_page_size
    return page, min(size, settings.feed_max_page_size)
