"""Redis client for the rate limiter and activity pub/sub.

Redis is optional. With an empty ``GAMELIB_REDIS_URL`` no client is created,
requests are not rate limited and committed activities are not published.
"""

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

_pool: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 20) -> None:
    """Create the shared client. Connections are opened lazily on first use."""
    global _pool  # noqa: PLW0603
    if not url:
        logger.info("redis_disabled")
        return
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
        health_check_interval=30,
    )
    logger.info("redis_configured", max_connections=max_connections)


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
        _pool = None


def get_redis_or_none() -> redis.Redis | None:
    """The shared client, or None when Redis is disabled or not yet initialized."""
    return _pool
