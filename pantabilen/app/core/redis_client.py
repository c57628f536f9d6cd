"""
Redis connection for the pricing settings cache.

One client per process, created at import and closed when the app shuts
down. Redis is optional at runtime: pricing reads fall back to the
database and /health only reports the connection state.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from pantabilen.app.core.config import settings

logger = logging.getLogger(__name__)


def create_redis_client(url: Optional[str] = None) -> redis.Redis:
    """Client for `url` (defaults to REDIS_URL). Connects lazily on first command."""
    return redis.from_url(
        url or settings.redis_url,
        decode_responses=settings.redis_decode_responses,
        health_check_interval=settings.redis_health_check_interval,
    )


redis_client = create_redis_client()


async def get_redis():
    """FastAPI dependency; tests override it with an in-memory client."""
    return redis_client


async def ping_redis() -> bool:
    try:
        return bool(await redis_client.ping())
    except (RedisError, OSError) as exc:
        logger.warning("Redis ping failed: %s", exc)
        return False


async def close_redis() -> None:
    """Release the connection pool on shutdown."""
    await redis_client.aclose()
