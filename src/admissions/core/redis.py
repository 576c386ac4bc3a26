"""
Redis Configuration

Shared async Redis client, used for rate limiting.
"""

import logging

from redis.asyncio import Redis, from_url

from admissions.core.config import settings

logger = logging.getLogger(__name__)

# Redis client instance
redis_client: Redis | None = None


async def init_redis() -> Redis:
    """
    Initialize Redis connection.

    Call this on application startup.
    """
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    redis_client = client
    return redis_client


async def get_redis() -> Redis | None:
    """
    Get Redis client instance.

    Returns None if Redis was not available at startup; callers fall back
    to in-process behaviour.
    """
    return redis_client


async def redis_healthy() -> bool:
    """Ping Redis; False when it is not configured or unreachable."""
    if redis_client is None:
        return False
    try:
        await redis_client.ping()
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        return False
    return True


async def close_redis() -> None:
    """Close Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
