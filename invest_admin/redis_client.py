"""
Redis connection setup using redis-py async client.

Holds admin sessions only (``session:<id>`` keys, each with a TTL no longer
than the platform token it wraps).
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from invest_admin.config import settings

logger = logging.getLogger(__name__)

redis = aioredis.from_url(
    settings.REDIS_URL,
    decode_responses=True,
    ssl=settings.REDIS_SSL,
)


async def get_redis() -> aioredis.Redis:
    """FastAPI dependency that provides the Redis client."""
    return redis


async def redis_available(client: aioredis.Redis | None = None) -> bool:
    """Ping Redis; used by the health check."""
    try:
        return bool(await (client or redis).ping())
    except RedisError as exc:
        logger.warning("Redis ping failed: %s", exc)
        return False
