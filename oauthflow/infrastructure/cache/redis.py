"""
Redis connection configuration.
"""
from typing import Dict, Optional

import redis.asyncio as redis

from oauthflow.core.config import get_settings
from oauthflow.core.logging import get_logger

logger = get_logger(__name__)

# Redis connection pools, one per URL
redis_pools: Dict[str, redis.ConnectionPool] = {}


async def get_redis_pool(
    redis_url: Optional[str] = None,
    max_connections: Optional[int] = None,
) -> redis.ConnectionPool:
    """
    Get or create the connection pool for ``redis_url``.

    Args:
        redis_url: Redis URL; the environment's ``REDIS_URL`` when omitted
        max_connections: Pool size; the environment's setting when omitted

    Returns:
        Redis connection pool
    """
    if redis_url is None or max_connections is None:
        settings = get_settings()
        redis_url = redis_url or settings.REDIS_URL
        max_connections = max_connections or settings.REDIS_MAX_CONNECTIONS

    pool = redis_pools.get(redis_url)
    if pool is None:
        pool = redis.ConnectionPool.from_url(
            redis_url,
            decode_responses=True,
            max_connections=max_connections,
        )
        redis_pools[redis_url] = pool
        logger.info("redis_pool_created", max_connections=max_connections)

    return pool


async def get_redis_client(
    redis_url: Optional[str] = None,
    max_connections: Optional[int] = None,
) -> redis.Redis:
    """
    Get Redis client instance.

    Returns:
        Redis client
    """
    pool = await get_redis_pool(redis_url, max_connections)
    return redis.Redis(connection_pool=pool)


async def close_redis_pool() -> None:
    """Disconnect every pool created so far."""
    while redis_pools:
        _, pool = redis_pools.popitem()
        await pool.disconnect()
