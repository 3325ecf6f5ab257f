"""
Shared async Redis connection
"""

import logging
from typing import Optional

import redis.asyncio as redis

from .config import settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_connection_attempted = False


async def get_redis_client() -> Optional[redis.Redis]:
    """Return a connected Redis client, or None when Redis is disabled or unreachable.

    The connection is attempted once per process; callers fall back to their
    non-Redis behaviour when this returns None.
    """
    global _redis_client, _connection_attempted

    if not settings.redis_enabled:
        return None
    if _connection_attempted:
        return _redis_client

    _connection_attempted = True
    try:
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        await client.ping()
        _redis_client = client
        logger.info("Connected to Redis")
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        logger.warning("Falling back to in-process storage and direct token refresh")
        _redis_client = None

    return _redis_client


async def close_redis_client() -> None:
    global _redis_client, _connection_attempted

    if _redis_client is not None:
        await _redis_client.aclose()
    _redis_client = None
    _connection_attempted = False
