"""
Redis connection

Shared by RedisStore when STORE_BACKEND=redis. A single client is created
per process; @lru_cache makes get_redis() return the same instance.
"""
from __future__ import annotations

from functools import lru_cache

import redis

from app.core.config import settings


@lru_cache(maxsize=1)
def get_redis() -> redis.Redis:
    """
    Return the process-wide Redis client.

    decode_responses=True so stored JSON documents come back as str.
    """
    return redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD,
        decode_responses=True,
    )
