"""
Redis client for basecore.

One client per process, created on first use from REDIS_URL.
"""

import functools

import redis

from basecore.settings import get_settings


@functools.lru_cache()
def get_redis_client() -> redis.Redis:
    """
    Get Redis client (cached).

    Responses are decoded to str; the site cache and session stores rely on it.
    """
    return redis.from_url(get_settings().REDIS_URL, decode_responses=True)
