"""Redis client factory"""
from typing import Optional

from redis import Redis

from config.settings import REDIS_URL


def get_redis_client(url: Optional[str] = None) -> Redis:
    """Get Redis client for token persistence

    Returns:
        Redis client instance

    The client is configured with:
    - decode_responses=True
    - health_check_interval=30
    - retry_on_timeout=True
    """
    return Redis.from_url(
        url or REDIS_URL,
        decode_responses=True,
        health_check_interval=30,
        retry_on_timeout=True,
    )
