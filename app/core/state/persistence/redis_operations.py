"""Redis persistence layer for the bearer token

The token is stored as a plain string under one fixed key with no TTL. It
survives restarts and is removed only by an explicit delete.
"""
import logging
from typing import Optional

from redis import Redis, RedisError

from core.error.exceptions import StorageException
from core.state.interface import TokenStorageInterface

logger = logging.getLogger(__name__)


class RedisTokenStorage(TokenStorageInterface):
    """Token storage backed by a Redis key"""

    def __init__(self, redis_client: Redis, key: str):
        self.redis = redis_client
        self.key = key

    def load(self) -> Optional[str]:
        try:
            value = self.redis.get(self.key)
        except RedisError as e:
            raise StorageException(f"Redis get failed: {str(e)}", {"key": self.key}) from e

        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def save(self, token: str) -> None:
        try:
            self.redis.set(self.key, token)
        except RedisError as e:
            raise StorageException(f"Redis set failed: {str(e)}", {"key": self.key}) from e
        logger.info(f"Token stored under {self.key}")

    def delete(self) -> None:
        try:
            self.redis.delete(self.key)
        except RedisError as e:
            raise StorageException(f"Redis delete failed: {str(e)}", {"key": self.key}) from e
        logger.info(f"Token removed from {self.key}")
