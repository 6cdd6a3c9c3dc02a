import logging
from typing import Dict, Optional

import redis

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised by storage backends when a read or write cannot be served."""
    pass


class StorageQuotaExceeded(StorageError):
    """Raised when a write would exceed the backend's size quota."""
    pass


class MemoryStorage:
    """
    Process-local key/value storage with an optional byte quota.

    Mirrors the browser `localStorage` contract: string keys, string values,
    synchronous access.
    """
    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
            if others + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageQuotaExceeded(f"Writing key '{key}' would exceed quota of {self.quota_bytes} bytes")
        self._items[key] = value

    def delete(self, key: str) -> None:
        self._items.pop(key, None)


class RedisStorage:
    """Key/value storage on a synchronous redis client; redis failures surface as StorageError."""

    def __init__(self, client: Optional[redis.Redis] = None, url: str = "redis://localhost:6379/0"):
        """
        Args:
            client: Pre-built client. When omitted one is created from `url`.
            url: Redis connection URL.
        """
        if client is None:
            logger.info(f"Creating Redis client for {url}")
            # decode_responses=True so values come back as str, not bytes
            client = redis.Redis.from_url(url, decode_responses=True, socket_connect_timeout=1, socket_timeout=2)
        self.client = client

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis.exceptions.RedisError as e:
            logger.error(f"Error getting key '{key}' from Redis: {e}")
            raise StorageError(str(e)) from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value)
            logger.debug(f"Stored key='{key}' ({len(value)} chars)")
        except redis.exceptions.RedisError as e:
            logger.error(f"Error setting key '{key}' in Redis: {e}")
            raise StorageError(str(e)) from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.exceptions.RedisError as e:
            logger.error(f"Error deleting key '{key}' from Redis: {e}")
            raise StorageError(str(e)) from e
