# Key/value storage backends for the local event buffer.

from .backends import MemoryStorage, RedisStorage, StorageError, StorageQuotaExceeded

__all__ = [
    "MemoryStorage",
    "RedisStorage",
    "StorageError",
    "StorageQuotaExceeded",
]
