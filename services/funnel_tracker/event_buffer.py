import json
import logging
from typing import Any, Dict, List, Optional

from src.storage import MemoryStorage, StorageError

from .definitions import EVENT_BUFFER_CAPACITY, EVENT_BUFFER_KEY

logger = logging.getLogger(__name__)


class EventBuffer:
    """
    Capped FIFO buffer of event payloads persisted as one JSON array.

    Appends read the stored array, add the payload, drop the oldest entries
    beyond `capacity` and write the array back. Storage failures are logged
    and swallowed; callers keep their own in-memory state.
    """
    def __init__(self, storage=None, key: str = EVENT_BUFFER_KEY, capacity: int = EVENT_BUFFER_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Event buffer capacity must be positive, got {capacity}")
        self.storage = storage if storage is not None else MemoryStorage()
        self.key = key
        self.capacity = capacity

    def _load(self) -> List[Dict[str, Any]]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            events = json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable event buffer under key '{self.key}'")
            return []
        if not isinstance(events, list):
            logger.warning(f"Discarding event buffer under key '{self.key}': expected a JSON array")
            return []
        payloads = [e for e in events if isinstance(e, dict)]
        if len(payloads) != len(events):
            logger.warning(f"Dropping {len(events) - len(payloads)} non-object entries from event buffer '{self.key}'")
        return payloads

    def read(self) -> List[Dict[str, Any]]:
        try:
            return self._load()
        except (StorageError, OSError) as e:
            logger.warning(f"Could not read event buffer: {e}")
            return []

    def append(self, payload: Dict[str, Any]) -> bool:
        """Persists one payload. Returns False when storage rejected the write."""
        try:
            events = self._load()
            events.append(payload)
            if len(events) > self.capacity:
                del events[: len(events) - self.capacity]
            self.storage.set(self.key, json.dumps(events, ensure_ascii=False, default=str))
            return True
        except (StorageError, OSError) as e:
            logger.warning(f"Could not save conversion data: {e}")
            return False

    def clear(self) -> None:
        try:
            self.storage.set(self.key, "[]")
        except (StorageError, OSError) as e:
            logger.warning(f"Could not clear event buffer: {e}")

    def __len__(self) -> int:
        return len(self.read())
