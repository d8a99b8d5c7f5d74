import logging
from collections import OrderedDict
from datetime import datetime
from typing import Optional, Dict, List, Callable, Any, Hashable

logger = logging.getLogger("club_stats_qa")


class CorpusCache:
    """
    Entity-name snapshots keyed by entity type, each with its own fetch time.

    The clock is injectable so staleness can be tested without sleeping.
    """

    def __init__(self, cache_duration: int = 300, clock: Callable[[], datetime] = datetime.now):
        self.cache_duration = cache_duration
        self._clock = clock
        self.entities: Dict[Hashable, List[str]] = {}
        self.last_update: Dict[Hashable, datetime] = {}

    def is_stale(self, entity_type: Hashable) -> bool:
        last = self.last_update.get(entity_type)
        return last is None or (self._clock() - last).total_seconds() > self.cache_duration

    def get(self, entity_type: Hashable) -> Optional[List[str]]:
        """Cached corpus, or None when missing or expired."""
        if entity_type not in self.entities or self.is_stale(entity_type):
            return None
        return self.entities[entity_type]

    def set(self, entity_type: Hashable, names: List[str]):
        self.entities[entity_type] = names
        self.last_update[entity_type] = self._clock()

    def clear(self):
        self.entities.clear()
        self.last_update.clear()
        logger.info("Corpus cache cleared")

    def clear_type(self, entity_type: Hashable):
        self.entities.pop(entity_type, None)
        self.last_update.pop(entity_type, None)
        logger.info(f"Corpus cache cleared for {entity_type}")


class LRUCache:
    """Bounded least-recently-used cache. Reads refresh recency."""

    def __init__(self, capacity: int = 500):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._data: "OrderedDict[str, Any]" = OrderedDict()

    def get(self, key: str) -> Optional[Any]:
        if key not in self._data:
            return None
        self._data.move_to_end(key)
        return self._data[key]

    def set(self, key: str, value: Any):
        if key in self._data:
            self._data.move_to_end(key)
        self._data[key] = value
        if len(self._data) > self.capacity:
            self._data.popitem(last=False)

    def has(self, key: str) -> bool:
        return key in self._data

    def delete(self, key: str) -> bool:
        if key in self._data:
            del self._data[key]
            return True
        return False

    def clear(self):
        self._data.clear()

    def clear_by_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix. Returns the number removed."""
        doomed = [k for k in self._data if k.startswith(prefix)]
        for key in doomed:
            del self._data[key]
        return len(doomed)

    def __len__(self) -> int:
        return len(self._data)

    @property
    def size(self) -> int:
        return len(self._data)
