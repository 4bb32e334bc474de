"""Bounded entry store with least-recently-used eviction."""

from collections import OrderedDict
from typing import Any, Dict, Generic, Iterator, List, Optional, Tuple

from .models import CacheEntry, V
from ...logging import debug, LogRecord, LogEvent


class CacheMemoryManager(Generic[V]):
    """
    Owns the key -> entry mapping and enforces the capacity bound.

    Entries are kept in recency order: inserts and hits move a key to the
    end, so among entries sharing the oldest ``last_accessed`` the one that
    was touched first is evicted. The manager holds no lock of its own; the
    owning cache serializes all calls.
    """

    def __init__(self, capacity: int):
        """Initialize the store with a fixed capacity."""
        self.capacity = capacity
        self.cache: OrderedDict[str, CacheEntry[V]] = OrderedDict()

    def __contains__(self, key: str) -> bool:
        return key in self.cache

    def __len__(self) -> int:
        return len(self.cache)

    def peek(self, key: str) -> Optional[CacheEntry[V]]:
        """Return the entry for ``key`` without touching recency order."""
        return self.cache.get(key)

    def touch(self, key: str) -> None:
        """Mark ``key`` as most recently used."""
        self.cache.move_to_end(key)

    def put(self, key: str, entry: CacheEntry[V]) -> List[str]:
        """
        Insert or overwrite an entry, evicting only when the key is new.

        Args:
            key: Cache key
            entry: Entry to store

        Returns:
            Keys evicted to make room, oldest first
        """
        evicted: List[str] = []
        if key in self.cache:
            self.cache[key] = entry
            self.cache.move_to_end(key)
            return evicted

        # An oversized store left behind by an import is trimmed here too
        while self.cache and len(self.cache) >= self.capacity:
            evicted_key = self.evict_lru()
            if evicted_key is None:
                break
            evicted.append(evicted_key)

        self.cache[key] = entry
        return evicted

    def put_unbounded(self, key: str, entry: CacheEntry[V]) -> None:
        """Store an entry without enforcing capacity."""
        self.cache[key] = entry
        self.cache.move_to_end(key)

    def remove(self, key: str) -> Optional[CacheEntry[V]]:
        """Remove and return the entry for ``key``, if any."""
        return self.cache.pop(key, None)

    def evict_lru(self) -> Optional[str]:
        """
        Evict the entry with the oldest ``last_accessed``.

        Returns:
            The evicted key, or None when the store is empty
        """
        if not self.cache:
            return None

        lru_key = min(self.cache, key=lambda k: self.cache[k].last_accessed)
        entry = self.cache.pop(lru_key)

        debug(
            LogRecord(
                event=LogEvent.CACHE_EVICTION.value,
                message="Evicted LRU cache entry",
                data={
                    "evicted_key": lru_key[:8] + "...",
                    "model": entry.model,
                    "access_count": entry.access_count,
                },
            )
        )
        return lru_key

    def clear(self) -> None:
        """Remove every entry."""
        self.cache.clear()

    def items(self) -> Iterator[Tuple[str, CacheEntry[V]]]:
        return iter(list(self.cache.items()))

    def get_stats(self) -> Dict[str, Any]:
        """Get size and byte totals of resident entries."""
        prompt_bytes = sum(e.prompt_size for e in self.cache.values())
        value_bytes = sum(e.value_size for e in self.cache.values())
        return {
            "size": len(self.cache),
            "capacity": self.capacity,
            "prompt_bytes": prompt_bytes,
            "value_bytes": value_bytes,
            "total_bytes": prompt_bytes + value_bytes,
        }
