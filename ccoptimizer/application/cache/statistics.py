"""Cache statistics tracking."""

from typing import Dict, Any


class CacheStatistics:
    """Tracks cumulative cache counters for the lifetime of a cache instance."""

    def __init__(self):
        """Initialize cache statistics."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.evictions = 0
        self.expirations = 0

    def record_hit(self):
        """Record a cache hit."""
        self.hits += 1

    def record_miss(self):
        """Record a cache miss."""
        self.misses += 1

    def record_set(self):
        """Record a set, insert or overwrite."""
        self.sets += 1

    def record_eviction(self, count: int = 1):
        """Record LRU eviction(s)."""
        self.evictions += count

    def record_expiration(self):
        """Record an entry purged because it had expired."""
        self.expirations += 1

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def get_stats(self) -> Dict[str, Any]:
        """Get all counters as a dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "hit_rate": self.hit_rate,
        }
