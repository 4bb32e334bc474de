"""Response memoization cache with LRU eviction, TTL expiry and snapshots."""

from .response_cache import ResponseCache
from .models import CacheEntry
from .statistics import CacheStatistics
from .keys import generate_cache_key
from .persistence import save_snapshot, load_snapshot

__all__ = [
    "ResponseCache",
    "CacheEntry",
    "CacheStatistics",
    "generate_cache_key",
    "save_snapshot",
    "load_snapshot",
]
