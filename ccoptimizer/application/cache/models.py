"""Data models for the cache module."""

import json
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

V = TypeVar("V")


def estimate_value_size(value: Any) -> int:
    """Approximate size of a cached value as the length of its JSON form."""
    try:
        return len(json.dumps(value, default=str, ensure_ascii=False))
    except (TypeError, ValueError):
        return len(repr(value))


@dataclass
class CacheEntry(Generic[V]):
    """One memoized answer to a (prompt, model, options) lookup.

    Timestamps are epoch seconds. Only successful reads touch
    ``last_accessed`` and ``access_count``.
    """

    value: V
    created_at: float
    expires_at: float
    last_accessed: float
    model: str
    access_count: int = 0
    prompt_size: int = 0
    value_size: int = 0

    def is_expired(self, now: float) -> bool:
        """Check if this entry has expired; the expiry instant itself counts as expired."""
        return now >= self.expires_at

    def update_access(self, now: float) -> None:
        """Record a hit."""
        self.access_count += 1
        self.last_accessed = now
