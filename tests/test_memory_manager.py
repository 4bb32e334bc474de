"""Tests for the bounded LRU entry store."""

import pytest

from ccoptimizer.application.cache.memory_manager import CacheMemoryManager
from ccoptimizer.application.cache.models import CacheEntry


def make_entry(value: str, at: float, ttl: float = 60.0) -> CacheEntry[str]:
    return CacheEntry(
        value=value,
        created_at=at,
        expires_at=at + ttl,
        last_accessed=at,
        model="haiku-4-5",
        prompt_size=len(value),
        value_size=len(value) + 2,
    )


@pytest.fixture
def memory_manager() -> CacheMemoryManager[str]:
    """Create a memory manager with room for three entries."""
    return CacheMemoryManager(capacity=3)


class TestCacheMemoryManager:
    """Test cases for CacheMemoryManager."""

    def test_put_and_peek(self, memory_manager: CacheMemoryManager[str]) -> None:
        """Test storing and reading an entry."""
        evicted = memory_manager.put("k1", make_entry("a", 1.0))
        assert evicted == []
        assert "k1" in memory_manager
        assert len(memory_manager) == 1
        assert memory_manager.peek("k1").value == "a"
        assert memory_manager.peek("missing") is None

    def test_evicts_oldest_on_growth(
        self, memory_manager: CacheMemoryManager[str]
    ) -> None:
        """Test that a new key at capacity evicts the oldest access."""
        memory_manager.put("k1", make_entry("a", 1.0))
        memory_manager.put("k2", make_entry("b", 2.0))
        memory_manager.put("k3", make_entry("c", 3.0))

        evicted = memory_manager.put("k4", make_entry("d", 4.0))
        assert evicted == ["k1"]
        assert list(memory_manager.cache) == ["k2", "k3", "k4"]

    def test_overwrite_never_evicts(
        self, memory_manager: CacheMemoryManager[str]
    ) -> None:
        """Test that replacing a resident key keeps the other entries."""
        for i in range(3):
            memory_manager.put(f"k{i}", make_entry(str(i), float(i)))

        evicted = memory_manager.put("k0", make_entry("new", 10.0))
        assert evicted == []
        assert len(memory_manager) == 3
        assert list(memory_manager.cache)[-1] == "k0"

    def test_put_unbounded_then_trim(
        self, memory_manager: CacheMemoryManager[str]
    ) -> None:
        """Test that an overfilled store shrinks on the next new key."""
        for i in range(6):
            memory_manager.put_unbounded(f"k{i}", make_entry(str(i), float(i)))
        assert len(memory_manager) == 6

        evicted = memory_manager.put("fresh", make_entry("f", 100.0))
        assert evicted == ["k0", "k1", "k2", "k3"]
        assert len(memory_manager) == 3

    def test_touch_breaks_ties(self, memory_manager: CacheMemoryManager[str]) -> None:
        """Test that touching a key protects it among equal timestamps."""
        memory_manager.put("k1", make_entry("a", 1.0))
        memory_manager.put("k2", make_entry("b", 1.0))
        memory_manager.touch("k1")
        assert memory_manager.evict_lru() == "k2"

    def test_evict_lru_empty(self, memory_manager: CacheMemoryManager[str]) -> None:
        """Test that evicting from an empty store returns None."""
        assert memory_manager.evict_lru() is None

    def test_remove_and_clear(self, memory_manager: CacheMemoryManager[str]) -> None:
        """Test removing single entries and clearing the store."""
        memory_manager.put("k1", make_entry("a", 1.0))
        memory_manager.put("k2", make_entry("b", 2.0))

        assert memory_manager.remove("k1").value == "a"
        assert memory_manager.remove("k1") is None
        memory_manager.clear()
        assert len(memory_manager) == 0

    def test_get_stats(self, memory_manager: CacheMemoryManager[str]) -> None:
        """Test size and byte totals."""
        memory_manager.put("k1", make_entry("abc", 1.0))
        memory_manager.put("k2", make_entry("de", 2.0))

        stats = memory_manager.get_stats()
        assert stats["size"] == 2
        assert stats["capacity"] == 3
        assert stats["prompt_bytes"] == 5
        assert stats["value_bytes"] == 9
        assert stats["total_bytes"] == 14

    def test_items_is_a_snapshot(
        self, memory_manager: CacheMemoryManager[str]
    ) -> None:
        """Test that iterating items tolerates removal during iteration."""
        memory_manager.put("k1", make_entry("a", 1.0))
        memory_manager.put("k2", make_entry("b", 2.0))
        for key, _ in memory_manager.items():
            memory_manager.remove(key)
        assert len(memory_manager) == 0


class TestCacheEntry:
    """Test cases for CacheEntry."""

    def test_expiry_boundary(self) -> None:
        """Test that the expiry instant itself counts as expired."""
        entry = make_entry("a", 0.0, ttl=10.0)
        assert not entry.is_expired(9.99)
        assert entry.is_expired(10.0)

    def test_update_access(self) -> None:
        """Test that a recorded hit bumps count and timestamp."""
        entry = make_entry("a", 0.0)
        entry.update_access(5.0)
        assert entry.access_count == 1
        assert entry.last_accessed == 5.0
