"""Tests for cache statistics and key derivation."""

import pytest

from ccoptimizer.application.cache.keys import generate_cache_key, json_dumps_sorted
from ccoptimizer.application.cache.response_cache import ResponseCache
from ccoptimizer.application.cache.statistics import CacheStatistics


@pytest.fixture
def cache_statistics() -> CacheStatistics:
    """Create a cache statistics instance for testing."""
    return CacheStatistics()


class TestCacheStatistics:
    """Test cases for CacheStatistics."""

    def test_initial_state(self, cache_statistics: CacheStatistics) -> None:
        """Test that all counters start at zero."""
        stats = cache_statistics.get_stats()
        assert stats == {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "evictions": 0,
            "expirations": 0,
            "hit_rate": 0.0,
        }

    def test_hit_rate(self, cache_statistics: CacheStatistics) -> None:
        """Test hit rate after a mix of hits and misses."""
        for _ in range(2):
            cache_statistics.record_hit()
        for _ in range(6):
            cache_statistics.record_miss()
        assert cache_statistics.hit_rate == pytest.approx(0.25)

    def test_record_eviction_count(self, cache_statistics: CacheStatistics) -> None:
        """Test that several evictions can be recorded at once."""
        cache_statistics.record_eviction()
        cache_statistics.record_eviction(3)
        assert cache_statistics.evictions == 4

    def test_sets_and_expirations(self, cache_statistics: CacheStatistics) -> None:
        """Test set and expiration counters."""
        cache_statistics.record_set()
        cache_statistics.record_expiration()
        assert cache_statistics.sets == 1
        assert cache_statistics.expirations == 1


PROMPT_CORPUS = [
    "",
    "hello",
    "Hello",
    "hello ",
    "What is the capital of France?",
    "多言語のプロンプト",
    "line one\nline two",
    '{"json": "looking"}',
    "a|b",
    "a" * 10_000,
]


class TestCacheKeys:
    """Test cases for cache key derivation."""

    def test_deterministic(self) -> None:
        """Test that equal inputs give equal keys across calls and caches."""
        options = {"temperature": 0.5, "max_tokens": 10}
        first = ResponseCache().generate_key("p", "m", options)
        second = ResponseCache().generate_key("p", "m", dict(options))
        assert first == second == generate_cache_key("p", "m", options)

    def test_hex_digest(self) -> None:
        """Test that keys are SHA-256 hex digests."""
        key = generate_cache_key("p", "m")
        assert len(key) == 64
        int(key, 16)

    def test_distinct_prompts(self) -> None:
        """Test that distinct prompts in the corpus give distinct keys."""
        keys = {generate_cache_key(p, "sonnet-4-5") for p in PROMPT_CORPUS}
        assert len(keys) == len(PROMPT_CORPUS)

    def test_no_separator_collisions(self) -> None:
        """Test that moving text between prompt and model changes the key."""
        assert generate_cache_key("b|c", "a") != generate_cache_key("c", "a|b")

    def test_option_order_irrelevant(self) -> None:
        """Test that option insertion order does not affect the key."""
        assert generate_cache_key("p", "m", {"a": 1, "b": 2}) == generate_cache_key(
            "p", "m", {"b": 2, "a": 1}
        )

    def test_none_options_equal_empty(self) -> None:
        """Test that None and empty options are the same key."""
        assert generate_cache_key("p", "m", None) == generate_cache_key("p", "m", {})

    def test_json_dumps_sorted(self) -> None:
        """Test compact sorted serialization."""
        assert json_dumps_sorted({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_mixed_type_keys(self) -> None:
        """Test that option keys of different types do not need to be comparable."""
        key = generate_cache_key("p", "m", {1: "a", "b": 2})
        assert key == generate_cache_key("p", "m", {"b": 2, 1: "a"})

    def test_key_type_is_significant(self) -> None:
        """Test that keys equal in JSON but differing in type give distinct digests."""
        assert generate_cache_key("p", "m", {1: "a"}) != generate_cache_key(
            "p", "m", {"1": "a"}
        )
        assert generate_cache_key("p", "m", {"o": {True: 1}}) != generate_cache_key(
            "p", "m", {"o": {"true": 1}}
        )

    def test_mapping_and_list_options_differ(self) -> None:
        """Test that a mapping value is not confused with a list of pairs."""
        assert generate_cache_key("p", "m", {"a": {"k": 1}}) != generate_cache_key(
            "p", "m", {"a": [["str", "'k'", 1]]}
        )
