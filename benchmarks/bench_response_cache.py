"""Benchmarks for response cache operations."""

import time

from ccoptimizer.application.cache.keys import generate_cache_key
from ccoptimizer.application.cache.response_cache import ResponseCache

OPTIONS = {"temperature": 0.2, "max_tokens": 1024}


class TestResponseCacheOperations:
    """Benchmark response cache lookups and inserts."""

    def test_cache_hit(self, benchmark):
        """Benchmark cache hit performance."""
        cache: ResponseCache[str] = ResponseCache(capacity=1000)
        cache.set("Hello", "Hi there", options=OPTIONS)

        result = benchmark(cache.get, "Hello", options=OPTIONS)
        assert result == "Hi there"

    def test_cache_miss(self, benchmark):
        """Benchmark lookup of an absent key."""
        cache: ResponseCache[str] = ResponseCache(capacity=1000)

        result = benchmark(cache.get, "Never stored")
        assert result is None

    def test_set_with_eviction(self, benchmark):
        """Benchmark inserts into a full cache, each evicting the LRU entry."""
        cache: ResponseCache[str] = ResponseCache(capacity=1000)
        for i in range(1000):
            cache.set(f"Message {i}", f"Answer {i}")

        def insert_with_eviction():
            cache.set(f"Message at {time.time_ns()}", "Answer")

        benchmark(insert_with_eviction)
        assert cache.get_stats().size == 1000

    def test_key_generation(self, benchmark):
        """Benchmark cache key derivation for a long prompt."""
        prompt = "Summarize the following document. " * 200

        key = benchmark(generate_cache_key, prompt, "sonnet-4-5", OPTIONS)
        assert len(key) == 64


class TestSnapshotOperations:
    """Benchmark snapshot export and import."""

    def test_export(self, benchmark):
        """Benchmark exporting a full cache."""
        cache: ResponseCache[dict] = ResponseCache(capacity=1000)
        for i in range(1000):
            cache.set(f"Message {i}", {"text": f"Answer {i}"})

        snapshot = benchmark(cache.export)
        assert len(snapshot.entries) == 1000

    def test_import(self, benchmark):
        """Benchmark importing a snapshot's JSON form."""
        source: ResponseCache[dict] = ResponseCache(capacity=1000)
        for i in range(1000):
            source.set(f"Message {i}", {"text": f"Answer {i}"})
        data = source.export().model_dump(mode="json")

        def import_fresh():
            return ResponseCache(capacity=1000).import_snapshot(data)

        result = benchmark(import_fresh)
        assert result.imported == 1000
