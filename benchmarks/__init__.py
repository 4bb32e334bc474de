"""Benchmark suite for ccoptimizer.

This package contains performance benchmarks for the hot paths of the
response cache.

Benchmark Modules:
    - bench_response_cache: lookups, inserts with eviction, key derivation
      and snapshot export/import

Usage:
    pytest benchmarks/bench_response_cache.py --benchmark-only -v
"""

__all__ = []
