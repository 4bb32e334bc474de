"""Response memoization cache with LRU eviction and lazy TTL expiry."""

import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .keys import generate_cache_key
from .memory_manager import CacheMemoryManager
from .models import CacheEntry, V, estimate_value_size
from .statistics import CacheStatistics
from ...constants import (
    CACHE_HIT_SAVINGS_PERCENT,
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_MODEL,
    SNAPSHOT_FORMAT_VERSION,
)
from ...domain.exceptions import ConfigurationError, SnapshotError, ValidationError
from ...domain.models import (
    CacheSnapshot,
    CacheStats,
    EntryMetadata,
    ImportResult,
    SnapshotEntry,
)
from ...logging import debug, info, warning, LogRecord, LogEvent

Options = Optional[Mapping[Any, Any]]


class ResponseCache(Generic[V]):
    """
    Bounded, time-limited memoization of model responses.

    Values are stored under a key derived from (prompt, model, options).
    Capacity is enforced before an insert that would add a distinct key,
    by evicting the least recently read entry. Expiry is checked lazily
    when an entry is looked up; there is no background sweep.

    Every public operation runs under one re-entrant lock, so the cache can
    be shared between threads. Returned values are the stored objects
    themselves; callers should treat them as immutable.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the response cache.

        Args:
            ttl_seconds: Default lifetime of an entry
            capacity: Maximum number of distinct keys held at once
            clock: Source of the current epoch time in seconds

        Raises:
            ConfigurationError: If capacity is below 1 or the TTL is negative
        """
        if capacity < 1:
            raise ConfigurationError(
                "Cache capacity must be at least 1",
                config_key="capacity",
                details={"capacity": capacity},
            )
        if ttl_seconds < 0:
            raise ConfigurationError(
                "Cache TTL must not be negative",
                config_key="ttl_seconds",
                details={"ttl_seconds": ttl_seconds},
            )

        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._memory_manager: CacheMemoryManager[V] = CacheMemoryManager(capacity)
        self._statistics = CacheStatistics()
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._memory_manager.capacity

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @staticmethod
    def generate_key(prompt: str, model: str = DEFAULT_MODEL, options: Options = None) -> str:
        """Derive the cache key for a lookup."""
        return generate_cache_key(prompt, model, options)

    def get(
        self, prompt: str, model: str = DEFAULT_MODEL, options: Options = None
    ) -> Optional[V]:
        """
        Look up a cached value.

        A hit refreshes the entry's recency and access count. An expired
        entry is purged and reported as a miss.

        Args:
            prompt: Prompt text
            model: Model tag the response was produced by
            options: Request options that influence the response

        Returns:
            The stored value, or None on a miss
        """
        cache_key = self.generate_key(prompt, model, options)

        with self._lock:
            entry = self._memory_manager.peek(cache_key)
            if entry is None:
                self._statistics.record_miss()
                return None

            now = self._clock()
            if entry.is_expired(now):
                self._memory_manager.remove(cache_key)
                self._statistics.record_expiration()
                self._statistics.record_miss()
                debug(
                    LogRecord(
                        event=LogEvent.CACHE_MISS.value,
                        message="Cache entry expired",
                        data={"cache_key": cache_key[:8] + "...", "model": model},
                    )
                )
                return None

            entry.update_access(now)
            self._memory_manager.touch(cache_key)
            self._statistics.record_hit()

        debug(
            LogRecord(
                event=LogEvent.CACHE_HIT.value,
                message="Cache hit",
                data={
                    "cache_key": cache_key[:8] + "...",
                    "model": model,
                    "access_count": entry.access_count,
                },
            )
        )
        return entry.value

    def set(
        self,
        prompt: str,
        value: V,
        model: str = DEFAULT_MODEL,
        ttl_seconds: Optional[float] = None,
        options: Options = None,
    ) -> None:
        """
        Store a value, replacing any entry under the same key.

        When the key is new and the cache is full, least recently used
        entries are evicted first. Overwriting a resident key never evicts.

        Args:
            prompt: Prompt text
            value: Response to memoize
            model: Model tag the response was produced by
            ttl_seconds: Lifetime of this entry; the cache default when None
            options: Request options that influence the response

        Raises:
            ValidationError: If ``ttl_seconds`` is negative
        """
        ttl = self._ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl < 0:
            raise ValidationError(
                "Entry TTL must not be negative", details={"ttl_seconds": ttl}
            )

        cache_key = self.generate_key(prompt, model, options)
        value_size = estimate_value_size(value)

        with self._lock:
            now = self._clock()
            entry = CacheEntry(
                value=value,
                created_at=now,
                expires_at=now + ttl,
                last_accessed=now,
                model=model,
                prompt_size=len(prompt),
                value_size=value_size,
            )
            evicted = self._memory_manager.put(cache_key, entry)
            if evicted:
                self._statistics.record_eviction(len(evicted))
            self._statistics.record_set()

        debug(
            LogRecord(
                event=LogEvent.CACHE_EVENT.value,
                message="Response cached",
                data={
                    "cache_key": cache_key[:8] + "...",
                    "model": model,
                    "ttl_seconds": ttl,
                    "evicted": len(evicted),
                },
            )
        )

    def evict_lru(self) -> Optional[str]:
        """
        Evict the least recently used entry.

        Returns:
            The evicted key, or None when the cache is empty
        """
        with self._lock:
            evicted_key = self._memory_manager.evict_lru()
            if evicted_key is not None:
                self._statistics.record_eviction()
            return evicted_key

    def clear(self) -> None:
        """Remove all entries. Statistics are cumulative and are kept."""
        with self._lock:
            removed = len(self._memory_manager)
            self._memory_manager.clear()

        info(
            LogRecord(
                event=LogEvent.CACHE_EVENT.value,
                message="Cache cleared",
                data={"removed_entries": removed},
            )
        )

    def get_stats(self) -> CacheStats:
        """Get cache statistics; ``size`` counts stale entries not yet purged."""
        with self._lock:
            return self._build_stats()

    def _build_stats(self) -> CacheStats:
        counters = self._statistics.get_stats()
        return CacheStats(
            **counters,
            **self._memory_manager.get_stats(),
            estimated_savings_note=(
                f"~{CACHE_HIT_SAVINGS_PERCENT}% of call cost saved on each of "
                f"{counters['hits']} cache hits"
            ),
        )

    def get_metadata(
        self, prompt: str, model: str = DEFAULT_MODEL, options: Options = None
    ) -> Optional[EntryMetadata]:
        """
        Inspect an entry without consuming it.

        Does not count as a hit or miss, does not change recency or access
        count, and does not purge expired entries.

        Returns:
            Metadata for a fresh entry, or None if absent or expired
        """
        cache_key = self.generate_key(prompt, model, options)

        with self._lock:
            entry = self._memory_manager.peek(cache_key)
            if entry is None:
                return None
            now = self._clock()
            if entry.is_expired(now):
                return None

            return EntryMetadata(
                exists=True,
                age_ms=(now - entry.created_at) * 1000,
                expires_in_ms=max(0.0, (entry.expires_at - now) * 1000),
                access_count=entry.access_count,
                model=entry.model,
                prompt_size=entry.prompt_size,
                value_size=entry.value_size,
            )

    def export(self) -> CacheSnapshot:
        """
        Snapshot every fresh entry.

        Expired entries are left out of the snapshot but stay resident.
        """
        with self._lock:
            now = self._clock()
            entries = [
                SnapshotEntry(
                    key=key,
                    value=entry.value,
                    created_at=entry.created_at,
                    expires_at=entry.expires_at,
                    last_accessed=entry.last_accessed,
                    access_count=entry.access_count,
                    model=entry.model,
                    prompt_size=entry.prompt_size,
                    value_size=entry.value_size,
                )
                for key, entry in self._memory_manager.items()
                if not entry.is_expired(now)
            ]
            snapshot = CacheSnapshot(
                version=SNAPSHOT_FORMAT_VERSION,
                exported_at=datetime.fromtimestamp(now, timezone.utc).isoformat(),
                entries=entries,
                stats=self._build_stats(),
            )

        info(
            LogRecord(
                event=LogEvent.SNAPSHOT_EXPORT.value,
                message=f"Exported {len(entries)} cache entries",
                data={"exported": len(entries)},
            )
        )
        return snapshot

    def import_snapshot(
        self, snapshot: Union[CacheSnapshot, Mapping[str, Any]]
    ) -> ImportResult:
        """
        Restore entries from a snapshot.

        Entries keep their original timestamps and are skipped when already
        expired by their own ``expires_at``. Imported entries bypass the
        capacity check; the next ``set`` of a new key trims the store back to
        capacity. A snapshot with an unknown format version is not applied.

        Args:
            snapshot: A snapshot model or its plain JSON form

        Returns:
            Counts of imported and skipped entries

        Raises:
            SnapshotError: If a version 1 snapshot is malformed
        """
        if isinstance(snapshot, CacheSnapshot):
            version = snapshot.version
            total = len(snapshot.entries)
        else:
            version = snapshot.get("version")
            raw_entries = snapshot.get("entries") or []
            total = len(raw_entries) if isinstance(raw_entries, list) else 0

        if version != SNAPSHOT_FORMAT_VERSION:
            warning(
                LogRecord(
                    event=LogEvent.SNAPSHOT_IMPORT.value,
                    message="Cache snapshot version mismatch",
                    data={
                        "snapshot_version": version,
                        "expected_version": SNAPSHOT_FORMAT_VERSION,
                        "skipped": total,
                    },
                )
            )
            return ImportResult(imported=0, skipped=total, version_mismatch=True)

        if not isinstance(snapshot, CacheSnapshot):
            try:
                snapshot = CacheSnapshot.model_validate(snapshot)
            except PydanticValidationError as e:
                raise SnapshotError(
                    "Malformed cache snapshot", details={"errors": e.errors()}
                ) from e

        imported = 0
        with self._lock:
            now = self._clock()
            for item in snapshot.entries:
                if now >= item.expires_at:
                    continue
                self._memory_manager.put_unbounded(
                    item.key,
                    CacheEntry(
                        value=item.value,
                        created_at=item.created_at,
                        expires_at=item.expires_at,
                        last_accessed=item.last_accessed,
                        model=item.model,
                        access_count=item.access_count,
                        prompt_size=item.prompt_size,
                        value_size=item.value_size,
                    ),
                )
                imported += 1

        result = ImportResult(imported=imported, skipped=total - imported)
        info(
            LogRecord(
                event=LogEvent.SNAPSHOT_IMPORT.value,
                message=f"Imported {imported} cache entries",
                data=result.model_dump(),
            )
        )
        return result
