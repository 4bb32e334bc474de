from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ..constants import SNAPSHOT_FORMAT_VERSION
from ..enums import Complexity


class CacheStats(BaseModel):
    """Point-in-time statistics for a response cache.

    Attributes:
        hits (int): Lookups that returned a fresh entry.
        misses (int): Lookups that found nothing or an expired entry.
        sets (int): Calls to ``set``, inserts and overwrites alike.
        evictions (int): Entries removed by LRU eviction.
        expirations (int): Entries purged lazily because they had expired.
        hit_rate (float): ``hits / (hits + misses)``, 0.0 with no lookups.
        size (int): Resident entries, including stale ones not yet purged.
        capacity (int): Maximum number of distinct keys.
        prompt_bytes (int): Sum of stored prompt sizes.
        value_bytes (int): Sum of stored serialized value sizes.
        total_bytes (int): ``prompt_bytes + value_bytes``.
        estimated_savings_note (str): Human-readable savings estimate.
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0
    expirations: int = 0
    hit_rate: float = 0.0
    size: int = 0
    capacity: int = 0
    prompt_bytes: int = 0
    value_bytes: int = 0
    total_bytes: int = 0
    estimated_savings_note: str = ""


class EntryMetadata(BaseModel):
    """Read-only view of a cache entry without its value."""

    exists: bool = True
    age_ms: float
    expires_in_ms: float
    access_count: int
    model: str
    prompt_size: int
    value_size: int


class SnapshotEntry(BaseModel):
    """Serialized form of one cache entry inside a snapshot.

    Timestamps are epoch seconds.
    """

    key: str
    value: Any = None
    created_at: float
    expires_at: float
    last_accessed: float
    access_count: int = 0
    model: str
    prompt_size: int = 0
    value_size: int = 0


class CacheSnapshot(BaseModel):
    """Versioned, serializable copy of all fresh cache entries."""

    version: int = SNAPSHOT_FORMAT_VERSION
    exported_at: str
    entries: List[SnapshotEntry] = Field(default_factory=list)
    stats: Optional[CacheStats] = None


class ImportResult(BaseModel):
    """Outcome of importing a snapshot into a cache."""

    imported: int = 0
    skipped: int = 0
    version_mismatch: bool = False


class ModelUsage(BaseModel):
    """Accumulated usage for one model family."""

    calls: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cache_reads: int = 0
    cost: float = 0.0
    avg_cost_per_call: float = 0.0
    cache_efficiency: float = 0.0


class UsageSummary(BaseModel):
    total_cost: float = 0.0
    total_calls: int = 0
    avg_cost_per_call: float = 0.0


class UsageReport(BaseModel):
    """Per-model usage and overall totals produced by the cost monitor."""

    models: Dict[str, ModelUsage] = Field(default_factory=dict)
    summary: UsageSummary = Field(default_factory=UsageSummary)


class Recommendation(BaseModel):
    type: str
    message: str
    impact: str


class SavingsEstimate(BaseModel):
    """Estimated savings of a routing decision relative to Sonnet.

    Attributes:
        percentage (int): Rounded savings; negative values mean a cost increase.
        description (str): Human-readable summary of the percentage.
    """

    percentage: int
    description: str


class RoutingDecision(BaseModel):
    """Model selected for a prompt and the reasoning behind it."""

    model: str
    complexity: Complexity
    reasoning: str
    estimated_savings: SavingsEstimate
    prompt: Optional[str] = None


class RoutingStats(BaseModel):
    distribution: Dict[str, int]
    average_savings: int = 0
    total_requests: int = 0


class CachingOpportunity(BaseModel):
    type: str
    tokens: int
    savings: str
    recommendation: str
    index: Optional[int] = None


class CachingAnalysis(BaseModel):
    """Estimate of how much of a conversation could use prompt caching."""

    total_tokens: int = 0
    cacheable_tokens: int = 0
    potential_savings_percent: int = 0
    opportunities: List[CachingOpportunity] = Field(default_factory=list)
    break_even_point: str = "2 API calls with same cached content"


class BatchRequest(BaseModel):
    id: str
    model: str
    messages: List[Dict[str, Any]]
    max_tokens: int


class BatchMetrics(BaseModel):
    """Cost estimate for the queued batch against standard pricing."""

    total_requests: int = 0
    estimated_tokens: int = 0
    standard_cost: float = 0.0
    batch_cost: float = 0.0
    savings: float = 0.0
    savings_percent: int = 0
    processing_time: str = ""


class BatchStatus(BaseModel):
    queued: int
    metrics: BatchMetrics


class BenchmarkRequest(BaseModel):
    """Workload item for the cost benchmark.

    When token estimates are omitted the input side is derived from the
    prompt length and the output side falls back to a fixed estimate.
    """

    prompt: str = ""
    estimated_input_tokens: Optional[int] = None
    estimated_output_tokens: Optional[int] = None


class ScenarioResult(BaseModel):
    name: str
    strategy: str
    timestamp: float
    request_count: int
    standard_cost: float
    optimized_cost: float
    savings: float
    savings_percent: float


class BenchmarkROI(BaseModel):
    description: str = "Return on Investment"
    setup_cost: str = "$0 (open source)"
    annual_savings: float = 0.0
    break_even_days: int = 0
    recommendation: str = ""


class BenchmarkReport(BaseModel):
    total_scenarios: int
    total_standard_cost: float
    total_optimized_cost: float
    total_savings: float
    overall_savings_percent: float
    scenarios: List[ScenarioResult]
    roi: BenchmarkROI


class StrategyComparison(BaseModel):
    strategy: str
    cost: float
    savings: float
    savings_percent: float
