"""Constants module for ccoptimizer configuration.

Contains price tables, routing defaults, cache defaults and the snapshot
format version used throughout the package.
"""

from typing import Dict, Final, FrozenSet, Tuple

# Response cache defaults
DEFAULT_CACHE_TTL_SECONDS: Final[float] = 3600.0
DEFAULT_CACHE_CAPACITY: Final[int] = 1000
DEFAULT_MODEL: Final[str] = "haiku-4-5"

# Only snapshot format understood by ResponseCache.import_snapshot
SNAPSHOT_FORMAT_VERSION: Final[int] = 1

# Savings attributed to a single cache hit, in percent of the call cost
CACHE_HIT_SAVINGS_PERCENT: Final[int] = 90

# Price per million tokens as (input, output), keyed by model family
MODEL_PRICING_PER_MTOK: Dict[str, Tuple[float, float]] = {
    "haiku-4-5": (1.0, 5.0),
    "sonnet-4-5": (3.0, 15.0),
    "opus-4-5": (5.0, 25.0),
}
FALLBACK_MODEL_FAMILY: Final[str] = "sonnet-4-5"

# Provider-side cache reads are billed at 10% of the input price
CACHE_READ_PRICE_FACTOR: Final[float] = 0.1

# Cost monitor flags models below this cache efficiency
CACHE_EFFICIENCY_WARNING_THRESHOLD: Final[float] = 50.0

# Model routing targets by complexity
ROUTER_SIMPLE_MODEL: Final[str] = "anthropic/claude-haiku-4-5"
ROUTER_MEDIUM_MODEL: Final[str] = "anthropic/claude-haiku-4-5"
ROUTER_COMPLEX_MODEL: Final[str] = "anthropic/claude-sonnet-4-5"
ROUTER_CRITICAL_MODEL: Final[str] = "anthropic/claude-opus-4-5"

# Relative cost against Sonnet, used for routing savings estimates
ROUTER_RELATIVE_COST: Dict[str, float] = {
    "simple": 0.33,
    "medium": 0.33,
    "complex": 1.0,
    "critical": 1.67,
}

ROUTER_REASONS: Dict[str, str] = {
    "simple": "Simple task detected - Haiku provides excellent performance at lowest cost",
    "medium": "Medium complexity - Haiku recommended as starting point, can escalate if needed",
    "complex": "Complex task requires Sonnet-level reasoning and capabilities",
    "critical": "Mission-critical task requires highest capability model",
}

ROUTER_SHORT_PROMPT_WORDS: Final[int] = 20
ROUTER_LONG_PROMPT_WORDS: Final[int] = 200
ROUTER_COMPLEX_PATTERN_WORDS: Final[int] = 100
ROUTER_PROMPT_PREVIEW_CHARS: Final[int] = 50

# Provider prompt caching
PROMPT_CACHE_THRESHOLD_CHARS: Final[int] = 1024
PROMPT_CACHE_MAX_BREAKPOINTS: Final[int] = 4
CHARS_PER_TOKEN_ESTIMATE: Final[int] = 4

PROMPT_CACHE_TEMPLATES: Dict[str, str] = {
    "code_review": (
        "You are an expert code reviewer. Analyze code for bugs, performance issues, "
        "security vulnerabilities, and best practices. Provide specific, actionable feedback."
    ),
    "data_analysis": (
        "You are a data analysis expert. Examine datasets, identify patterns, and provide "
        "insights. Focus on statistical significance and practical implications."
    ),
    "content_generation": (
        "You are a professional content writer. Create engaging, well-structured content "
        "that matches the specified tone and audience."
    ),
}

# Batch submission
BATCH_DEFAULT_MODEL: Final[str] = "claude-haiku-4-5"
BATCH_DEFAULT_MAX_TOKENS: Final[int] = 1024
BATCH_DISCOUNT: Final[float] = 0.5
BATCH_PROCESSING_WINDOW: Final[str] = "5-24 hours"

# Benchmarking
BENCHMARK_DEFAULT_OUTPUT_TOKENS: Final[int] = 256
BENCHMARK_ASSUMED_CACHE_HIT_RATE: Final[float] = 0.5
BENCHMARK_STRATEGIES: Tuple[str, ...] = (
    "standard",
    "model-selection",
    "caching",
    "batch",
    "all",
)
BENCHMARK_CACHING_STRATEGIES: FrozenSet[str] = frozenset({"caching", "all"})
BENCHMARK_BATCH_STRATEGIES: FrozenSet[str] = frozenset({"batch", "all"})
