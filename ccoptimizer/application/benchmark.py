"""Simulated cost comparison of optimization strategies."""

import math
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..constants import (
    BATCH_DISCOUNT,
    BENCHMARK_ASSUMED_CACHE_HIT_RATE,
    BENCHMARK_BATCH_STRATEGIES,
    BENCHMARK_CACHING_STRATEGIES,
    BENCHMARK_DEFAULT_OUTPUT_TOKENS,
    BENCHMARK_STRATEGIES,
    CACHE_HIT_SAVINGS_PERCENT,
    CHARS_PER_TOKEN_ESTIMATE,
    MODEL_PRICING_PER_MTOK,
)
from ..domain.exceptions import ValidationError
from ..domain.models import (
    BenchmarkReport,
    BenchmarkRequest,
    BenchmarkROI,
    ScenarioResult,
    StrategyComparison,
)
from ..enums import BenchmarkStrategy
from ..logging import info, LogRecord, LogEvent


def count_tokens(requests: Sequence[BenchmarkRequest]) -> Tuple[int, int]:
    """Total (input, output) tokens, estimating where a request has no figure."""
    input_tokens = 0
    output_tokens = 0
    for req in requests:
        if req.estimated_input_tokens is not None:
            input_tokens += req.estimated_input_tokens
        else:
            input_tokens += math.ceil(len(req.prompt) / CHARS_PER_TOKEN_ESTIMATE)
        if req.estimated_output_tokens is not None:
            output_tokens += req.estimated_output_tokens
        else:
            output_tokens += BENCHMARK_DEFAULT_OUTPUT_TOKENS
    return input_tokens, output_tokens


def _priced(family: str, input_tokens: int, output_tokens: int) -> Tuple[float, float]:
    input_price, output_price = MODEL_PRICING_PER_MTOK[family]
    return input_tokens / 1e6 * input_price, output_tokens / 1e6 * output_price


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole > 0 else 0.0


def _recommendation(savings_percent: float) -> str:
    if savings_percent > 50:
        return "HIGHLY RECOMMENDED"
    if savings_percent > 20:
        return "RECOMMENDED"
    return "BENEFICIAL"


class CostBenchmark:
    """
    Compares a Sonnet-only baseline with optimized strategies.

    Every run is kept so ``get_report`` can summarize them together.
    """

    def __init__(self):
        self.runs: List[ScenarioResult] = []

    @staticmethod
    def calculate_standard_cost(requests: Sequence[BenchmarkRequest]) -> float:
        input_cost, output_cost = _priced("sonnet-4-5", *count_tokens(requests))
        return input_cost + output_cost

    @staticmethod
    def calculate_optimized_cost(
        requests: Sequence[BenchmarkRequest],
        strategy: BenchmarkStrategy = BenchmarkStrategy.All,
    ) -> float:
        """Cost under ``strategy``; every strategy except ``standard`` runs on Haiku."""
        input_tokens, output_tokens = count_tokens(requests)
        if strategy == BenchmarkStrategy.Standard:
            input_cost, output_cost = _priced("sonnet-4-5", input_tokens, output_tokens)
            return input_cost + output_cost

        input_cost, output_cost = _priced("haiku-4-5", input_tokens, output_tokens)
        if strategy.value in BENCHMARK_CACHING_STRATEGIES:
            input_cost *= 1 - BENCHMARK_ASSUMED_CACHE_HIT_RATE * CACHE_HIT_SAVINGS_PERCENT / 100
        if strategy.value in BENCHMARK_BATCH_STRATEGIES:
            input_cost *= 1 - BATCH_DISCOUNT
            output_cost *= 1 - BATCH_DISCOUNT
        return input_cost + output_cost

    def run_scenario(
        self,
        name: str,
        requests: Sequence[BenchmarkRequest],
        strategy: str = BenchmarkStrategy.All,
    ) -> ScenarioResult:
        """
        Price one workload under the baseline and under ``strategy``.

        Raises:
            ValidationError: If the strategy is unknown
        """
        try:
            chosen = BenchmarkStrategy(strategy)
        except ValueError:
            raise ValidationError(
                f"Unknown benchmark strategy '{strategy}'",
                details={"strategy": strategy, "allowed": list(BENCHMARK_STRATEGIES)},
            ) from None

        standard_cost = self.calculate_standard_cost(requests)
        optimized_cost = self.calculate_optimized_cost(requests, chosen)
        savings = standard_cost - optimized_cost

        result = ScenarioResult(
            name=name,
            strategy=chosen.value,
            timestamp=time.time(),
            request_count=len(requests),
            standard_cost=standard_cost,
            optimized_cost=optimized_cost,
            savings=savings,
            savings_percent=_percent(savings, standard_cost),
        )
        self.runs.append(result)

        info(
            LogRecord(
                event=LogEvent.BENCHMARK_EVENT.value,
                message=f"Benchmark scenario '{name}' saved {result.savings_percent}%",
                data={
                    "scenario": name,
                    "strategy": chosen.value,
                    "requests": len(requests),
                    "savings_percent": result.savings_percent,
                },
            )
        )
        return result

    def get_report(self) -> Optional[BenchmarkReport]:
        """Summarize all runs, or None when nothing has run yet."""
        if not self.runs:
            return None

        total_standard = sum(r.standard_cost for r in self.runs)
        total_optimized = sum(r.optimized_cost for r in self.runs)
        total_savings = sum(r.savings for r in self.runs)
        overall = _percent(total_savings, total_standard)

        return BenchmarkReport(
            total_scenarios=len(self.runs),
            total_standard_cost=total_standard,
            total_optimized_cost=total_optimized,
            total_savings=total_savings,
            overall_savings_percent=overall,
            scenarios=list(self.runs),
            roi=BenchmarkROI(
                annual_savings=round(total_savings * 365, 2),
                recommendation=_recommendation(overall),
            ),
        )

    def compare_strategies(
        self, requests: Sequence[BenchmarkRequest]
    ) -> List[StrategyComparison]:
        """Run every strategy over the same workload."""
        comparison = []
        for strategy in BENCHMARK_STRATEGIES:
            result = self.run_scenario(f"{strategy}-strategy", requests, strategy)
            comparison.append(
                StrategyComparison(
                    strategy=strategy,
                    cost=result.optimized_cost,
                    savings=result.savings,
                    savings_percent=result.savings_percent,
                )
            )
        return comparison

    def export(self) -> Dict[str, Any]:
        report = self.get_report()
        return {
            "benchmarks": [r.model_dump() for r in self.runs],
            "summary": report.model_dump() if report else None,
            "exported_at": datetime.now(timezone.utc).isoformat(),
        }
