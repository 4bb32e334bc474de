"""Per-model usage and cost tracking."""

from typing import Dict, List, Optional, Tuple

from ..constants import (
    CACHE_EFFICIENCY_WARNING_THRESHOLD,
    CACHE_READ_PRICE_FACTOR,
    FALLBACK_MODEL_FAMILY,
    MODEL_PRICING_PER_MTOK,
)
from ..domain.exceptions import ValidationError
from ..domain.models import ModelUsage, Recommendation, UsageReport, UsageSummary
from ..logging import debug, LogRecord, LogEvent


class CostMonitor:
    """
    Tracks token usage and cost per model family.

    Prices are per million tokens. Provider cache reads are billed at a
    fraction of the input price and are part of ``input_tokens``.
    """

    def __init__(self, pricing: Optional[Dict[str, Tuple[float, float]]] = None):
        self.pricing = dict(pricing or MODEL_PRICING_PER_MTOK)
        self.usage: Dict[str, ModelUsage] = {}

    @staticmethod
    def normalize_model(model: str) -> str:
        """Map a model name onto its pricing family."""
        name = model.lower()
        for family in ("haiku", "sonnet", "opus"):
            if family in name:
                return f"{family}-4-5"
        return FALLBACK_MODEL_FAMILY

    def calculate_cost(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int,
        cache_reads: int = 0,
    ) -> float:
        """
        Calculate the cost of one call in dollars.

        Raises:
            ValidationError: If a token count is negative or cache reads
                exceed input tokens
        """
        if min(input_tokens, output_tokens, cache_reads) < 0:
            raise ValidationError(
                "Token counts must not be negative",
                details={
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                    "cache_reads": cache_reads,
                },
            )
        if cache_reads > input_tokens:
            raise ValidationError(
                "Cache reads cannot exceed input tokens",
                details={"input_tokens": input_tokens, "cache_reads": cache_reads},
            )

        input_price, output_price = self.pricing.get(
            self.normalize_model(model), self.pricing[FALLBACK_MODEL_FAMILY]
        )
        input_cost = ((input_tokens - cache_reads) / 1e6) * input_price
        cache_read_cost = (cache_reads / 1e6) * input_price * CACHE_READ_PRICE_FACTOR
        output_cost = (output_tokens / 1e6) * output_price
        return input_cost + cache_read_cost + output_cost

    def track_usage(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int,
        cache_reads: int = 0,
    ) -> float:
        """Record one call and return its cost."""
        cost = self.calculate_cost(model, input_tokens, output_tokens, cache_reads)
        family = self.normalize_model(model)

        stats = self.usage.setdefault(family, ModelUsage())
        stats.calls += 1
        stats.input_tokens += input_tokens
        stats.output_tokens += output_tokens
        stats.cache_reads += cache_reads
        stats.cost += cost

        debug(
            LogRecord(
                event=LogEvent.COST_TRACKING.value,
                message=f"Tracked usage for {family}",
                data={
                    "model": model,
                    "family": family,
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                    "cache_reads": cache_reads,
                    "cost": cost,
                },
            )
        )
        return cost

    def generate_report(self) -> UsageReport:
        """Summarize usage per model family and overall."""
        models: Dict[str, ModelUsage] = {}
        total_cost = 0.0
        total_calls = 0

        for family, stats in self.usage.items():
            total_cost += stats.cost
            total_calls += stats.calls
            # cache_reads are a subset of input_tokens
            efficiency = (
                stats.cache_reads / stats.input_tokens * 100
                if stats.input_tokens
                else 0.0
            )
            models[family] = stats.model_copy(
                update={
                    "avg_cost_per_call": stats.cost / stats.calls,
                    "cache_efficiency": round(efficiency, 1),
                }
            )

        return UsageReport(
            models=models,
            summary=UsageSummary(
                total_cost=total_cost,
                total_calls=total_calls,
                avg_cost_per_call=total_cost / total_calls if total_calls else 0.0,
            ),
        )

    def get_optimizations(self) -> List[Recommendation]:
        """Suggest cheaper models and better caching based on tracked usage."""
        recommendations: List[Recommendation] = []
        report = self.generate_report()

        sonnet = report.models.get("sonnet-4-5")
        if sonnet and sonnet.calls > 0:
            recommendations.append(
                Recommendation(
                    type="model-downgrade",
                    message="Consider Haiku for simple tasks (67% savings)",
                    impact="High",
                )
            )

        for family, stats in report.models.items():
            if stats.cache_efficiency < CACHE_EFFICIENCY_WARNING_THRESHOLD:
                recommendations.append(
                    Recommendation(
                        type="caching",
                        message=f"Improve {family} caching (current: {stats.cache_efficiency:.1f}%)",
                        impact="High",
                    )
                )

        return recommendations
