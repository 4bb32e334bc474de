"""Heuristic model routing by prompt complexity."""

import re
from typing import Dict, Iterable, List, Optional, Pattern, Sequence

from ..config import Settings
from ..constants import (
    ROUTER_COMPLEX_MODEL,
    ROUTER_COMPLEX_PATTERN_WORDS,
    ROUTER_CRITICAL_MODEL,
    ROUTER_LONG_PROMPT_WORDS,
    ROUTER_MEDIUM_MODEL,
    ROUTER_PROMPT_PREVIEW_CHARS,
    ROUTER_REASONS,
    ROUTER_RELATIVE_COST,
    ROUTER_SHORT_PROMPT_WORDS,
    ROUTER_SIMPLE_MODEL,
)
from ..domain.models import RoutingDecision, RoutingStats, SavingsEstimate
from ..enums import Complexity
from ..logging import debug, LogRecord, LogEvent

SIMPLE_PATTERNS: Sequence[Pattern[str]] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^(yes|no|true|false)",
        r"^(classify|categorize|tag|label)",
        r"^(extract|find|get|list)",
        r"^(translate|convert|format)",
        r"^(summarize|tldr)",
        r"FAQ",
        r"simple",
    )
)

COMPLEX_PATTERNS: Sequence[Pattern[str]] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^(analyze|explain|describe|evaluate)",
        r"^(generate|create|write|compose)",
        r"^(plan|design|architect)",
        r"^(refactor|optimize|improve)",
        r"code",
        r"algorithm",
        r"system",
        r"architecture",
    )
)


class ModelRouter:
    """Select the cheapest adequate model for a prompt."""

    def __init__(self, models: Optional[Dict[Complexity, str]] = None):
        self.models: Dict[Complexity, str] = {
            Complexity.Simple: ROUTER_SIMPLE_MODEL,
            Complexity.Medium: ROUTER_MEDIUM_MODEL,
            Complexity.Complex: ROUTER_COMPLEX_MODEL,
            Complexity.Critical: ROUTER_CRITICAL_MODEL,
        }
        if models:
            self.models.update(models)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelRouter":
        return cls(
            {
                Complexity.Simple: settings.router_simple_model,
                Complexity.Medium: settings.router_medium_model,
                Complexity.Complex: settings.router_complex_model,
                Complexity.Critical: settings.router_critical_model,
            }
        )

    def classify_complexity(
        self, prompt: str, requires_reasoning: bool = False
    ) -> Complexity:
        """Classify a prompt.

        Simple patterns win over complex ones. A complex pattern only yields
        ``complex`` for long prompts or when reasoning is required; without
        any pattern match the word count decides. Words are runs between
        single spaces, and leading whitespace defeats the anchored patterns.
        """
        text = prompt.lower()
        word_count = len(text.split(" "))

        if any(pattern.search(text) for pattern in SIMPLE_PATTERNS):
            return Complexity.Simple

        if any(pattern.search(text) for pattern in COMPLEX_PATTERNS):
            if word_count > ROUTER_COMPLEX_PATTERN_WORDS or requires_reasoning:
                return Complexity.Complex
            return Complexity.Medium

        if word_count < ROUTER_SHORT_PROMPT_WORDS:
            return Complexity.Simple
        if word_count > ROUTER_LONG_PROMPT_WORDS:
            return Complexity.Complex
        return Complexity.Medium

    def select_model(
        self, prompt: str, requires_reasoning: bool = False
    ) -> RoutingDecision:
        """Pick a model for ``prompt`` and explain the choice."""
        complexity = self.classify_complexity(prompt, requires_reasoning)
        target_model = self.models[complexity]

        debug(
            LogRecord(
                event=LogEvent.MODEL_SELECTION.value,
                message=f"Prompt classified as '{complexity}', routed to '{target_model}'.",
                data={"complexity": complexity.value, "target_model": target_model},
            )
        )
        return RoutingDecision(
            model=target_model,
            complexity=complexity,
            reasoning=ROUTER_REASONS[complexity.value],
            estimated_savings=self.calculate_savings(complexity),
        )

    @staticmethod
    def calculate_savings(complexity: Complexity) -> SavingsEstimate:
        """Estimate savings of ``complexity``'s model against always using Sonnet."""
        actual_cost = ROUTER_RELATIVE_COST[complexity.value]
        savings = round((1.0 - actual_cost) * 100)

        if savings > 0:
            description = f"{savings}% savings vs Sonnet"
        elif savings < 0:
            description = f"{abs(savings)}% increase vs Sonnet"
        else:
            description = "Same cost as Sonnet"
        return SavingsEstimate(percentage=savings, description=description)

    def batch_route(self, prompts: Iterable[str]) -> List[RoutingDecision]:
        """Route several prompts, keeping a short preview of each."""
        decisions = []
        for prompt in prompts:
            decision = self.select_model(prompt)
            decision.prompt = prompt[:ROUTER_PROMPT_PREVIEW_CHARS] + "..."
            decisions.append(decision)
        return decisions

    @staticmethod
    def generate_stats(results: Sequence[RoutingDecision]) -> RoutingStats:
        """Aggregate routing decisions; only positive savings count toward the average."""
        distribution = {c.value: 0 for c in Complexity}
        total_savings = 0

        for result in results:
            distribution[result.complexity.value] += 1
            if result.estimated_savings.percentage > 0:
                total_savings += result.estimated_savings.percentage

        return RoutingStats(
            distribution=distribution,
            average_savings=round(total_savings / len(results)) if results else 0,
            total_requests=len(results),
        )
