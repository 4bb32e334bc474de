"""Prompt caching breakpoints for Anthropic style message payloads."""

import re
from typing import Any, Dict, List, Optional, Sequence

from ..constants import (
    CACHE_HIT_SAVINGS_PERCENT,
    CHARS_PER_TOKEN_ESTIMATE,
    PROMPT_CACHE_MAX_BREAKPOINTS,
    PROMPT_CACHE_TEMPLATES,
    PROMPT_CACHE_THRESHOLD_CHARS,
)
from ..domain.models import CachingAnalysis, CachingOpportunity
from ..logging import debug, LogRecord, LogEvent
from .cache.keys import json_dumps_sorted

TOOL_DEFINITION_PATTERN = re.compile(
    r"function|tool|parameter|schema|definition", re.IGNORECASE
)
EXAMPLE_PATTERN = re.compile(r"example|sample|demo|illustration", re.IGNORECASE)

EPHEMERAL_CACHE_CONTROL: Dict[str, str] = {"type": "ephemeral"}


def content_text(content: Any) -> str:
    """Flatten message content into text for size and keyword checks."""
    if isinstance(content, str):
        return content
    return json_dumps_sorted(content)


class PromptCacheOptimizer:
    """
    Marks large or reusable prompt sections with ``cache_control`` so the
    provider can serve them from its prompt cache.
    """

    def __init__(
        self,
        cache_threshold: int = PROMPT_CACHE_THRESHOLD_CHARS,
        max_cache_breakpoints: int = PROMPT_CACHE_MAX_BREAKPOINTS,
    ):
        self.cache_threshold = cache_threshold
        self.max_cache_breakpoints = max_cache_breakpoints

    def optimize_for_caching(
        self,
        messages: Sequence[Dict[str, Any]],
        system_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build a request body with cache breakpoints applied.

        Returns:
            Dict with ``system`` (None, the plain prompt, or a cached text
            block) and the processed ``messages``
        """
        system: Any = None
        if system_prompt and len(system_prompt) > self.cache_threshold:
            system = [
                {
                    "type": "text",
                    "text": system_prompt,
                    "cache_control": dict(EPHEMERAL_CACHE_CONTROL),
                }
            ]
        elif system_prompt:
            system = system_prompt

        return {
            "system": system,
            "messages": self.identify_cacheable_content(messages),
        }

    def identify_cacheable_content(
        self, messages: Sequence[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        processed: List[Dict[str, Any]] = []
        breakpoints = 0

        for index, message in enumerate(messages):
            if breakpoints < self.max_cache_breakpoints and self.should_cache(
                message, index, messages
            ):
                processed.append(
                    {**message, "content": self.add_cache_control(message["content"])}
                )
                breakpoints += 1
            else:
                processed.append(message)

        if breakpoints:
            debug(
                LogRecord(
                    event=LogEvent.PROMPT_CACHE.value,
                    message=f"Applied {breakpoints} cache breakpoints",
                    data={"breakpoints": breakpoints, "messages": len(messages)},
                )
            )
        return processed

    def should_cache(
        self,
        message: Dict[str, Any],
        index: int,
        messages: Sequence[Dict[str, Any]],
    ) -> bool:
        """Whether a message is worth a cache breakpoint."""
        text = content_text(message.get("content", ""))

        # Early conversation history
        if index < len(messages) - 2 and len(text) > self.cache_threshold:
            return True
        # Large context documents
        if len(text) > self.cache_threshold * 2:
            return True
        return bool(TOOL_DEFINITION_PATTERN.search(text) or EXAMPLE_PATTERN.search(text))

    def add_cache_control(self, content: Any) -> Any:
        """
        Attach an ephemeral cache marker to ``content``.

        A string becomes a single cached text block. For a list of blocks the
        largest text block is marked when it exceeds the threshold. Anything
        else is returned unchanged.
        """
        if isinstance(content, str):
            return [
                {
                    "type": "text",
                    "text": content,
                    "cache_control": dict(EPHEMERAL_CACHE_CONTROL),
                }
            ]

        if isinstance(content, list):
            largest_index = 0
            largest_size = 0
            for i, block in enumerate(content):
                if isinstance(block, dict) and block.get("type") == "text":
                    size = len(block.get("text", ""))
                    if size > largest_size:
                        largest_size = size
                        largest_index = i

            if largest_size > self.cache_threshold:
                cached = list(content)
                cached[largest_index] = {
                    **cached[largest_index],
                    "cache_control": dict(EPHEMERAL_CACHE_CONTROL),
                }
                return cached

        return content

    def analyze_caching_potential(
        self,
        messages: Sequence[Dict[str, Any]],
        system_prompt: Optional[str] = None,
    ) -> CachingAnalysis:
        """Estimate cacheable tokens and the resulting input savings."""
        cacheable_tokens = 0
        total_tokens = 0
        opportunities: List[CachingOpportunity] = []
        savings = f"{CACHE_HIT_SAVINGS_PERCENT}%"

        if system_prompt and len(system_prompt) > self.cache_threshold:
            tokens = len(system_prompt) // CHARS_PER_TOKEN_ESTIMATE
            cacheable_tokens += tokens
            total_tokens += tokens
            opportunities.append(
                CachingOpportunity(
                    type="system_prompt",
                    tokens=tokens,
                    savings=savings,
                    recommendation=f"Cache system prompt for {savings} savings on repeated calls",
                )
            )

        for index, message in enumerate(messages):
            tokens = len(content_text(message.get("content", ""))) // CHARS_PER_TOKEN_ESTIMATE
            total_tokens += tokens
            if self.should_cache(message, index, messages):
                cacheable_tokens += tokens
                opportunities.append(
                    CachingOpportunity(
                        type="message",
                        index=index,
                        tokens=tokens,
                        savings=savings,
                        recommendation=f"Cache message {index} for repeated conversations",
                    )
                )

        potential = (
            round(cacheable_tokens / total_tokens * CACHE_HIT_SAVINGS_PERCENT)
            if total_tokens
            else 0
        )
        return CachingAnalysis(
            total_tokens=total_tokens,
            cacheable_tokens=cacheable_tokens,
            potential_savings_percent=potential,
            opportunities=opportunities,
        )

    @staticmethod
    def create_template(name: str) -> Optional[Dict[str, Any]]:
        """Return a cacheable system prompt template, or None for unknown names."""
        system = PROMPT_CACHE_TEMPLATES.get(name)
        if system is None:
            return None
        return {"system": system, "cache": True}
