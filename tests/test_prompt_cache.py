"""Tests for prompt caching breakpoints."""

import pytest

from ccoptimizer.application.prompt_cache import PromptCacheOptimizer

EPHEMERAL = {"type": "ephemeral"}


@pytest.fixture
def optimizer() -> PromptCacheOptimizer:
    return PromptCacheOptimizer()


def user(content):
    return {"role": "user", "content": content}


class TestShouldCache:
    """Test cases for PromptCacheOptimizer.should_cache."""

    def test_early_history_over_threshold(self, optimizer: PromptCacheOptimizer) -> None:
        """Test that long early messages are cached."""
        messages = [user("a" * 1500), user("ok"), user("next")]
        assert optimizer.should_cache(messages[0], 0, messages) is True

    def test_recent_message_needs_double_threshold(
        self, optimizer: PromptCacheOptimizer
    ) -> None:
        """Test that the last messages need twice the threshold."""
        messages = [user("a" * 1500)]
        assert optimizer.should_cache(messages[0], 0, messages) is False

        messages = [user("a" * 2100)]
        assert optimizer.should_cache(messages[0], 0, messages) is True

    @pytest.mark.parametrize(
        "content",
        ["Tool definition follows", "Here is an example", "JSON schema", "A demo run"],
    )
    def test_keywords(self, optimizer: PromptCacheOptimizer, content: str) -> None:
        """Test that tool definitions and examples are cached."""
        messages = [user(content)]
        assert optimizer.should_cache(messages[0], 0, messages) is True

    def test_plain_short_message(self, optimizer: PromptCacheOptimizer) -> None:
        """Test that a short ordinary message is not cached."""
        messages = [user("Please review this function for bugs")]
        # "function" is a tool keyword
        assert optimizer.should_cache(messages[0], 0, messages) is True
        messages = [user("Please review this for bugs")]
        assert optimizer.should_cache(messages[0], 0, messages) is False


class TestAddCacheControl:
    """Test cases for PromptCacheOptimizer.add_cache_control."""

    def test_string_content(self, optimizer: PromptCacheOptimizer) -> None:
        """Test that a string becomes one cached text block."""
        assert optimizer.add_cache_control("hello") == [
            {"type": "text", "text": "hello", "cache_control": EPHEMERAL}
        ]

    def test_largest_block_marked(self, optimizer: PromptCacheOptimizer) -> None:
        """Test that the largest text block over the threshold is marked."""
        content = [
            {"type": "text", "text": "short"},
            {"type": "text", "text": "y" * 2000},
        ]
        result = optimizer.add_cache_control(content)
        assert "cache_control" not in result[0]
        assert result[1]["cache_control"] == EPHEMERAL
        assert "cache_control" not in content[1]

    def test_small_blocks_unchanged(self, optimizer: PromptCacheOptimizer) -> None:
        """Test that lists without a large block are returned as is."""
        content = [{"type": "text", "text": "tiny"}, {"type": "image", "source": {}}]
        assert optimizer.add_cache_control(content) is content


class TestOptimizeForCaching:
    """Test cases for request optimization and analysis."""

    def test_long_system_prompt_cached(self, optimizer: PromptCacheOptimizer) -> None:
        """Test that a long system prompt becomes a cached block."""
        result = optimizer.optimize_for_caching([user("hi")], "S" * 2000)
        assert result["system"][0]["cache_control"] == EPHEMERAL

    def test_short_system_prompt_kept(self, optimizer: PromptCacheOptimizer) -> None:
        """Test that a short system prompt stays a plain string."""
        result = optimizer.optimize_for_caching([user("hi")], "Be brief")
        assert result["system"] == "Be brief"
        assert optimizer.optimize_for_caching([user("hi")])["system"] is None

    def test_breakpoint_limit(self, optimizer: PromptCacheOptimizer) -> None:
        """Test that at most four messages receive breakpoints."""
        messages = [user(f"example {i}") for i in range(6)]
        result = optimizer.optimize_for_caching(messages)

        cached = [m for m in result["messages"] if isinstance(m["content"], list)]
        assert len(cached) == 4
        assert result["messages"][5]["content"] == "example 5"

    def test_analyze_caching_potential(self, optimizer: PromptCacheOptimizer) -> None:
        """Test token estimates and potential savings."""
        analysis = optimizer.analyze_caching_potential([user("a" * 400)], "S" * 2000)
        assert analysis.total_tokens == 600
        assert analysis.cacheable_tokens == 500
        assert analysis.potential_savings_percent == 75
        assert [o.type for o in analysis.opportunities] == ["system_prompt"]

    def test_analyze_empty(self, optimizer: PromptCacheOptimizer) -> None:
        """Test analysis of an empty conversation."""
        analysis = optimizer.analyze_caching_potential([])
        assert analysis.total_tokens == 0
        assert analysis.potential_savings_percent == 0


class TestTemplates:
    """Test cases for cacheable templates."""

    @pytest.mark.parametrize("name", ["code_review", "data_analysis", "content_generation"])
    def test_known_templates(self, name: str) -> None:
        """Test that known templates are cacheable system prompts."""
        template = PromptCacheOptimizer.create_template(name)
        assert template["cache"] is True
        assert template["system"].startswith("You are")

    def test_unknown_template(self) -> None:
        """Test that unknown names return None."""
        assert PromptCacheOptimizer.create_template("poetry") is None
