"""Client-side cost-optimization helpers for hosted LLM APIs."""

__version__ = "1.0.0"
