"""Enums module for ccoptimizer.

Contains all enumeration classes used throughout the package.
"""

from enum import StrEnum


class Complexity(StrEnum):
    """Task complexity levels produced by the model router."""
    Simple = "simple"
    Medium = "medium"
    Complex = "complex"
    Critical = "critical"


class BenchmarkStrategy(StrEnum):
    """Optimization strategies the cost benchmark can simulate."""
    Standard = "standard"
    ModelSelection = "model-selection"
    Caching = "caching"
    Batch = "batch"
    All = "all"


class MessageRoles(StrEnum):
    """Message role constants for chat requests."""
    User = "user"
    Assistant = "assistant"
