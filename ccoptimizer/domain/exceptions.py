"""Custom exception hierarchy for ccoptimizer.

Expected cache conditions (miss, expiry, snapshot version mismatch) are
reported through return values; these exceptions cover misconfiguration,
invalid caller input and snapshot I/O failures.
"""

from typing import Optional, Dict, Any


class CCOptimizerException(Exception):
    """Base exception for all ccoptimizer-specific exceptions."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CCOptimizerException):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.config_key = config_key


class ValidationError(CCOptimizerException):
    """Raised when caller-supplied values are invalid."""

    pass


class CacheError(CCOptimizerException):
    """Base exception for cache-related errors."""

    pass


class SnapshotError(CacheError):
    """Raised when a cache snapshot cannot be read, parsed or written."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.path = path
