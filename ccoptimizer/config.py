from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices, field_validator
from typing import Optional, List, Union, Any

from ccoptimizer.constants import (
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_MODEL,
    ROUTER_COMPLEX_MODEL,
    ROUTER_CRITICAL_MODEL,
    ROUTER_MEDIUM_MODEL,
    ROUTER_SIMPLE_MODEL,
)
from ccoptimizer.domain.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", env_prefix="", case_sensitive=False
    )

    app_name: str = "ccoptimizer"
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL"))
    log_file_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LOG_FILE_PATH")
    )
    error_log_file_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ERROR_LOG_FILE_PATH")
    )
    log_pretty_console: bool = Field(
        default=False, validation_alias=AliasChoices("LOG_PRETTY_CONSOLE")
    )
    redact_log_fields: Union[List[str], str] = Field(
        default_factory=lambda: ["anthropic_api_key", "authorization"],
        validation_alias=AliasChoices("REDACT_LOG_FIELDS"),
    )

    # Response cache
    cache_ttl_seconds: float = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        validation_alias=AliasChoices("CACHE_TTL_SECONDS"),
    )
    cache_capacity: int = Field(
        default=DEFAULT_CACHE_CAPACITY, validation_alias=AliasChoices("CACHE_CAPACITY")
    )
    cache_snapshot_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CACHE_SNAPSHOT_PATH"),
    )
    default_model: str = Field(
        default=DEFAULT_MODEL, validation_alias=AliasChoices("DEFAULT_MODEL")
    )

    # Model routing targets
    router_simple_model: str = Field(
        default=ROUTER_SIMPLE_MODEL, validation_alias=AliasChoices("ROUTER_SIMPLE_MODEL")
    )
    router_medium_model: str = Field(
        default=ROUTER_MEDIUM_MODEL, validation_alias=AliasChoices("ROUTER_MEDIUM_MODEL")
    )
    router_complex_model: str = Field(
        default=ROUTER_COMPLEX_MODEL,
        validation_alias=AliasChoices("ROUTER_COMPLEX_MODEL"),
    )
    router_critical_model: str = Field(
        default=ROUTER_CRITICAL_MODEL,
        validation_alias=AliasChoices("ROUTER_CRITICAL_MODEL"),
    )

    @field_validator("redact_log_fields")
    @classmethod
    def parse_comma_separated(cls, v: Union[List[str], str]) -> List[str]:
        """Parse comma-separated string values into lists for configuration fields.

        Handles both string inputs (splitting by commas) and already-list inputs.
        Empty strings are converted to empty lists.

        Args:
            v: Input value which can be a string or list

        Returns:
            List of stripped, non-empty items
        """
        if isinstance(v, str):
            if v.strip() == "":
                return []
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    def __init__(self, **kwargs: Any) -> None:
        """Initialize settings object and perform validation.

        Args:
            **kwargs: Keyword arguments for settings initialization

        Raises:
            ConfigurationError: If cache or routing settings are invalid
        """
        super().__init__(**kwargs)
        self._validate_cache()
        self._validate_models()

    def _validate_cache(self) -> None:
        """Validate response cache bounds."""
        if self.cache_capacity < 1:
            raise ConfigurationError(
                "CACHE_CAPACITY must be at least 1.",
                config_key="cache_capacity",
                details={"value": self.cache_capacity},
            )
        if self.cache_ttl_seconds < 0:
            raise ConfigurationError(
                "CACHE_TTL_SECONDS must not be negative.",
                config_key="cache_ttl_seconds",
                details={"value": self.cache_ttl_seconds},
            )

    def _validate_models(self) -> None:
        """Validate that model names are configured."""
        for key in (
            "default_model",
            "router_simple_model",
            "router_medium_model",
            "router_complex_model",
            "router_critical_model",
        ):
            value = getattr(self, key)
            if not (value and value.strip()):
                raise ConfigurationError(
                    f"{key.upper()} is required. Set it in your environment or .env.",
                    config_key=key,
                )
