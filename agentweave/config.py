"""Configuration settings for agent orchestration.

This module provides hierarchical configuration using pydantic-settings with
nested models, environment variable support and optional YAML overrides.

Features:
- Environment variables with the AGENTWEAVE_ prefix (``__`` for nesting)
- Provider credentials read from OPENAI_ / OPENROUTER_ variables
- .env file support
- YAML configuration files merged over defaults
- Cached global settings instance
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class APIClientSettings(BaseSettings):
    """Shared chat-model client configuration."""

    timeout_seconds: int = Field(
        60, ge=1, le=600, description="Request timeout in seconds"
    )
    max_retries: int = Field(
        3, ge=0, le=10, description="Maximum retry attempts of the model client"
    )


class OpenAISettings(APIClientSettings):
    """OpenAI/OpenAI-compatible API configuration."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: str | None = Field(None, description="OpenAI API key")
    base_url: HttpUrl = Field(
        "https://api.openai.com/v1", description="OpenAI API base URL"
    )
    model: str = Field("gpt-4o-mini", description="Default OpenAI model name")


class OpenRouterSettings(APIClientSettings):
    """OpenRouter API configuration for alternative model access."""

    model_config = SettingsConfigDict(env_prefix="OPENROUTER_")

    api_key: str | None = Field(None, description="OpenRouter API key")
    base_url: HttpUrl = Field(
        "https://openrouter.ai/api/v1", description="OpenRouter API base URL"
    )
    model: str = Field(
        "openrouter/horizon-beta", description="Default OpenRouter model name"
    )
    timeout_seconds: int = Field(
        90, ge=1, le=600, description="Extended timeout for OpenRouter requests"
    )


class MemorySettings(BaseSettings):
    """Conversation memory configuration."""

    max_messages: int = Field(
        10, ge=1, le=1000, description="Messages retained by a window memory"
    )


class SupervisorSettings(BaseSettings):
    """Planner-driven supervisor configuration."""

    provider: str = Field(
        "openai", description="Chat model provider (openai, openrouter)"
    )
    model: str | None = Field(
        None, description="Model for planning and scoring (provider default if unset)"
    )
    temperature: float = Field(
        0.0, ge=0.0, le=2.0, description="Temperature for planning and scoring"
    )
    max_invocations: int = Field(
        5, ge=1, le=100, description="Maximum agent invocations per request"
    )
    planner_memory_window: int = Field(
        10, ge=2, le=1000, description="Messages retained in the planner session"
    )

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Ensure the provider is one the model factory knows."""
        normalized = v.lower()
        if normalized not in ("openai", "openrouter"):
            raise ValueError(f"Unknown chat model provider: {v}")
        return normalized


class GuardedSettings(BaseSettings):
    """Guarded agent configuration."""

    max_hops: int = Field(
        10, ge=1, le=100, description="Maximum hook evaluations per guarded call"
    )


class AgenticSettings(BaseSettings):
    """Root configuration combining all subsystem settings."""

    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    openrouter: OpenRouterSettings = Field(default_factory=OpenRouterSettings)

    memory: MemorySettings = Field(default_factory=MemorySettings)
    supervisor: SupervisorSettings = Field(default_factory=SupervisorSettings)
    guarded: GuardedSettings = Field(default_factory=GuardedSettings)

    debug_mode: bool = Field(False, description="Enable debug logging")
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        env_prefix="AGENTWEAVE_",
        extra="ignore",
        validate_default=True,
        case_sensitive=False,
        secrets_dir=os.getenv("AGENTWEAVE_SECRETS_DIR"),
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        normalized = v.upper()
        if normalized not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return normalized

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_mode else self.log_level

    def get_provider_config(self, provider: str | None = None) -> dict[str, Any]:
        """Get configuration for a chat model provider.

        Args:
            provider: Provider name; defaults to the supervisor provider

        Returns:
            Dictionary of client configuration values

        Raises:
            ValueError: If provider is unknown

        """
        provider = (provider or self.supervisor.provider).lower()
        provider_map = {
            "openai": self.openai,
            "openrouter": self.openrouter,
        }

        provider_config = provider_map.get(provider)
        if provider_config is None:
            raise ValueError(f"Unknown provider: {provider}")

        return provider_config.model_dump()


@lru_cache(maxsize=1)
def get_settings() -> AgenticSettings:
    """Get cached global settings instance."""
    return AgenticSettings()


def load_settings(config_path: str | Path | None = None) -> AgenticSettings:
    """Load settings, merging a YAML file over environment defaults.

    Args:
        config_path: Path to a YAML file with the same nesting as
            ``AgenticSettings``; ``None`` returns the cached settings

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If the configuration file does not exist
        ValueError: If the file does not contain a mapping

    """
    if config_path is None:
        return get_settings()

    with Path(config_path).open(encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")

    base = AgenticSettings().model_dump(mode="json")
    return AgenticSettings.model_validate(_deep_merge(base, overrides))


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_configuration(settings: AgenticSettings | None = None) -> bool:
    """Validate that the configured provider has credentials.

    Returns:
        True if configuration is valid

    Raises:
        ValueError: If the provider API key is missing

    """
    settings = settings or get_settings()
    provider = settings.supervisor.provider
    api_key = settings.get_provider_config(provider).get("api_key")
    if not api_key or not api_key.strip():
        raise ValueError(
            f"Missing API key for provider '{provider}'. "
            f"Please set {provider.upper()}_API_KEY."
        )
    return True


__all__ = [
    "APIClientSettings",
    "AgenticSettings",
    "GuardedSettings",
    "MemorySettings",
    "OpenAISettings",
    "OpenRouterSettings",
    "SupervisorSettings",
    "get_settings",
    "load_settings",
    "validate_configuration",
]
