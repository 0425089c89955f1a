"""
Centralized configuration for verscope.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (VERSCOPE_*)
3. .env file
4. Default values

Example:
    from verscope.config import get_config

    config = get_config()
    print(config.projection_workers)  # From VERSCOPE_PROJECTION_WORKERS or default

    # Override at runtime
    config = get_config(strict_containment=False)
"""

from __future__ import annotations

import logging
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VerscopeConfig(BaseSettings):
    """
    Central configuration for verscope.

    All settings can be overridden via environment variables
    prefixed with VERSCOPE_.

    Example:
        export VERSCOPE_LOG_LEVEL=debug
        export VERSCOPE_PROJECTION_WORKERS=8
    """

    model_config = SettingsConfigDict(
        env_prefix="VERSCOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level for the verscope logger hierarchy",
    )

    # Graph construction
    strict_containment: bool = Field(
        default=True,
        description="Reject children whose kind is not allowed under the parent kind",
    )

    # Projection
    projection_workers: int = Field(
        default=4,
        ge=1,
        description="Thread pool size used by project_all()",
    )

    # Telemetry
    emit_span_events: bool = Field(
        default=True,
        description="Emit OTel span events for freeze and projection results",
    )

    # Emitter hand-off
    artifact_prefix: str = Field(
        default="openapi",
        min_length=1,
        description="File name prefix suggested for per-version artifacts",
    )
    artifact_extension: Literal["yaml", "json"] = Field(
        default="yaml",
        description="File extension suggested for per-version artifacts",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept upper-case level names (DEBUG, INFO, ...)."""
        if isinstance(v, str):
            return v.lower()
        return v


# Global singleton
_config: Optional[VerscopeConfig] = None


def get_config(**overrides) -> VerscopeConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        VerscopeConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = VerscopeConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


def configure_logging(config: Optional[VerscopeConfig] = None) -> logging.Logger:
    """Apply the configured level to the ``verscope`` logger hierarchy."""
    config = config or get_config()
    root = logging.getLogger("verscope")
    root.setLevel(getattr(logging, config.log_level.upper()))
    return root
