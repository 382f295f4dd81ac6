"""Pydantic models for httpbackoff configuration."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BackoffConfig(BaseModel):
    """Retry backoff bounds."""

    min_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Delay in seconds for the first retry, doubled per attempt",
    )
    max_delay: float = Field(
        default=30.0,
        ge=0.0,
        description="Ceiling in seconds for the exponential schedule",
    )

    @model_validator(mode="after")
    def validate_bounds(self) -> BackoffConfig:
        """Ensure max_delay is not below min_delay."""
        if self.max_delay < self.min_delay:
            msg = (
                f"max_delay ({self.max_delay}) must be greater than or equal to "
                f"min_delay ({self.min_delay})"
            )
            raise ValueError(msg)
        return self


class ObservabilityConfig(BaseModel):
    """Logging configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False, description="Emit JSON lines instead of rich console output"
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )


class Config(BaseModel):
    """Top-level configuration."""

    backoff: BackoffConfig = Field(default_factory=BackoffConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
