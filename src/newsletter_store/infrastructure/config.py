"""Configuration management for the newsletter store."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """Storage configuration."""

    database_path: Path = Field(
        default=Path("newsletter.db"), description="SQLite database file"
    )
    snapshot_path: Path = Field(
        default=Path("newsletter.seed.json"),
        description="JSON snapshot written by the in-memory emulator",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(
        default="newsletter_store", description="Service name for tracing"
    )
    metrics_port: int | None = Field(
        default=None, ge=1, le=65535, description="Prometheus metrics port (disabled when unset)"
    )


class Config(BaseSettings):
    """Main configuration for the newsletter store."""

    model_config = SettingsConfigDict(
        env_prefix="NEWSLETTER_STORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    environment: Literal["production", "development", "test"] = Field(
        default="development", description="Execution mode"
    )
    use_in_memory_db: bool = Field(
        default=False, description="Force the in-memory emulator regardless of mode"
    )
    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
