"""
Centralized configuration management for the tenant migration core.

This module provides a unified configuration system with support for:
- Environment variables
- Feature flags
- Connection definitions and tenant drivers
- Validation using Pydantic
"""

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_CONNECTION_NAME, EnvironmentVariable, Limits, LogLevel
from .schemas.tenant_config_schema import TenantDriverConfig


def _default_connections() -> Dict[str, Dict[str, Any]]:
    url = os.getenv(EnvironmentVariable.DATABASE_URL.value)
    if url:
        return {DEFAULT_CONNECTION_NAME: {"db_type": "url", "database": url}}
    return {DEFAULT_CONNECTION_NAME: {"db_type": "sqlite", "database": "./tenants.db"}}


class DatabaseSettings(BaseModel):
    """Named connection definitions plus the active default connection."""

    default: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DB_CONNECTION.value, DEFAULT_CONNECTION_NAME
        ),
        description="Name of the active default connection",
    )
    connections: Dict[str, Dict[str, Any]] = Field(
        default_factory=_default_connections, description="Connection definitions by name"
    )


class QueueConfig(BaseModel):
    """Queue configuration for Azure Storage Queues."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default="logs-queue", description="Logs queue name")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class FeatureFlags(BaseModel):
    """Feature flags for controlling framework behavior."""

    enable_logs_queue: bool = Field(default=False, description="Ship logs to Azure queue")
    enable_operation_context: bool = Field(
        default=True, description="Enable operation context tracking"
    )


class MigrationSettings(BaseModel):
    """Configuration for tenant traversal and migration scripts."""

    chunk_size: int = Field(
        default_factory=lambda: int(
            os.getenv(
                EnvironmentVariable.MIGRATION_CHUNK_SIZE.value, str(Limits.DEFAULT_CHUNK_SIZE)
            )
        ),
        description="Number of tenants fetched per batch",
    )
    default_path: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.MIGRATION_PATH.value),
        description="Migration directory used when a driver has no path",
    )

    @field_validator("chunk_size")
    def validate_chunk_size(cls, v: int) -> int:
        """Validate chunk size is within limits."""
        if v < 1 or v > Limits.MAX_CHUNK_SIZE:
            raise ValueError(f"chunk_size must be between 1 and {Limits.MAX_CHUNK_SIZE}")
        return v


class TenancySettings(BaseModel):
    """Tenant drivers keyed by driver name."""

    drivers: Dict[str, TenantDriverConfig] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DEBUG.value, "false").lower()
        == "true",
        description="Debug mode",
    )

    # Sub-configurations
    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings, description="Connection definitions"
    )
    queue: QueueConfig = Field(default_factory=QueueConfig, description="Queue configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    features: FeatureFlags = Field(default_factory=FeatureFlags, description="Feature flags")
    migration: MigrationSettings = Field(
        default_factory=MigrationSettings, description="Migration settings"
    )
    tenanti: TenancySettings = Field(
        default_factory=TenancySettings, description="Tenant drivers"
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
