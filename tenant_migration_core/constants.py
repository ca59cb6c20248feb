"""
Constants and enums for the tenant migration core.

This module centralizes all magic strings and constants used throughout
the package to ensure consistency and maintainability.
"""

from enum import Enum


class QueueName(str, Enum):
    """Standard queue names used for log shipping."""

    LOGS = "logs-queue"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    DB_CONNECTION = "DB_CONNECTION"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    DEBUG = "DEBUG"
    MIGRATION_PATH = "MIGRATION_PATH"
    MIGRATION_CHUNK_SIZE = "MIGRATION_CHUNK_SIZE"


class ConfigKey(str, Enum):
    """Dotted paths used against the configuration repository."""

    DEFAULT_CONNECTION = "database.default"
    CONNECTIONS = "database.connections"
    DRIVERS = "tenanti.drivers"


class MigrationOperation(str, Enum):
    """Runner operations that can be applied to a tenant."""

    INSTALL = "install"
    RUN = "run"
    ROLLBACK = "rollback"
    RESET = "reset"
    STATUS = "status"


class Limits:
    """System limits and thresholds."""

    DEFAULT_CHUNK_SIZE = 100
    MAX_CHUNK_SIZE = 1000


# Tracking table used when tenants do not get their own prefixed table
SHARED_MIGRATION_TABLE = "tenant_migrations"

# Suffix appended to "<prefix>_{id}" for per-tenant tracking tables
MIGRATION_TABLE_SUFFIX = "_migrations"

DEFAULT_CONNECTION_NAME = "default"
