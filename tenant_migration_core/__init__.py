"""
Multi-tenant migration orchestration.

Resolves each tenant's database connection and migration tracking table and
drives an alembic-backed migrator scoped to that table.
"""

from .config import AppConfig, get_config, reset_config, set_config
from .exceptions import (
    ConfigSynthesisError,
    InvalidModelError,
    MigrationError,
    MissingTemplatePathError,
    TenantNotFoundError,
)
from .services.tenant_migration_service import TenantMigrationService

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "get_config",
    "reset_config",
    "set_config",
    "ConfigSynthesisError",
    "InvalidModelError",
    "MigrationError",
    "MissingTemplatePathError",
    "TenantNotFoundError",
    "TenantMigrationService",
]
