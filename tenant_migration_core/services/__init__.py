"""Service layer for tenant migration runs."""

from .tenant_migration_service import TenantMigrationService

__all__ = ["TenantMigrationService"]
