"""Repository layer for data access."""

from .migration_repository import MigrationRepository
from .tenant_repository import TenantRepository

__all__ = [
    "MigrationRepository",
    "TenantRepository",
]
