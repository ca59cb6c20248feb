"""Tenant-scoped migration building blocks."""

from .binder import bind, is_template
from .connection_resolver import ConnectionResolver
from .data_cache import TenantDataCache
from .factory import MigratorFactory
from .migrator import MigrationFiles, Migrator
from .table_resolver import resolve_migration_table, table_prefix

__all__ = [
    "bind",
    "is_template",
    "ConnectionResolver",
    "TenantDataCache",
    "MigratorFactory",
    "MigrationFiles",
    "Migrator",
    "resolve_migration_table",
    "table_prefix",
]
