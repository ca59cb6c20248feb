"""Naming policy for tenant migration tracking tables."""

from ..constants import MIGRATION_TABLE_SUFFIX, SHARED_MIGRATION_TABLE
from ..db.db_tenant_models import TenantEntity
from ..schemas.tenant_config_schema import TenantDriverConfig
from .data_cache import TenantDataCache


def table_prefix(config: TenantDriverConfig, driver: str) -> str:
    """``"<prefix>_{id}"`` where prefix defaults to the driver name."""
    return "_".join([config.prefix or driver, "{id}"])


def resolve_migration_table(
    entity: TenantEntity, config: TenantDriverConfig, driver: str, data: TenantDataCache
) -> str:
    """
    Decide the tracking table for ``entity``.

    1. An explicit ``migration`` template wins.
    2. ``shared`` (the default) gives each tenant ``<prefix>_<id>_migrations``.
    3. Otherwise every tenant uses ``tenant_migrations``.
    """
    if config.migration is not None:
        return data.bind(entity, config.migration)

    if config.shared:
        return data.bind(entity, table_prefix(config, driver) + MIGRATION_TABLE_SUFFIX)

    return SHARED_MIGRATION_TABLE
