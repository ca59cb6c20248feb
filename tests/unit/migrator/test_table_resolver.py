"""Tests for migration tracking table naming."""

from tenant_migration_core.migrator.data_cache import TenantDataCache
from tenant_migration_core.migrator.table_resolver import resolve_migration_table, table_prefix
from tenant_migration_core.schemas import TenantDriverConfig
from tests.fixtures.entities import StubTenant


def resolve(config, key=7, driver="customers"):
    data = TenantDataCache(extra={"driver": driver, "prefix": config.prefix or driver})
    return resolve_migration_table(StubTenant(key, code="c"), config, driver, data)


class TestTablePrefix:
    """Test table prefix templates."""

    def test_prefix_defaults_to_driver(self):
        assert table_prefix(TenantDriverConfig(), "customers") == "customers_{id}"

    def test_configured_prefix(self):
        assert table_prefix(TenantDriverConfig(prefix="acme"), "customers") == "acme_{id}"


class TestResolveMigrationTable:
    """Test the naming precedence for tracking tables."""

    def test_shared_uses_prefixed_table(self):
        assert resolve(TenantDriverConfig(prefix="acme")) == "acme_7_migrations"

    def test_shared_tables_differ_between_tenants(self):
        config = TenantDriverConfig(prefix="acme")

        assert resolve(config, key=1) != resolve(config, key=2)

    def test_shared_without_prefix_uses_driver(self):
        assert resolve(TenantDriverConfig()) == "customers_7_migrations"

    def test_unshared_uses_common_table(self):
        config = TenantDriverConfig(shared=False, prefix="acme")

        assert resolve(config, key=1) == "tenant_migrations"
        assert resolve(config, key=2) == "tenant_migrations"

    def test_explicit_template_wins(self):
        config = TenantDriverConfig(migration="{prefix}_hist", prefix="acme", shared=True)

        assert resolve(config) == "acme_hist"

    def test_explicit_template_can_use_entity_attributes(self):
        config = TenantDriverConfig(migration="{entity.code}_{id}_versions", shared=False)

        assert resolve(config) == "c_7_versions"
