"""Tests for tenant attribute snapshots."""

import pytest

from tenant_migration_core.exceptions import MissingTemplatePathError
from tenant_migration_core.migrator.data_cache import TenantDataCache
from tests.fixtures.entities import StubTenant


class TestAttributesFor:
    """Test attribute snapshot building."""

    def test_flattens_entity_and_adds_id(self):
        tenant = StubTenant(7, code="acme", settings={"region": "eu", "tier": {"name": "gold"}})
        cache = TenantDataCache()

        data = cache.attributes_for(tenant)

        assert data["id"] == 7
        assert data["entity.code"] == "acme"
        assert data["entity.settings.region"] == "eu"
        assert data["entity.settings.tier.name"] == "gold"

    def test_includes_extra_attributes(self):
        cache = TenantDataCache(extra={"prefix": "acme", "driver": "customers"})

        data = cache.attributes_for(StubTenant(1))

        assert data["prefix"] == "acme"
        assert data["driver"] == "customers"

    def test_snapshot_is_reused_for_the_same_key(self):
        """Later changes to the entity are not seen once a snapshot exists."""
        tenant = StubTenant(7, code="acme")
        cache = TenantDataCache()
        cache.attributes_for(tenant)

        tenant.attributes["code"] = "renamed"
        data = cache.attributes_for(tenant)

        assert data["entity.code"] == "acme"
        assert tenant.to_dict_calls == 1
        assert 7 in cache
        assert len(cache) == 1

    def test_snapshots_are_kept_per_key(self):
        cache = TenantDataCache()

        cache.attributes_for(StubTenant(1, code="a"))
        cache.attributes_for(StubTenant(2, code="b"))

        assert len(cache) == 2


class TestBind:
    """Test binding templates against cached snapshots."""

    def test_binds_against_snapshot(self):
        cache = TenantDataCache(extra={"prefix": "acme"})

        assert cache.bind(StubTenant(7), "{prefix}_{id}_migrations") == "acme_7_migrations"

    def test_plain_value_does_not_snapshot(self):
        tenant = StubTenant(7)
        cache = TenantDataCache()

        assert cache.bind(tenant, "central") == "central"
        assert cache.bind(tenant, None) is None
        assert tenant.to_dict_calls == 0
        assert 7 not in cache

    def test_missing_attribute_raises(self):
        cache = TenantDataCache()

        with pytest.raises(MissingTemplatePathError):
            cache.bind(StubTenant(7), "tenant_{entity.unknown}")
