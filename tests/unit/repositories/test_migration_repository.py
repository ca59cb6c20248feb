"""Tests for the migration tracking table repository."""

import pytest
from sqlalchemy import inspect as sa_inspect

from tenant_migration_core.repositories import MigrationRepository


@pytest.fixture
def repository(connections):
    return MigrationRepository(connections, "acme_1_migrations")


class TestMigrationRepository:
    """Test tracking table management."""

    def test_table_missing_initially(self, repository):
        assert repository.exists("central") is False
        assert repository.get_ran("central") == ()

    def test_create_repository(self, repository, connections):
        repository.create_repository("central")

        assert repository.exists("central") is True
        columns = sa_inspect(connections.engine("central")).get_columns("acme_1_migrations")
        assert [column["name"] for column in columns] == ["version_num"]

    def test_create_repository_twice(self, repository):
        repository.create_repository("central")
        repository.create_repository("central")

        assert repository.exists("central") is True

    def test_delete_repository(self, repository):
        repository.create_repository("central")
        repository.delete_repository("central")

        assert repository.exists("central") is False

    def test_get_ran_reads_recorded_revisions(self, repository, connections):
        repository.create_repository("central")
        with connections.engine("central").begin() as conn:
            conn.exec_driver_sql("INSERT INTO acme_1_migrations (version_num) VALUES ('0001')")

        assert repository.get_ran("central") == ("0001",)

