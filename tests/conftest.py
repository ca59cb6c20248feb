"""
Shared test fixtures for the tenant migration core.

Every test gets its own SQLite files under ``tmp_path``: a central database
holding the tenant table, plus one file per synthesized tenant connection.
"""

import pytest

from tenant_migration_core.config import reset_config
from tenant_migration_core.context.tenant_context import TenantContext
from tenant_migration_core.db import Base, ConnectionManager
from tenant_migration_core.exceptions import clear_correlation_id
from tenant_migration_core.utils.config_repository import (
    ConfigRepository,
    reset_config_repository,
)
from tenant_migration_core.utils.logger import reset_logging
from tests.fixtures.factories import TenantFactory
from tests.fixtures.migrations import write_revisions


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset module level singletons so tests never leak configuration."""
    reset_config()
    reset_config_repository()
    reset_logging()
    TenantContext.clear_current_tenant()
    clear_correlation_id()

    yield

    reset_config()
    reset_config_repository()
    reset_logging()
    TenantContext.clear_current_tenant()
    clear_correlation_id()


@pytest.fixture
def tenant_db_dir(tmp_path):
    """Directory receiving one SQLite file per tenant connection."""
    directory = tmp_path / "tenants"
    directory.mkdir()
    return directory


@pytest.fixture
def config_repository(tmp_path) -> ConfigRepository:
    """Repository with a single ``central`` SQLite connection as default."""
    return ConfigRepository(
        {
            "database": {
                "default": "central",
                "connections": {
                    "central": {"db_type": "sqlite", "database": str(tmp_path / "central.db")},
                },
            },
            "migration": {"chunk_size": 2, "default_path": None},
        }
    )


@pytest.fixture
def connections(config_repository):
    manager = ConnectionManager(config_repository)
    yield manager
    manager.dispose()


@pytest.fixture
def db_session(connections):
    """Session on the central database with the tenant table created."""
    Base.metadata.create_all(connections.engine("central"))
    session = connections.session("central")
    TenantFactory._meta.sqlalchemy_session = session

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def migrations_path(tmp_path):
    """Alembic script directory with two linear revisions."""
    return write_revisions(tmp_path / "migrations")
