"""
Tenant migration orchestration for one tenant driver.

This module ties together tenant traversal, connection activation, tracking
table naming and migrator caching. A service instance is meant to live for a
single migration run: the tenant attribute snapshots and migrators it caches
are never refreshed.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Type, Union

from pydantic import ImportString, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Query, Session

from ..constants import ConfigKey, Limits, MigrationOperation
from ..context.operation_context import operation
from ..context.tenant_context import tenant_context
from ..db.db_config import ConnectionManager
from ..db.db_tenant_models import TenantEntity
from ..exceptions import InvalidModelError
from ..migrator.connection_resolver import ConnectionResolver
from ..migrator.data_cache import TenantDataCache
from ..migrator.factory import MigratorFactory
from ..migrator.migrator import MigrationFiles, Migrator
from ..migrator.table_resolver import resolve_migration_table, table_prefix
from ..repositories.tenant_repository import TenantRepository
from ..schemas.tenant_config_schema import TenantDriverConfig
from ..utils.config_repository import ConfigRepository, get_config_repository
from ..utils.logger import get_logger

TenantAction = Callable[[Any], Any]

_model_adapter = TypeAdapter(ImportString)


class TenantMigrationService:
    """
    Runs migrations for every tenant of one driver.

    Tenants are processed strictly one after another. Activating a tenant
    rewrites ``database.default`` in the configuration repository, so two
    services (or threads) must never activate tenants on the same repository
    concurrently.
    """

    def __init__(
        self,
        driver: str,
        repository: Optional[ConfigRepository] = None,
        connections: Optional[ConnectionManager] = None,
        model: Optional[Type[Any]] = None,
        chunk_size: Optional[int] = None,
        migrator_factory: Optional[MigratorFactory] = None,
    ):
        """
        Initialize the service for a driver.

        Args:
            driver: Driver name, used as default table prefix and config key
            repository: Configuration repository (default: global repository)
            connections: Connection manager (default: one built on ``repository``)
            model: Tenant model class; overrides the driver's ``model`` import string
            chunk_size: Tenants per batch for chunked traversal
            migrator_factory: Prebuilt migrator cache (default: alembic migrators)
        """
        self.driver = driver
        self.logger = get_logger()
        self.repository = repository or get_config_repository()
        self.config = TenantDriverConfig.model_validate(
            self.repository.get(f"{ConfigKey.DRIVERS.value}.{driver}") or {}
        )
        self.connections = connections or ConnectionManager(self.repository)

        # Captured before any tenant connection replaces the default one
        self.base_connection: str = (
            self.config.database or self.connections.default_connection_name()
        )

        self.chunk_size = (
            chunk_size
            if chunk_size is not None
            else self.repository.get("migration.chunk_size", Limits.DEFAULT_CHUNK_SIZE)
        )
        self.model = self._resolve_model(model)

        self.data = TenantDataCache(
            extra={"driver": driver, "prefix": self.config.prefix or driver}
        )
        self.connection_resolver = ConnectionResolver(self.repository, self.data)
        self.migrators = migrator_factory or MigratorFactory(
            self.connections, MigrationFiles(self.get_migration_path())
        )
        self._session: Optional[Session] = None

    # ==================== MODEL & TRAVERSAL ====================

    def _resolve_model(self, model: Optional[Type[Any]]) -> Type[Any]:
        name = self.get_model_name()

        if model is None:
            if not name:
                raise InvalidModelError(
                    f"<{self.driver}>", "is not configured", driver=self.driver
                )
            try:
                model = _model_adapter.validate_python(name)
            except PydanticValidationError as e:
                raise InvalidModelError(name, "could not be imported", cause=e) from e

        model_name = getattr(model, "__name__", repr(model))

        if not isinstance(model, type) or sa_inspect(model, raiseerr=False) is None:
            raise InvalidModelError(model_name, "should be a mapped SQLAlchemy model")

        if not issubclass(model, TenantEntity):
            raise InvalidModelError(model_name, "should implement get_key() and to_dict()")

        return model

    def get_model(self) -> Type[Any]:
        return self.model

    @property
    def session(self) -> Session:
        """Session on the driver's base connection, opened on first use."""
        if self._session is None:
            self._session = self.connections.session(self.base_connection)
        return self._session

    def tenants(self) -> TenantRepository:
        return TenantRepository(self.session, self.model)

    def new_query(self) -> Query:
        return self.tenants().new_query()

    @operation()
    def execute_by_id(self, key: Any, action: TenantAction) -> Any:
        """
        Run ``action`` for the tenant with primary key ``key``.

        Raises:
            TenantNotFoundError: If the tenant does not exist; ``action`` is not called
        """
        entity = self.tenants().find_or_fail(key)

        with tenant_context(entity.get_key()):
            return action(entity)

    @operation()
    def execute_by_chunk(self, action: TenantAction) -> int:
        """
        Run ``action`` once per tenant, fetching tenants ``chunk_size`` at a time.

        Traversal is forward-only; a failed run has to be started again from
        the beginning.

        Returns:
            Number of tenants processed
        """
        processed = 0

        for batch in self.tenants().chunk(self.chunk_size):
            for entity in batch:
                with tenant_context(entity.get_key()):
                    action(entity)
                processed += 1

        self.logger.info(
            f"Processed {processed} tenants", extra={"driver": self.driver, "count": processed}
        )
        return processed

    # ==================== RESOLUTION ====================

    def as_default_connection(self, entity: TenantEntity, database: Optional[str] = None) -> str:
        """Activate the tenant's connection as ``database.default`` and return its name."""
        return self.connection_resolver.activate_connection(
            entity, self.config, database or self.base_connection
        )

    def resolve_connection(self, entity: TenantEntity, database: Optional[str] = None) -> str:
        """Resolve the tenant's connection without touching ``database.default``."""
        return self.connection_resolver.resolve_connection(
            entity, self.config, database or self.base_connection
        )

    def resolve_migration_table_name(self, entity: TenantEntity) -> str:
        return resolve_migration_table(entity, self.config, self.driver, self.data)

    def resolve_migrator(self, table: str) -> Migrator:
        return self.migrators.migrator_for(table)

    def bind_with_key(self, entity: TenantEntity, template: Optional[str]) -> Optional[str]:
        return self.data.bind(entity, template)

    def get_migration_path(self) -> Optional[str]:
        return self.config.path or self.repository.get("migration.default_path")

    def get_model_name(self) -> Optional[str]:
        return self.config.model

    def get_table_prefix(self) -> str:
        return table_prefix(self.config, self.driver)

    # ==================== RUNNER OPERATIONS ====================

    def _prepare(self, entity: TenantEntity, database: Optional[str] = None):
        connection = self.as_default_connection(entity, database)
        migrator = self.resolve_migrator(self.resolve_migration_table_name(entity))
        return connection, migrator

    @operation()
    def install(self, entity: TenantEntity, database: Optional[str] = None) -> str:
        """Create the tenant's tracking table if missing; returns the table name."""
        connection, migrator = self._prepare(entity, database)
        migrator.repository.create_repository(connection)
        return migrator.table

    @operation()
    def run(
        self,
        entity: TenantEntity,
        path: Optional[Union[str, Path]] = None,
        database: Optional[str] = None,
        target: str = "heads",
    ):
        connection, migrator = self._prepare(entity, database)
        return migrator.run(path, target=target, connection=connection)

    @operation()
    def rollback(
        self,
        entity: TenantEntity,
        path: Optional[Union[str, Path]] = None,
        database: Optional[str] = None,
        steps: int = 1,
    ):
        connection, migrator = self._prepare(entity, database)
        return migrator.rollback(path, steps=steps, connection=connection)

    @operation()
    def reset(
        self,
        entity: TenantEntity,
        path: Optional[Union[str, Path]] = None,
        database: Optional[str] = None,
    ):
        connection, migrator = self._prepare(entity, database)
        return migrator.reset(path, connection=connection)

    @operation()
    def status(self, entity: TenantEntity, database: Optional[str] = None):
        connection, migrator = self._prepare(entity, database)
        return migrator.status(connection=connection)

    def run_all(
        self, operation_name: Union[str, MigrationOperation], key: Any = None, **options: Any
    ) -> Dict[Any, Any]:
        """
        Apply a runner operation to one tenant (``key``) or to every tenant.

        Returns:
            Operation result keyed by tenant key
        """
        handler = getattr(self, MigrationOperation(operation_name).value)
        results: Dict[Any, Any] = {}

        def apply(entity: TenantEntity) -> None:
            results[entity.get_key()] = handler(entity, **options)

        if key is not None:
            self.execute_by_id(key, apply)
        else:
            self.execute_by_chunk(apply)

        return results

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
