"""
Per-tenant database connection resolution.

Connection definitions for tenants are synthesized lazily: the first time a
tenant's connection name is seen, the driver's resolver callable builds the
definition and it is written to the configuration repository.

Activating a connection overwrites ``database.default``, a single slot shared
by everything using the repository. Tenants must therefore be activated and
migrated strictly one at a time; ``resolve_connection`` plus explicit
``connection=`` arguments avoid the shared slot altogether.
"""

from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..constants import ConfigKey
from ..db.db_config import DatabaseConfig
from ..db.db_tenant_models import TenantEntity
from ..exceptions import ConfigSynthesisError
from ..schemas.tenant_config_schema import TenantDriverConfig
from ..utils.config_repository import ConfigRepository
from ..utils.logger import get_logger
from .data_cache import TenantDataCache


class ConnectionResolver:
    """Resolves, synthesizes and activates tenant connections."""

    def __init__(self, repository: ConfigRepository, data: TenantDataCache):
        self.repository = repository
        self.data = data
        self.logger = get_logger()

    def resolve_connection(
        self, entity: TenantEntity, config: TenantDriverConfig, database: Optional[str]
    ) -> Optional[str]:
        """
        Get the tenant's connection name, synthesizing its definition if needed.

        Args:
            entity: Tenant being processed
            config: Driver configuration
            database: Connection name used when the driver has no connection template

        Returns:
            The bound connection name

        Raises:
            ConfigSynthesisError: If the resolver fails or returns an invalid definition
        """
        template = config.connection
        if template is not None:
            database = template.name

        connection = self.data.bind(entity, database)
        if connection is None:
            return None

        path = f"{ConfigKey.CONNECTIONS.value}.{connection}"

        if template is not None and not self.repository.has(path):
            definition = self._synthesize(entity, config, connection)
            self.repository.set(path, definition)
            self.logger.info(
                f"Synthesized connection: {connection}",
                extra={"connection": connection, "db_type": definition.get("db_type")},
            )

        return connection

    def activate_connection(
        self, entity: TenantEntity, config: TenantDriverConfig, database: Optional[str]
    ) -> Optional[str]:
        """Resolve the tenant's connection and make it ``database.default``."""
        connection = self.resolve_connection(entity, config, database)

        self.repository.set(ConfigKey.DEFAULT_CONNECTION.value, connection)
        self.logger.debug(f"Default connection set to: {connection}")

        return connection

    def _synthesize(
        self, entity: TenantEntity, config: TenantDriverConfig, connection: str
    ) -> Mapping[str, Any]:
        template = config.connection

        try:
            result = template.resolver(
                entity=entity, template=dict(template.template), connection=connection
            )
        except Exception as e:
            raise ConfigSynthesisError(
                connection, f"resolver raised {type(e).__name__}", cause=e
            ) from e

        if isinstance(result, DatabaseConfig):
            return result.model_dump()

        if not isinstance(result, Mapping):
            raise ConfigSynthesisError(
                connection, f"resolver returned {type(result).__name__}, expected a mapping"
            )

        try:
            return DatabaseConfig.model_validate(dict(result)).model_dump()
        except PydanticValidationError as e:
            raise ConfigSynthesisError(
                connection, "resolver returned an invalid definition", cause=e
            ) from e
