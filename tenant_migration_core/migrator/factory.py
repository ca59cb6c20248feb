import threading
from typing import Any, Callable, Dict, List

from ..db.db_config import ConnectionManager
from ..repositories.migration_repository import MigrationRepository
from ..utils.logger import get_logger
from .migrator import MigrationFiles, Migrator


class MigratorFactory:
    """
    Builds one migration runner per tracking table and keeps it for the run.

    Tenants resolving to the same table (e.g. ``tenant_migrations``) share a
    runner. Runners are never closed here; engines belong to the
    ``ConnectionManager``.
    """

    def __init__(
        self,
        database: ConnectionManager,
        files: MigrationFiles,
        repository_factory: Callable[[ConnectionManager, str], Any] = MigrationRepository,
        migrator_factory: Callable[[Any, ConnectionManager, MigrationFiles], Any] = Migrator,
    ):
        self.database = database
        self.files = files
        self.repository_factory = repository_factory
        self.migrator_factory = migrator_factory
        self._migrators: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self.logger = get_logger()

    def migrator_for(self, table: str) -> Migrator:
        with self._lock:
            if table not in self._migrators:
                repository = self.repository_factory(self.database, table)
                self._migrators[table] = self.migrator_factory(
                    repository, self.database, self.files
                )
                self.logger.debug(f"Created migrator for table: {table}", extra={"table": table})
            return self._migrators[table]

    def cached_tables(self) -> List[str]:
        return list(self._migrators)
