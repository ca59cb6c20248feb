"""
Alembic-backed migration runner scoped to one tracking table.

Migration scripts are ordinary alembic revision files living in
``<path>/versions``; no ``env.py`` is needed because the runner drives
alembic's environment directly against the resolved tenant connection.
"""

from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from alembic.config import Config
from alembic.runtime.environment import EnvironmentContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError

from ..db.db_config import ConnectionManager
from ..exceptions import ErrorCode, MigrationError
from ..repositories.migration_repository import MigrationRepository
from ..utils.logger import get_logger


class MigrationFiles:
    """Locates alembic script directories for migration runs."""

    def __init__(self, default_path: Optional[Union[str, Path]] = None):
        self.default_path = default_path

    def load(self, path: Optional[Union[str, Path]] = None) -> Tuple[Config, ScriptDirectory]:
        location = path or self.default_path
        if not location:
            raise MigrationError(
                "No migration path configured",
                error_code=ErrorCode.CONFIGURATION_ERROR,
            )

        config = Config()
        config.set_main_option("script_location", str(location))
        try:
            return config, ScriptDirectory.from_config(config)
        except CommandError as e:
            raise MigrationError(
                f"Invalid migration path: {location}",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                cause=e,
                path=str(location),
            ) from e


class Migrator:
    """Applies and rolls back revisions, tracking state in ``repository.table``."""

    def __init__(
        self,
        repository: MigrationRepository,
        database: ConnectionManager,
        files: MigrationFiles,
    ):
        self.repository = repository
        self.database = database
        self.files = files
        self.logger = get_logger()

    @property
    def table(self) -> str:
        return self.repository.table

    def run(
        self,
        path: Optional[Union[str, Path]] = None,
        target: str = "heads",
        connection: Optional[str] = None,
    ) -> Tuple[str, ...]:
        """Upgrade to ``target`` and return the resulting revisions."""
        return self._migrate(
            "upgrade", path, target, connection, lambda script: script._upgrade_revs
        )

    def rollback(
        self,
        path: Optional[Union[str, Path]] = None,
        steps: int = 1,
        connection: Optional[str] = None,
    ) -> Tuple[str, ...]:
        """Downgrade ``steps`` revisions."""
        if steps < 1:
            raise ValueError("steps must be at least 1")
        if not self.repository.get_ran(connection):
            self.logger.info("Nothing to rollback", extra={"table": self.table})
            return ()
        return self._migrate(
            "downgrade", path, f"-{steps}", connection, lambda script: script._downgrade_revs
        )

    def reset(
        self, path: Optional[Union[str, Path]] = None, connection: Optional[str] = None
    ) -> Tuple[str, ...]:
        """Roll back every applied revision."""
        return self._migrate(
            "downgrade", path, "base", connection, lambda script: script._downgrade_revs
        )

    def status(self, connection: Optional[str] = None) -> Tuple[str, ...]:
        return self.repository.get_ran(connection)

    def pending(
        self, path: Optional[Union[str, Path]] = None, connection: Optional[str] = None
    ) -> List[str]:
        """Revisions that ``run`` would apply, oldest first."""
        _, script = self.files.load(path)
        applied = set()
        for head in self.repository.get_ran(connection):
            applied.update(sc.revision for sc in script.walk_revisions(base="base", head=head))

        revisions = [sc.revision for sc in script.walk_revisions()]
        return [revision for revision in reversed(revisions) if revision not in applied]

    def _migrate(
        self,
        direction: str,
        path: Optional[Union[str, Path]],
        target: str,
        connection: Optional[str],
        steps_for: Callable,
    ) -> Tuple[str, ...]:
        config, script = self.files.load(path)
        # ScriptDirectory._upgrade_revs/_downgrade_revs are private; they are the
        # same step resolvers alembic.command.upgrade/downgrade use (alembic pinned <2)
        resolve_steps = steps_for(script)

        def migration_steps(rev, context):
            return resolve_steps(target, rev)

        extra = {"table": self.table, "direction": direction, "target": target}
        self.logger.info(f"Running {direction} to {target}", extra=extra)

        try:
            with self.repository.get_engine(connection).begin() as conn:
                with EnvironmentContext(
                    config, script, fn=migration_steps, destination_rev=target
                ) as env:
                    env.configure(connection=conn, version_table=self.table, target_metadata=None)
                    with env.begin_transaction():
                        env.run_migrations()
        except MigrationError:
            raise
        except Exception as e:
            raise MigrationError(
                f"Migration {direction} failed for table {self.table}: {str(e)}",
                table=self.table,
                cause=e,
                direction=direction,
                target=target,
            ) from e

        revisions = self.repository.get_ran(connection)
        self.logger.info(f"Finished {direction}", extra={**extra, "revisions": revisions})
        return revisions
