"""
Migration-state repository bound to one tracking table.

The tracking table uses alembic's version table layout so the same table can
be driven by the bundled ``Migrator`` or by plain alembic commands configured
with ``version_table=<table>``.
"""

from typing import Optional, Tuple

from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, MetaData, PrimaryKeyConstraint, String, Table
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.engine import Connection, Engine

from ..db.db_config import ConnectionManager
from ..utils.logger import get_logger


class MigrationRepository:
    """Reads and manages the migration tracking table for one tenant scope."""

    def __init__(self, database: ConnectionManager, table: str):
        self.database = database
        self.table = table
        self.logger = get_logger()

    def get_engine(self, connection: Optional[str] = None) -> Engine:
        return self.database.engine(connection)

    def migration_context(self, connection: Connection) -> MigrationContext:
        return MigrationContext.configure(connection, opts={"version_table": self.table})

    def _version_table(self) -> Table:
        # Same shape alembic creates on first upgrade
        return Table(
            self.table,
            MetaData(),
            Column("version_num", String(32), nullable=False),
            PrimaryKeyConstraint("version_num", name=f"{self.table}_pkc"),
        )

    def exists(self, connection: Optional[str] = None) -> bool:
        with self.get_engine(connection).connect() as conn:
            return sa_inspect(conn).has_table(self.table)

    def create_repository(self, connection: Optional[str] = None) -> None:
        with self.get_engine(connection).begin() as conn:
            self._version_table().create(conn, checkfirst=True)
        self.logger.info(f"Migration table ready: {self.table}", extra={"table": self.table})

    def delete_repository(self, connection: Optional[str] = None) -> None:
        with self.get_engine(connection).begin() as conn:
            self._version_table().drop(conn, checkfirst=True)
        self.logger.info(f"Migration table dropped: {self.table}", extra={"table": self.table})

    def get_ran(self, connection: Optional[str] = None) -> Tuple[str, ...]:
        """Revisions currently recorded in the tracking table."""
        with self.get_engine(connection).connect() as conn:
            return tuple(self.migration_context(conn).get_current_heads())
