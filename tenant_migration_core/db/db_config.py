import threading
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..constants import ConfigKey
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils.config_repository import ConfigRepository
from ..utils.logger import get_logger


class DatabaseConfig(BaseModel):
    """A connection definition as stored under ``database.connections.<name>``."""

    db_type: str = "postgres"
    database: str
    host: Optional[str] = None
    port: str = "5432"
    username: Optional[str] = None
    password: Optional[str] = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False

    model_config = ConfigDict(extra="allow")

    @field_validator("port", mode="before")
    def normalize_port(cls, v: Union[int, str]) -> str:
        """Accept integer ports as commonly written in connection definitions."""
        return str(v)

    def get_connection_string(self) -> str:
        db_type = self.db_type.lower()
        if db_type == "postgres":
            if not all([self.host, self.database, self.username, self.password]):
                raise ValidationError(
                    "Missing required Postgres configuration parameters",
                    error_code=ErrorCode.MISSING_REQUIRED,
                    field="database_config",
                    value={"host": self.host, "database": self.database, "username": self.username},
                )
            return (
                f"postgresql://{self.username}:{self.password}@"
                f"{self.host}:{self.port}/{self.database}"
            )
        elif db_type == "sqlite":
            return f"sqlite:///{self.database}"
        elif db_type == "url":
            return self.database
        raise ValidationError(
            f"Unsupported database type: {self.db_type}",
            error_code=ErrorCode.INVALID_FORMAT,
            field="db_type",
            value=self.db_type,
        )

    def __repr__(self) -> str:
        """String representation with masked password for security."""
        return (
            f"DatabaseConfig("
            f"db_type='{self.db_type}', "
            f"host='{self.host}', "
            f"port='{self.port}', "
            f"database='{self.database}', "
            f"username='{self.username}', "
            f"password='***')"
        )


class ConnectionManager:
    """
    Builds and caches one SQLAlchemy engine per named connection.

    Connection definitions are read from the configuration repository on
    first use, so connections synthesized for tenants at runtime are picked
    up without restarting.
    """

    def __init__(self, repository: ConfigRepository):
        self.repository = repository
        self._engines: Dict[str, Engine] = {}
        self._lock = threading.Lock()
        self.logger = get_logger()

    def default_connection_name(self) -> str:
        name = self.repository.get(ConfigKey.DEFAULT_CONNECTION.value)
        if not name:
            raise ServiceError(
                "No default database connection configured",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="default_connection_name",
            )
        return name

    def get_definition(self, name: str) -> DatabaseConfig:
        definition: Any = self.repository.get(f"{ConfigKey.CONNECTIONS.value}.{name}")
        if definition is None:
            raise ServiceError(
                f"Database connection [{name}] not configured",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="get_definition",
                connection=name,
            )
        return DatabaseConfig.model_validate(definition)

    def engine(self, name: Optional[str] = None) -> Engine:
        """Get the engine for ``name`` or for the current default connection."""
        name = name or self.default_connection_name()

        with self._lock:
            if name not in self._engines:
                self._engines[name] = self._create_engine(self.get_definition(name))
                self.logger.debug(f"Created engine for connection: {name}")
            return self._engines[name]

    def _create_engine(self, config: DatabaseConfig) -> Engine:
        connection_string = config.get_connection_string()
        if connection_string.startswith("sqlite"):
            return create_engine(
                connection_string,
                echo=config.echo,
                connect_args={"check_same_thread": False},
            )
        return create_engine(
            connection_string,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
        )

    def session(self, name: Optional[str] = None) -> Session:
        """Open a new session bound to the named (or default) connection."""
        return sessionmaker(bind=self.engine(name))()

    def dispose(self) -> None:
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()
