"""
Key/value configuration repository addressed by dotted paths.

Holds the mutable runtime configuration the migration core reads and writes:
connection definitions under ``database.connections.<name>``, the active
``database.default`` connection, and tenant drivers under ``tenanti.drivers``.
"""

import copy
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .dot_utils import get_dotted, has_dotted, set_dotted

if TYPE_CHECKING:
    from ..config import AppConfig


class ConfigRepository:
    """Dotted-path configuration store."""

    def __init__(self, items: Optional[Dict[str, Any]] = None):
        self._items: Dict[str, Any] = copy.deepcopy(items) if items else {}
        self._lock = threading.RLock()
        self.writes: List[Tuple[str, Any]] = []

    @classmethod
    def from_app_config(cls, app_config: "AppConfig") -> "ConfigRepository":
        """Seed a repository from the typed application configuration."""
        repository = cls(
            {
                "database": app_config.database.model_dump(),
                "migration": app_config.migration.model_dump(),
            }
        )
        # Driver snapshots are kept as validated models, not dumped
        repository.set("tenanti.drivers", dict(app_config.tenanti.drivers))
        repository.writes.clear()
        return repository

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return get_dotted(self._items, key, default)

    def has(self, key: str) -> bool:
        with self._lock:
            return has_dotted(self._items, key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            set_dotted(self._items, key, value)
            self.writes.append((key, value))

    def writes_to(self, key: str) -> int:
        """Count how many times ``key`` has been written."""
        return sum(1 for written, _ in self.writes if written == key)

    def all(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._items)


# Global repository instance
_repository: Optional[ConfigRepository] = None


def get_config_repository() -> ConfigRepository:
    """Get the global configuration repository, seeded from ``get_config()``."""
    global _repository
    if _repository is None:
        from ..config import get_config

        _repository = ConfigRepository.from_app_config(get_config())
    return _repository


def set_config_repository(repository: ConfigRepository) -> None:
    """Set the global configuration repository."""
    global _repository
    _repository = repository


def reset_config_repository() -> None:
    """Reset the global configuration repository."""
    global _repository
    _repository = None
