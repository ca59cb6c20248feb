import threading
from typing import Any, Dict, Mapping, Optional

from ..db.db_tenant_models import TenantEntity
from ..utils.dot_utils import flatten
from .binder import bind, is_template


class TenantDataCache:
    """
    Flattened attribute snapshots of tenants, keyed by tenant key.

    The first lookup for a key captures ``entity.*`` attributes plus ``id``;
    later lookups return that snapshot even if the entity changed. Entries are
    never evicted, so one cache should serve a single migration run.
    """

    def __init__(self, extra: Optional[Mapping[str, Any]] = None):
        self.extra: Dict[str, Any] = dict(extra or {})
        self._data: Dict[Any, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def attributes_for(self, entity: TenantEntity) -> Dict[str, Any]:
        key = entity.get_key()

        with self._lock:
            if key not in self._data:
                data = dict(self.extra)
                data.update(flatten({"entity": entity.to_dict()}))
                data["id"] = key
                self._data[key] = data
            return self._data[key]

    def bind(self, entity: TenantEntity, template: Optional[str]) -> Optional[str]:
        """Bind ``template`` against the entity, only snapshotting it when needed."""
        if not is_template(template):
            return template
        return bind(template, self.attributes_for(entity))

    def __contains__(self, key: Any) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
