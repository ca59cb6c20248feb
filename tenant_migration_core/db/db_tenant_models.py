"""
Tenant entity contract and the bundled tenant model.

Any mapped class can act as a tenant model as long as it provides a unique
key and a (possibly nested) attribute map for template binding.
"""

from typing import Any, Dict, Protocol, runtime_checkable

from sqlalchemy import Column, Integer, String
from sqlalchemy import inspect as sa_inspect

from .db_base import JSON, Base, TimestampMixin


@runtime_checkable
class TenantEntity(Protocol):
    """Capabilities the migration core needs from a tenant."""

    def get_key(self) -> Any: ...

    def to_dict(self) -> Dict[str, Any]: ...


class TenantEntityMixin:
    """Implements ``TenantEntity`` for SQLAlchemy declarative models."""

    def get_key(self) -> Any:
        identity = sa_inspect(self).mapper.primary_key_from_instance(self)
        return identity[0] if len(identity) == 1 else tuple(identity)

    def to_dict(self) -> Dict[str, Any]:
        mapper = sa_inspect(self).mapper
        return {attr.key: getattr(self, attr.key) for attr in mapper.column_attrs}


class Tenant(Base, TenantEntityMixin, TimestampMixin):
    """Tenant row - one per customer whose schema is migrated separately."""

    __tablename__ = "tenant"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    region = Column(String(50), nullable=True)

    # Free-form settings, reachable from templates as {entity.settings.<key>}
    settings = Column(JSON, nullable=True)
