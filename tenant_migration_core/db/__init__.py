"""
SQLAlchemy models and connection handling.

This module provides a common entry point for tenant models and connections.
"""

from .db_base import JSON, Base, TimestampMixin, utc_now
from .db_config import ConnectionManager, DatabaseConfig
from .db_tenant_models import Tenant, TenantEntity, TenantEntityMixin

__all__ = [
    # Base definitions
    "Base",
    "JSON",
    "TimestampMixin",
    "utc_now",
    # Connections
    "ConnectionManager",
    "DatabaseConfig",
    # Models
    "Tenant",
    "TenantEntity",
    "TenantEntityMixin",
]
