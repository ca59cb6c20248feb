"""Context management for operations and the tenant being processed."""

from .operation_context import OperationContext, operation
from .tenant_context import TenantContext, tenant_context

__all__ = [
    "operation",
    "OperationContext",
    "TenantContext",
    "tenant_context",
]
