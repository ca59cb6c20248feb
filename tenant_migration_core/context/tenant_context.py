"""
Tenant context management for migration runs.

Tracks which tenant is currently being processed on this thread so that log
records and errors raised while migrating can be attributed to it.
"""

import threading
from contextlib import contextmanager
from typing import Any, Generator, Optional

from ..exceptions import ErrorCode, ValidationError
from ..utils.logger import get_logger


class TenantContext:
    """
    Manages the current tenant using thread-local storage.

    The current tenant is informational only. Connection routing is driven by
    ``database.default`` in the configuration repository, not by this context.
    """

    _thread_local = threading.local()

    @classmethod
    def set_current_tenant(cls, tenant_id: Any) -> None:
        """
        Set the current tenant for the execution context.

        Args:
            tenant_id: Key of the tenant; converted to ``str``

        Raises:
            ValidationError: If tenant_id is empty
        """
        if tenant_id is None or not str(tenant_id).strip():
            raise ValidationError(
                "tenant_id must be a non-empty value",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="tenant_id",
                value=tenant_id,
            )

        cls._thread_local.tenant_id = str(tenant_id).strip()
        get_logger().debug(f"Current tenant set to: {tenant_id}")

    @classmethod
    def get_current_tenant_id(cls) -> Optional[str]:
        """Get the current tenant key, or None if not set."""
        return getattr(cls._thread_local, "tenant_id", None)

    @classmethod
    def clear_current_tenant(cls) -> None:
        if hasattr(cls._thread_local, "tenant_id"):
            delattr(cls._thread_local, "tenant_id")


@contextmanager
def tenant_context(tenant_id: Any) -> Generator[None, None, None]:
    """
    Context manager for per-tenant work.

    Sets the current tenant for the duration of the block and restores the
    previous one afterwards.
    """
    previous_tenant = TenantContext.get_current_tenant_id()
    TenantContext.set_current_tenant(tenant_id)
    try:
        yield
    finally:
        if previous_tenant:
            TenantContext.set_current_tenant(previous_tenant)
        else:
            TenantContext.clear_current_tenant()
