"""
Operation context for cross-cutting concerns around service calls.

Wraps service operations with ENTER/EXIT/ERROR logging, timing and a
correlation id shared by everything logged during one migration run.
"""

import time
import uuid
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, Union, cast

from ..config import get_config
from ..exceptions import BaseError, get_correlation_id, set_correlation_id
from ..utils.logger import get_logger
from .tenant_context import TenantContext


class OperationContext:
    """Context for a specific operation."""

    def __init__(self, operation_name: str, correlation_id: Optional[str] = None, **context):
        self.operation_name = operation_name
        self.operation_id = str(uuid.uuid4())

        self.correlation_id = correlation_id or get_correlation_id() or str(uuid.uuid4())
        set_correlation_id(self.correlation_id)

        self.context = context
        self.context["operation_id"] = self.operation_id
        self.context["correlation_id"] = self.correlation_id

        self.start_time = time.time()

    @property
    def duration_ms(self) -> float:
        """Get the operation duration in milliseconds."""
        return (time.time() - self.start_time) * 1000


@contextmanager
def operation_scope(name: str, **context):
    """Log entry, exit and failure of an operation."""
    logger = get_logger()

    tenant_id = TenantContext.get_current_tenant_id()
    if tenant_id and "tenant_id" not in context:
        context["tenant_id"] = tenant_id

    op_ctx = OperationContext(name, **context)
    ids = {"operation_id": op_ctx.operation_id, "correlation_id": op_ctx.correlation_id}

    logger.debug(f"ENTER: {name}", extra={**context, **ids})

    try:
        yield op_ctx
    except BaseError as e:
        # BaseError already logged itself; enrich and add the operation trail
        e.add_context(operation_name=name, operation_id=op_ctx.operation_id)
        logger.error(
            f"ERROR: {name} -> {e.error_code}: {e.message}",
            extra={
                **context,
                **ids,
                "duration_ms": op_ctx.duration_ms,
                "error_id": e.error_id,
                "status": "error",
            },
        )
        raise
    except Exception as e:
        logger.exception(
            f"ERROR: {name} -> {type(e).__name__}: {str(e)}",
            extra={
                **context,
                **ids,
                "duration_ms": op_ctx.duration_ms,
                "error_type": type(e).__name__,
                "status": "error",
            },
        )
        raise

    logger.debug(
        f"EXIT: {name}",
        extra={
            **context,
            **ids,
            "duration_ms": op_ctx.duration_ms,
            "status": "success",
        },
    )


F = TypeVar("F", bound=Callable[..., Any])


def operation(name: Union[Optional[str], Callable] = None):
    """
    Decorator for service operations.

    Args:
        name: Optional operation name. Defaults to ``<module>.<Class>.<function>``.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            if not get_config().features.enable_operation_context:
                return func(*args, **kwargs)

            op_name = name
            context = {"source_module": func.__module__}
            if op_name is None:
                op_name = func.__name__
                if args and hasattr(args[0], func.__name__):
                    class_name = args[0].__class__.__name__
                    op_name = f"{class_name}.{op_name}"
                    context["class"] = class_name
                op_name = f"{func.__module__.split('.')[-1]}.{op_name}"

            with operation_scope(op_name, **context):
                return func(*args, **kwargs)

        return cast(F, wrapper)

    # Handle usage as @operation (without parentheses)
    if callable(name):
        func, name = name, None
        return decorator(func)

    return decorator
