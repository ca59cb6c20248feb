"""Utility modules for the tenant migration core."""

from .config_repository import (
    ConfigRepository,
    get_config_repository,
    reset_config_repository,
    set_config_repository,
)
from .dot_utils import flatten, get_dotted, has_dotted, set_dotted

# Logging utilities
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "ConfigRepository",
    "get_config_repository",
    "reset_config_repository",
    "set_config_repository",
    "flatten",
    "get_dotted",
    "has_dotted",
    "set_dotted",
    "AzureQueueHandler",
    "ContextAwareLogger",
    "configure_logging",
    "get_logger",
]
