"""
Pydantic schemas for per-driver tenant configuration.

A driver groups one tenant model with the policy used to locate each
tenant's database connection and migration tracking table.
"""

from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ImportString


class ConnectionTemplateConfig(BaseModel):
    """Describes how a tenant connection is named and synthesized."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(description="Connection name template, e.g. 'tenant_{id}'")
    resolver: ImportString[Callable[..., Any]] = Field(
        description="Callable (or import string) returning a connection definition"
    )
    template: Dict[str, Any] = Field(
        default_factory=dict, description="Base connection definition handed to the resolver"
    )


class TenantDriverConfig(BaseModel):
    """Immutable configuration snapshot for one tenant driver."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    database: Optional[str] = Field(
        default=None, description="Connection used to query the tenant model"
    )
    connection: Optional[ConnectionTemplateConfig] = Field(
        default=None, description="Per-tenant connection template"
    )
    migration: Optional[str] = Field(
        default=None, description="Explicit migration table name template"
    )
    shared: bool = Field(
        default=True, description="Give every tenant its own prefixed migration table"
    )
    prefix: Optional[str] = Field(
        default=None, description="Migration table prefix, defaults to the driver name"
    )
    model: Optional[str] = Field(default=None, description="Import string of the tenant model")
    path: Optional[str] = Field(default=None, description="Migration script directory")
