from .tenant_config_schema import ConnectionTemplateConfig, TenantDriverConfig

__all__ = [
    "ConnectionTemplateConfig",
    "TenantDriverConfig",
]
