"""
Unit tests for the exception system.

Tests the base error behavior and the tenant migration error types.
"""

from tenant_migration_core.exceptions import (
    BaseError,
    ConfigSynthesisError,
    ErrorCode,
    InvalidModelError,
    MigrationError,
    MissingTemplatePathError,
    RepositoryError,
    ServiceError,
    TenantNotFoundError,
    ValidationError,
    clear_correlation_id,
    get_correlation_id,
    not_found,
    set_correlation_id,
)


class TestBaseError:
    """Test BaseError class."""

    def test_basic_error_creation(self):
        error = BaseError("Test error message")

        assert error.message == "Test error message"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.status_code == 500
        assert error.cause is None
        assert error.context["error_id"] == error.error_id

    def test_error_with_cause(self):
        original_error = ValueError("Original error")
        error = BaseError("Wrapped error", cause=original_error)

        assert error.context["cause"]["type"] == "ValueError"
        assert error.context["cause"]["message"] == "Original error"
        assert error.error_chain == [error, original_error]

    def test_error_with_correlation_id(self):
        set_correlation_id("run-123")
        try:
            error = BaseError("Correlated error")
            assert error.context["correlation_id"] == "run-123"
            assert error.to_dict()["error"]["correlation_id"] == "run-123"
        finally:
            clear_correlation_id()

        assert get_correlation_id() is None

    def test_to_dict(self):
        error = BaseError("Dict error", cause=ValueError("inner"), table="acme_1_migrations")

        result = error.to_dict(include_cause=True)

        assert result["error"]["message"] == "Dict error"
        assert result["error"]["context"] == {"table": "acme_1_migrations"}
        assert result["error"]["cause"] == {"type": "ValueError", "message": "inner"}

    def test_add_context(self):
        error = BaseError("Error").add_context(tenant_id="7")

        assert error.context["tenant_id"] == "7"


class TestLayerErrors:
    """Test layer base classes."""

    def test_repository_error(self):
        assert RepositoryError("db").error_code == ErrorCode.DATABASE_ERROR

    def test_service_error_records_operation(self):
        error = ServiceError("svc", operation="run")

        assert error.context["operation"] == "run"
        assert error.status_code == 500

    def test_validation_error(self):
        error = ValidationError("bad", field="prefix")

        assert error.status_code == 400
        assert error.context["field"] == "prefix"


class TestTenantMigrationErrors:
    """Test the tenant migration error types."""

    def test_not_found_factory(self):
        error = not_found("Tenant", key=5)

        assert isinstance(error, TenantNotFoundError)
        assert error.message == "Tenant not found: key=5"
        assert error.status_code == 404
        assert error.context["resource_type"] == "Tenant"

    def test_invalid_model(self):
        error = InvalidModelError("app.models.Customer", "could not be imported")

        assert error.message == "Model [app.models.Customer] could not be imported"
        assert error.error_code == ErrorCode.CONFIGURATION_ERROR
        assert error.context["model"] == "app.models.Customer"

    def test_missing_template_path(self):
        error = MissingTemplatePathError("tenant_{entity.code}", "entity.code")

        assert isinstance(error, ValidationError)
        assert error.context["field"] == "entity.code"
        assert error.context["template"] == "tenant_{entity.code}"

    def test_config_synthesis(self):
        cause = KeyError("directory")
        error = ConfigSynthesisError("tenant_7", "resolver raised KeyError", cause=cause)

        assert error.message == "Unable to resolve connection [tenant_7]: resolver raised KeyError"
        assert error.connection == "tenant_7"
        assert error.cause is cause

    def test_migration_error(self):
        error = MigrationError("upgrade failed", table="acme_1_migrations")

        assert error.error_code == ErrorCode.MIGRATION_FAILED
        assert error.context["table"] == "acme_1_migrations"
