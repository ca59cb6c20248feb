"""Tests for migration run logging."""

import json
import logging
import sys
from unittest.mock import MagicMock, patch

from tenant_migration_core.context.tenant_context import tenant_context
from tenant_migration_core.utils.logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
)


def make_record(msg="message", **extra):
    record = logging.LogRecord("test", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestContextAwareLogger:
    """Test extras formatting."""

    def test_extras_are_appended_to_message(self):
        inner = MagicMock()

        ContextAwareLogger(inner).info("Running", extra={"table": "t", "count": 2})

        inner.info.assert_called_once_with(
            "Running | table=t | count=2", extra={"table": "t", "count": 2}
        )

    def test_reserved_keys_are_not_passed_as_extra(self):
        inner = MagicMock()

        ContextAwareLogger(inner).warning("Failed", extra={"module": "x", "table": "t"})

        inner.warning.assert_called_once_with(
            "Failed | module=x | table=t", extra={"table": "t"}
        )

    def test_other_kwargs_pass_through(self):
        inner = MagicMock()

        ContextAwareLogger(inner).error("Failed", exc_info=True)

        inner.error.assert_called_once_with("Failed", extra={}, exc_info=True)


class TestTenantContextFilter:
    def test_adds_current_tenant(self):
        record = make_record()

        with tenant_context(7):
            assert TenantContextFilter().filter(record) is True

        assert record.tenant_id == "7"

    def test_no_tenant(self):
        record = make_record()

        TenantContextFilter().filter(record)

        assert not hasattr(record, "tenant_id")


class TestGetLogger:
    def test_falls_back_to_package_logger(self):
        logger = get_logger()

        assert isinstance(logger, ContextAwareLogger)
        assert logger.logger.name == "tenant_migration_core"

    def test_configured_run_logger_is_returned(self):
        configured = configure_logging("nightly", log_level="DEBUG", enable_queue=False)

        assert get_logger() is configured
        assert configured.logger.name == "tenant_migration.nightly"
        assert configured.logger.level == logging.DEBUG

    def test_reconfigure_replaces_handlers(self):
        configure_logging("nightly", enable_queue=False)
        logger = configure_logging("nightly", enable_queue=False)

        assert len(logger.logger.handlers) == 1


class TestAzureQueueHandler:
    """Test structured log shipping."""

    def test_without_connection_string(self, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        with patch.object(sys, "stderr") as stderr:
            handler = AzureQueueHandler()

        assert handler.connection_string is None
        stderr.write.assert_called_once()
        handler.emit(make_record())
        handler.flush()
        assert len(handler.log_buffer) == 1

    @patch("tenant_migration_core.utils.logger.QueueServiceClient")
    def test_creates_missing_queue(self, service_client):
        service = service_client.from_connection_string.return_value
        service.list_queues.return_value = []

        AzureQueueHandler(queue_name="logs-queue", connection_string="UseDevelopmentStorage=true")

        service.create_queue.assert_called_once_with("logs-queue")

    def test_build_entry(self):
        with patch("tenant_migration_core.utils.logger.QueueServiceClient"):
            handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true")

        entry = handler.build_entry(make_record("Running", table="acme_1_migrations", tenant_id="1"))

        assert entry["message"] == "Running"
        assert entry["level"] == "INFO"
        assert entry["tenant_id"] == "1"
        assert entry["context"] == {"table": "acme_1_migrations"}

    def test_build_entry_with_exception(self):
        with patch("tenant_migration_core.utils.logger.QueueServiceClient"):
            handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true")
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        entry = handler.build_entry(record)

        assert entry["exception"]["type"] == "RuntimeError"
        assert entry["exception"]["message"] == "boom"

    @patch("tenant_migration_core.utils.logger.QueueClient")
    @patch("tenant_migration_core.utils.logger.QueueServiceClient")
    def test_batches_are_sent(self, service_client, queue_client):
        client = queue_client.from_connection_string.return_value
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true", batch_size=2)

        handler.emit(make_record("first"))
        client.send_message.assert_not_called()
        handler.emit(make_record("second"))

        assert client.send_message.call_count == 2
        sent = [json.loads(call.args[0]) for call in client.send_message.call_args_list]
        assert [entry["message"] for entry in sent] == ["first", "second"]
        assert handler.log_buffer == []

    @patch("tenant_migration_core.utils.logger.QueueClient")
    @patch("tenant_migration_core.utils.logger.QueueServiceClient")
    def test_close_flushes(self, service_client, queue_client):
        client = queue_client.from_connection_string.return_value
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true", batch_size=10)

        handler.emit(make_record("pending"))
        handler.close()

        client.send_message.assert_called_once()

    @patch("tenant_migration_core.utils.logger.QueueClient")
    @patch("tenant_migration_core.utils.logger.QueueServiceClient")
    def test_configure_logging_adds_queue_handler(self, service_client, queue_client):
        logger = configure_logging(
            "nightly", enable_queue=True, connection_string="UseDevelopmentStorage=true"
        )
        queue_handlers = [h for h in logger.logger.handlers if isinstance(h, AzureQueueHandler)]

        assert len(queue_handlers) == 1
        for handler in queue_handlers:
            logger.logger.removeHandler(handler)
            handler.close()
        queue_client.from_connection_string.return_value.send_message.assert_called_once()
