"""Tests for logging setup."""

import logging

from cruxctl.core.logging import LogLevel, StructuredLogger, get_logger, setup_logging


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_fields_appended(self, caplog):
        caplog.set_level(logging.INFO, logger="cruxctl")
        StructuredLogger("cruxctl.test").info("Saved", id="d-1")
        assert caplog.records[-1].getMessage() == "Saved [id=d-1]"

    def test_bind_keeps_context(self, caplog):
        caplog.set_level(logging.DEBUG, logger="cruxctl")
        base = StructuredLogger("test")
        log = base.bind(id="d-1").bind(node="edge-1")

        log.warning("Started", step=2)
        base.debug("Plain")

        messages = [r.getMessage() for r in caplog.records]
        assert messages == ["Started [id=d-1 node=edge-1 step=2]", "Plain"]
        assert caplog.records[0].name == "cruxctl.test"


class TestSetup:
    def test_get_logger_namespace(self):
        assert get_logger("cruxctl.deploy").name == "cruxctl.deploy"
        assert get_logger("deploy").name == "cruxctl.deploy"

    def test_setup_replaces_handlers(self):
        setup_logging(LogLevel.DEBUG, rich_output=False)
        logger = setup_logging(LogLevel.ERROR, rich_output=False)

        assert len(logging.getLogger().handlers) == 1
        assert logger.level == logging.ERROR
        assert logging.getLogger("httpx").level == logging.ERROR
