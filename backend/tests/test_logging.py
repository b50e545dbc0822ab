"""Tests for application logging configuration under test settings."""
import logging


class TestAppLogger:
    def test_records_are_emitted_once(self):
        app_logger = logging.getLogger("apps")

        assert app_logger.handlers == []
        assert app_logger.propagate is True

    def test_service_records_reach_caplog(self, caplog):
        with caplog.at_level(logging.WARNING, logger="apps.invoices.services"):
            logging.getLogger("apps.invoices.services").warning("ignoring invoices")

        assert [r.getMessage() for r in caplog.records] == ["ignoring invoices"]
