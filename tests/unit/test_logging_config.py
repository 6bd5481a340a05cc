"""Tests for logging setup."""

from __future__ import annotations

import logging

import pytest

from cardano_launcher.logging_config import ServiceLoggerAdapter, service_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestServiceLogger:
    """Tests for service_logger."""

    def test_prefixes_messages(self, caplog) -> None:
        """Records are prefixed with the service name."""
        log = service_logger(logging.getLogger("cardano_launcher.test"), "node")
        with caplog.at_level(logging.INFO, logger="cardano_launcher.test"):
            log.info("Started %s with PID %s", "cardano-node", 42)

        assert "[node] Started cardano-node with PID 42" in caplog.text

    def test_nests_names(self) -> None:
        """Wrapping an adapter nests the names."""
        log = service_logger(service_logger(logging.getLogger("x"), "launcher"), "wallet")
        assert isinstance(log, ServiceLoggerAdapter)
        assert log.extra["service"] == "launcher.wallet"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_replaces_handlers(self, restore_root_logger) -> None:
        """Repeated setup does not duplicate the console handler."""
        setup_logging()
        setup_logging()

        assert len(restore_root_logger.handlers) == 1
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_file_handler(self, restore_root_logger, tmp_path, monkeypatch) -> None:
        """A service name adds a log file in the log directory."""
        monkeypatch.delenv("LOG_APPEND", raising=False)
        setup_logging("cardano-launcher", log_dir=tmp_path)
        logging.getLogger("cardano_launcher.test").debug("written to file")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert "written to file" in (tmp_path / "cardano-launcher.log").read_text()
        assert restore_root_logger.level == logging.DEBUG

    @pytest.mark.parametrize("append,expected", [("yes", "earlier run\nwritten to file\n"), ("0", "written to file\n")])
    def test_log_append_controls_file_mode(self, restore_root_logger, tmp_path, monkeypatch, append, expected) -> None:
        """LOG_APPEND keeps the previous log file instead of truncating it."""
        monkeypatch.setenv("LOG_APPEND", append)
        (tmp_path / "cardano-launcher.log").write_text("earlier run\n")
        setup_logging("cardano-launcher", log_dir=tmp_path)
        restore_root_logger.handlers[-1].setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger("cardano_launcher.test").info("written to file")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert (tmp_path / "cardano-launcher.log").read_text() == expected
