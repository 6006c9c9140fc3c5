"""Tests for logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from consolebridge.config.settings import LoggingConfig
from consolebridge.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_loggers():
    bridge = logging.getLogger("consolebridge")
    access = logging.getLogger("uvicorn.access")
    saved = (bridge.level, list(bridge.handlers), access.level)
    yield
    for handler in list(bridge.handlers):
        bridge.removeHandler(handler)
        handler.close()
    bridge.setLevel(saved[0])
    for handler in saved[1]:
        bridge.addHandler(handler)
    access.setLevel(saved[2])


class TestSetupLogging:
    def test_defaults(self) -> None:
        setup_logging()
        bridge = logging.getLogger("consolebridge")
        assert bridge.level == logging.INFO
        assert len(bridge.handlers) == 1
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_repeated_setup_replaces_handlers(self) -> None:
        setup_logging(LoggingConfig(level="debug"))
        setup_logging(LoggingConfig(level="debug"))
        bridge = logging.getLogger("consolebridge")
        assert bridge.level == logging.DEBUG
        assert len(bridge.handlers) == 1

    def test_access_log_enabled(self) -> None:
        setup_logging(LoggingConfig(access_log=True))
        assert logging.getLogger("uvicorn.access").level == logging.INFO

    def test_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "bridge.log"
        setup_logging(LoggingConfig(file=str(log_file)))
        logging.getLogger("consolebridge.console.manager").info("Client connected: 1-abcd")
        for handler in logging.getLogger("consolebridge").handlers:
            handler.flush()
        assert "Client connected: 1-abcd" in log_file.read_text()
