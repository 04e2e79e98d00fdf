"""Tests for logger setup."""

import logging
from logging.handlers import RotatingFileHandler

from flow_connectors.utils.logger import set_log_level, setup_logger


def test_console_logger_defaults(monkeypatch):
    monkeypatch.delenv("FLOW_CONNECTORS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("FLOW_CONNECTORS_LOG_FILE", raising=False)

    logger = setup_logger("tests.console")

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("FLOW_CONNECTORS_LOG_LEVEL", "debug")

    assert setup_logger("tests.env").level == logging.DEBUG


def test_repeated_setup_does_not_duplicate_handlers():
    setup_logger("tests.repeat")
    logger = setup_logger("tests.repeat")

    assert len(logger.handlers) == 1


def test_rotating_file_output(tmp_path):
    logger = setup_logger("tests.file", log_level="INFO", log_file="connectors.log", log_dir=str(tmp_path))
    logger.info("written to file")

    file_handlers = [handler for handler in logger.handlers if isinstance(handler, RotatingFileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert "written to file" in (tmp_path / "connectors.log").read_text()
    file_handlers[0].close()


def test_detailed_format_in_debug_mode(monkeypatch):
    monkeypatch.setenv("FLOW_CONNECTORS_DEBUG_MODE", "true")

    logger = setup_logger("tests.detailed")

    assert "%(lineno)d" in logger.handlers[0].formatter._fmt


def test_set_log_level_applies_to_package_loggers():
    inside = setup_logger("tests.levels.connector", log_level="INFO")
    package = setup_logger("tests.levels", log_level="INFO")
    outside = setup_logger("tests.levelsother", log_level="INFO")

    set_log_level("warning", prefix="tests.levels")

    assert inside.level == logging.WARNING
    assert package.level == logging.WARNING
    assert outside.level == logging.INFO
