"""
Logging setup for the flow connectors.

Every module obtains its logger with ``setup_logger(__name__)``. Loggers write
to stdout, and to a rotating file when FLOW_CONNECTORS_LOG_FILE is set. The
level is read from FLOW_CONNECTORS_LOG_LEVEL when a logger is created; the
service then applies the level of its loaded Config with set_log_level.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "flow_connectors"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DETAILED_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

# Log levels mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

MAX_LOG_FILE_SIZE = 5 * 1024 * 1024  # 5MB
LOG_FILE_BACKUPS = 3


def _level(name: Optional[str]) -> int:
    return LOG_LEVELS.get((name or "INFO").upper(), logging.INFO)


def setup_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: str = "logs",
) -> logging.Logger:
    """
    Set up and configure a logger instance.

    Args:
        name: Name of the logger (typically __name__)
        log_level: Log level name; defaults to FLOW_CONNECTORS_LOG_LEVEL, then INFO
        log_file: Optional log file name; defaults to FLOW_CONNECTORS_LOG_FILE
        log_dir: Directory to store log files

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level(log_level or os.environ.get("FLOW_CONNECTORS_LOG_LEVEL")))

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    detailed = os.environ.get("FLOW_CONNECTORS_DEBUG_MODE", "false").lower() == "true"
    formatter = logging.Formatter(DETAILED_LOG_FORMAT if detailed else LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or os.environ.get("FLOW_CONNECTORS_LOG_FILE")
    if log_file:
        log_dir_path = Path(log_dir)
        log_dir_path.mkdir(exist_ok=True, parents=True)

        file_handler = RotatingFileHandler(
            log_dir_path / log_file,
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=LOG_FILE_BACKUPS,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def set_log_level(level: str, prefix: str = PACKAGE_LOGGER) -> None:
    """Apply a level to every existing logger named ``prefix`` or below it."""
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and (name == prefix or name.startswith(f"{prefix}.")):
            logger.setLevel(_level(level))
