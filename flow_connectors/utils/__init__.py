"""
Flow connectors utilities package.

This package contains utility modules for logging and configuration used
throughout the connectors and the HTTP service.
"""

from flow_connectors.utils.logger import set_log_level, setup_logger
from flow_connectors.utils.config import load_config, Config

__all__ = ["set_log_level", "setup_logger", "load_config", "Config"]
