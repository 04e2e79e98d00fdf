"""
Configuration module for the flow connectors service.

This module handles loading configuration from environment variables and default settings.
Connector credentials are never configured here: they arrive per call as secrets.
"""

import os
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

ENV_PREFIX = "FLOW_CONNECTORS_"

class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)

class Config(BaseModel):
    """
    Configuration settings for the flow connectors service.
    """
    # Application settings
    app_name: str = Field(default_factory=lambda: _env("APP_NAME", "Flow Connectors"))
    environment: Environment = Field(default_factory=lambda: _env("ENVIRONMENT", "development"))
    debug_mode: bool = Field(default_factory=lambda: _env("DEBUG_MODE", "false").lower() == "true")
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    # Server settings
    host: str = Field(default_factory=lambda: _env("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(_env("PORT", "8000")))

    # Security settings
    api_key_required: bool = Field(default_factory=lambda: _env("API_KEY_REQUIRED", "false").lower() == "true")
    api_keys: List[str] = Field(default_factory=lambda: _env("API_KEYS", ""))
    cors_origins: List[str] = Field(default_factory=lambda: _env("CORS_ORIGINS", "*"))

    model_config = {"use_enum_values": True, "validate_default": True, "validate_assignment": True}

    @field_validator("api_keys", "cors_origins", mode="before")
    @classmethod
    def split_comma_separated(cls, v):
        """Accept comma separated strings as they come from the environment."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Normalise the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unsupported log level: {v}")
        return level

def load_config() -> Config:
    """
    Load configuration from environment variables and default settings.

    Returns:
        Config: Configuration object
    """
    env = _env("ENVIRONMENT", "development").lower()

    config = Config()

    # Override with environment-specific settings
    default_level = "INFO"
    if env == "production":
        config.debug_mode = False
        default_level = "WARNING"
        config.api_key_required = True
        config.cors_origins = [os.getenv(f"{ENV_PREFIX}ALLOWED_ORIGIN", "*")]
    elif env == "staging":
        config.debug_mode = True
    else:  # development
        config.debug_mode = True
        default_level = "DEBUG"

    # An explicit FLOW_CONNECTORS_LOG_LEVEL wins over the environment default
    if f"{ENV_PREFIX}LOG_LEVEL" not in os.environ:
        config.log_level = default_level

    return config
