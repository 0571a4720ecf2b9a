"""
stockdb Configuration Settings

This module contains all configuration constants for the stockdb server
and client.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server and client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("STOCKDB_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("STOCKDB_PORT", "7272"))

    # Connection settings
    READ_BUFFER_SIZE: int = 4096
    MAX_LINE_LENGTH: int = 2047  # Longer request lines are truncated
    MAX_RESPONSE_LENGTH: int = 4095
    CLIENT_TIMEOUT: float = float(os.environ.get("STOCKDB_CLIENT_TIMEOUT", "5.0"))

    # Print every received request line to stdout
    ECHO_REQUESTS: bool = os.environ.get("STOCKDB_ECHO_REQUESTS", "true").lower() == "true"

    # Logging settings
    DEBUG: bool = os.environ.get("STOCKDB_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("STOCKDB_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
