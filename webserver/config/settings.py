"""
Web Server Configuration Settings

This module contains all configuration constants for the web server.
Values marked with an environment variable can be overridden at start-up;
command line flags in server.py take precedence over both.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("WEBSERVER_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("WEBSERVER_PORT", "3490"))

    # Document roots
    SERVER_ROOT: str = os.environ.get("WEBSERVER_ROOT", "./serverroot")
    SERVER_FILES: str = os.environ.get("WEBSERVER_FILES", "./serverfiles")

    # Cache settings
    CACHE_MAX_ENTRIES: int = int(os.environ.get("WEBSERVER_CACHE_MAX_ENTRIES", "50"))
    CACHE_INDEX_BUCKETS: int = int(os.environ.get("WEBSERVER_CACHE_INDEX_BUCKETS", "0"))  # 0 = index default
    CACHE_MAX_AGE: int = int(os.environ.get("WEBSERVER_CACHE_MAX_AGE", "60"))  # Seconds; 0 disables refresh

    # Request settings
    MAX_REQUEST_LINE: int = 1024
    MAX_HEADER_LINES: int = 100
    READ_BUFFER_SIZE: int = 65536
    CONNECTION_TIMEOUT: int = 30  # Seconds to wait for the request head
    LINGER_TIMEOUT: float = 2.0  # Seconds to read off input after rejecting a head

    # Logging settings
    DEBUG: bool = os.environ.get("WEBSERVER_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("WEBSERVER_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
