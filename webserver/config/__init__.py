"""Configuration module for the web server."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
