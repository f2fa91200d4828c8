"""Networking module for the web server."""

from .response_writer import ResponseWriter
from .tcp_server import WebServer

__all__ = ["ResponseWriter", "WebServer"]
