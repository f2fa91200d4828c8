"""Request dispatching for the web server."""

from .dispatcher import RequestDispatcher

__all__ = ["RequestDispatcher"]
