"""Protocol module for the web server."""

from .messages import Request, RequestMethod, Response
from .parser import ProtocolParser

__all__ = [
    "Request",
    "RequestMethod",
    "Response",
    "ProtocolParser",
]
