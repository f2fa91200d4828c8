"""
Protocol Request and Response Definitions

This module defines the data structures for parsed HTTP requests and the
responses the server sends back.
"""

from dataclasses import dataclass
from enum import Enum, auto
from http import HTTPStatus


class RequestMethod(Enum):
    """Enumeration of recognised request methods."""
    GET = auto()
    POST = auto()
    OTHER = auto()  # Well-formed but unsupported, e.g. HEAD
    UNKNOWN = auto()


@dataclass
class Request:
    """
    Represents a parsed HTTP request line.

    Attributes:
        method: GET, POST, OTHER for any other upper-case method name,
                or UNKNOWN for malformed requests
        path: Percent-decoded request path, always starting with "/"
        query: Raw query string without the leading "?"
        version: Protocol version from the request line, e.g. "HTTP/1.1"
        raw: The original request line
    """
    method: RequestMethod
    path: str = ""
    query: str = ""
    version: str = ""
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the request line was well formed."""
        return self.method != RequestMethod.UNKNOWN and self.path.startswith("/")


@dataclass
class Response:
    """
    Represents an HTTP response.

    Attributes:
        status: HTTP status code
        content_type: Value of the Content-Type header
        body: Response payload
    """
    status: HTTPStatus
    content_type: str = "text/plain"
    body: bytes = b""

    @property
    def status_line(self) -> str:
        """Status line such as 'HTTP/1.1 404 NOT FOUND'."""
        return f"HTTP/1.1 {self.status.value} {self.status.phrase.upper()}"

    @classmethod
    def ok(cls, content_type: str, body: bytes) -> "Response":
        """Create a 200 response."""
        return cls(status=HTTPStatus.OK, content_type=content_type, body=body)

    @classmethod
    def not_found(cls, content_type: str = "text/plain", body: bytes = b"404 FILE NOT FOUND") -> "Response":
        """Create a 404 response."""
        return cls(status=HTTPStatus.NOT_FOUND, content_type=content_type, body=body)

    @classmethod
    def error(cls, status: HTTPStatus) -> "Response":
        """Create a plain-text error response carrying the status phrase."""
        body = f"{status.value} {status.phrase.upper()}".encode()
        return cls(status=status, content_type="text/plain", body=body)

    @classmethod
    def bad_request(cls) -> "Response":
        return cls.error(HTTPStatus.BAD_REQUEST)

    @classmethod
    def not_implemented(cls) -> "Response":
        return cls.error(HTTPStatus.NOT_IMPLEMENTED)

    @classmethod
    def server_error(cls) -> "Response":
        return cls.error(HTTPStatus.INTERNAL_SERVER_ERROR)
