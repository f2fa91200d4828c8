"""
Protocol Parser Module

This module handles parsing of HTTP request lines and framing of responses.
"""

from typing import Dict, Optional
from urllib.parse import unquote

from .messages import Request, RequestMethod, Response
from ..config.settings import settings


class ProtocolParser:
    """
    Parser for the subset of HTTP/1.x the server speaks.

    Protocol Format:
        Request:  <METHOD> <target> HTTP/<major>.<minor>\\r\\n
                  (header lines are read but ignored)
        Response: HTTP/1.1 <code> <REASON>\\r\\n
                  Connection: close\\r\\n
                  Content-Type: <type>\\r\\n
                  Content-Length: <n>\\r\\n
                  Cache-Control: no-store\\r\\n
                  \\r\\n
                  <body>

    Constraints:
        - Request line: max MAX_REQUEST_LINE characters
        - Target: must start with "/"; query string is split off
        - Methods are case-sensitive; other upper-case names parse as OTHER
    """

    METHODS: Dict[str, RequestMethod] = {
        "GET": RequestMethod.GET,
        "POST": RequestMethod.POST,
    }

    def __init__(self):
        """Initialize the parser with constraints from settings."""
        self.max_request_line = settings.MAX_REQUEST_LINE

    def parse_request(self, data: str) -> Request:
        """
        Parse a raw request line into a Request object.

        Args:
            data: Raw request line (may include trailing CRLF)

        Returns:
            Request object representing the parsed line.
            Returns Request with method=UNKNOWN for malformed lines.

        Examples:
            >>> parser = ProtocolParser()
            >>> req = parser.parse_request("GET /cat.jpg?size=2 HTTP/1.1")
            >>> req.method == RequestMethod.GET
            True
            >>> req.path
            '/cat.jpg'
            >>> req.query
            'size=2'
        """
        raw = data.strip()
        if not raw or len(raw) > self.max_request_line:
            return Request(method=RequestMethod.UNKNOWN, raw=raw)

        parts = raw.split()
        if len(parts) != 3:
            return Request(method=RequestMethod.UNKNOWN, raw=raw)

        method_name, target, version = parts
        method = self._method_for(method_name)
        if method is None or not self._valid_version(version) or not target.startswith("/"):
            return Request(method=RequestMethod.UNKNOWN, raw=raw)

        path, _, query = target.partition("?")
        return Request(
            method=method,
            path=unquote(path),
            query=query,
            version=version,
            raw=raw,
        )

    def _method_for(self, name: str) -> Optional[RequestMethod]:
        """Map a method name; upper-case names we do not serve become OTHER."""
        method = self.METHODS.get(name)
        if method is None and name.isascii() and name.isalpha() and name.isupper():
            return RequestMethod.OTHER
        return method

    @staticmethod
    def _valid_version(version: str) -> bool:
        """Accept HTTP/<digit>.<digit>."""
        if not version.startswith("HTTP/"):
            return False
        major, dot, minor = version[5:].partition(".")
        return bool(dot) and major.isdigit() and minor.isdigit()

    def format_response(self, response: Response) -> bytes:
        """
        Frame a Response object into bytes ready to send.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.ok("text/plain", b"7"))[:17]
            b'HTTP/1.1 200 OK\\r\\n'
        """
        head = (
            f"{response.status_line}\r\n"
            "Connection: close\r\n"
            f"Content-Type: {response.content_type}\r\n"
            f"Content-Length: {len(response.body)}\r\n"
            "Cache-Control: no-store\r\n"
            "\r\n"
        )
        return head.encode("latin-1") + response.body
