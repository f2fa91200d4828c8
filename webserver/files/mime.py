"""
MIME Type Lookup

Maps a file extension to the Content-Type sent with it. Extensions are
matched case-insensitively; anything unknown is served as
application/octet-stream.
"""

import posixpath
from typing import Dict, Optional

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES: Dict[str, str] = {
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "txt": "text/plain",
    "csv": "text/csv",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "pdf": "application/pdf",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "gif": "image/gif",
    "png": "image/png",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "webp": "image/webp",
}


class MimeResolver:
    """
    Resolve the MIME type of a request path from its extension.

    Usage:
        resolver = MimeResolver()
        resolver.resolve("cat.JPG")     # -> "image/jpeg"
        resolver.resolve("README")      # -> "application/octet-stream"
    """

    def __init__(self, extra_types: Optional[Dict[str, str]] = None, default: str = DEFAULT_MIME_TYPE):
        self.types = dict(MIME_TYPES)
        if extra_types:
            self.types.update({ext.lower().lstrip("."): mime for ext, mime in extra_types.items()})
        self.default = default

    def resolve(self, path: str) -> str:
        _, ext = posixpath.splitext(path)
        if not ext:
            return self.default
        return self.types.get(ext[1:].lower(), self.default)
