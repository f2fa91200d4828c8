"""
Request Dispatcher Module

Turns a parsed request into a response: routes the path, consults the
resource cache, applies the staleness policy and repopulates the cache
from disk when needed.

Staleness is decided here rather than in ResourceCache. The cache only
records when an entry was created; an entry older than max_age is treated
as absent, deleted, and reloaded before it is served.

dispatch() is synchronous and does blocking file I/O, so the server runs it
in a worker thread. File reads always happen outside the cache lock.
"""

import logging
import posixpath
import random
import time
from pathlib import Path
from typing import Callable, Optional, Union

from ..cache.exceptions import CacheAllocationError, EntryNotFoundError
from ..cache.store import CacheEntry, ResourceCache
from ..config.settings import settings
from ..files.loader import FileLoader
from ..files.mime import MimeResolver
from ..protocol.messages import Request, RequestMethod, Response

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
NOT_FOUND_FILE = "404.html"
D20_PATH = "/d20"


class RequestDispatcher:
    """
    Route requests to static files, served through a ResourceCache.

    Routes:
        /d20     -> random integer 1..20 as text/plain
        /        -> index.html from the document root
        /<path>  -> <path> from the document root (cache key: normalized <path>)

    Usage:
        dispatcher = RequestDispatcher(cache=ResourceCache(max_entries=50))
        response = dispatcher.dispatch(parser.parse_request(line))

    Attributes:
        cache: The shared ResourceCache
        loader: FileLoader for the document root
        error_loader: FileLoader for server-owned pages such as 404.html
        mime: MimeResolver used for Content-Type
        max_age: Seconds after which a cached entry is refreshed (<= 0 disables)
    """

    def __init__(
            self,
            cache: ResourceCache = None,
            root: Union[str, Path] = None,
            files_root: Union[str, Path] = None,
            max_age: float = None,
            clock: Callable[[], float] = time.time,
            mime: MimeResolver = None,
            rng: Optional[random.Random] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            cache: Shared cache (creates one from settings if not provided)
            root: Document root (default from settings)
            files_root: Directory holding 404.html (default from settings)
            max_age: Staleness threshold in seconds (default from settings)
            clock: Time source for age checks; use the cache's clock
            mime: MIME resolver (default table if not provided)
            rng: Random source for /d20
        """
        self.cache = cache if cache is not None else ResourceCache(
            max_entries=settings.CACHE_MAX_ENTRIES,
            index_buckets=settings.CACHE_INDEX_BUCKETS,
            clock=clock,
        )
        self.loader = FileLoader(root if root is not None else settings.SERVER_ROOT)
        self.error_loader = FileLoader(files_root if files_root is not None else settings.SERVER_FILES)
        self.max_age = max_age if max_age is not None else settings.CACHE_MAX_AGE
        self.mime = mime if mime is not None else MimeResolver()
        self._clock = clock
        self._rng = rng if rng is not None else random.Random()

    def dispatch(self, request: Request) -> Response:
        """
        Produce the response for a parsed request.

        Args:
            request: Parsed request line

        Returns:
            400 for malformed requests, 501 for methods other than GET,
            otherwise the routed response
        """
        if not request.is_valid:
            return Response.bad_request()

        if request.method != RequestMethod.GET:
            return Response.not_implemented()

        if request.path == D20_PATH:
            return self.get_d20()

        key = self.resource_key(request.path)
        if key is None:
            logger.debug(f"Not a file path: {request.path}")
            return self.not_found()

        return self.get_file(key)

    @staticmethod
    def resource_key(path: str) -> Optional[str]:
        """
        Normalize a request path into a cache key relative to the root.

        "/./a", "/docs/../a" and "//a" all map to "a", so one file has one
        cache entry. "/" maps to index.html.

        Returns:
            The key, or None for a path ending in "/" that names a
            directory rather than a file
        """
        if path == "/":
            return INDEX_FILE
        if path.endswith("/"):
            return None
        return posixpath.normpath(path.lstrip("/"))

    def get_d20(self) -> Response:
        """Roll a twenty-sided die."""
        return Response.ok("text/plain", str(self._rng.randint(1, 20)).encode())

    def is_stale(self, entry: CacheEntry) -> bool:
        """Check whether entry is older than max_age."""
        if self.max_age <= 0:
            return False
        return entry.age(self._clock()) > self.max_age

    def get_file(self, key: str) -> Response:
        """
        Serve a file from the cache, or from disk on a miss or stale hit.

        Args:
            key: Path relative to the document root, also the cache key

        Returns:
            200 with the file contents, or the 404 response
        """
        entry = self.cache.get(key)

        if entry is not None and self.is_stale(entry):
            logger.debug(f"Stale entry for {key} ({entry.age(self._clock()):.1f}s old), refreshing")
            try:
                self.cache.delete(entry)
            except EntryNotFoundError:
                # Another request already removed or replaced it
                logger.debug(f"Stale entry for {key} already gone")
            entry = None

        if entry is not None:
            logger.debug(f"Cache hit: {key}")
            response = Response.ok(entry.content_type, entry.content)
        else:
            response = self._load_and_cache(key)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Cache contents:\n{self.cache.format_entries()}")
        return response

    def _load_and_cache(self, key: str) -> Response:
        file = self.loader.load(key)
        if file is None:
            logger.debug(f"Not found: {key}")
            return self.not_found()

        content_type = self.mime.resolve(key)
        try:
            self.cache.put(key, content_type, file.data, file.size)
            logger.debug(f"Cache miss: {key}, loaded {file.size} bytes")
        except CacheAllocationError as exc:
            logger.warning(f"Serving {key} uncached: {exc}")

        return Response.ok(content_type, file.data)

    def not_found(self) -> Response:
        """Serve 404.html from the server files, or a plain-text fallback."""
        page = self.error_loader.load(NOT_FOUND_FILE)
        if page is None:
            return Response.not_found()
        return Response.not_found(self.mime.resolve(NOT_FOUND_FILE), page.data)
