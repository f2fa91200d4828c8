"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from pathlib import Path
from typing import AsyncGenerator, Dict, Tuple

from webserver.cache.store import ResourceCache
from webserver.dispatch.dispatcher import RequestDispatcher
from webserver.network.tcp_server import WebServer
from webserver.protocol.parser import ProtocolParser


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """A fake clock shared by cache and dispatcher."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResourceCache:
    """Create a ResourceCache with room for 100 entries."""
    return ResourceCache(max_entries=100, clock=clock)


@pytest.fixture
def small_cache(clock: FakeClock) -> ResourceCache:
    """Create a ResourceCache with 2 slots for eviction testing."""
    return ResourceCache(max_entries=2, clock=clock)


@pytest.fixture
def unbounded_cache(clock: FakeClock) -> ResourceCache:
    """Create a ResourceCache that never evicts."""
    return ResourceCache(max_entries=0, clock=clock)


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


# ============================================================================
# Document Root Fixtures
# ============================================================================

SITE_FILES: Dict[str, bytes] = {
    "index.html": b"<h1>home</h1>",
    "style.css": b"body { color: red; }",
    "cat.jpg": bytes(range(256)) * 4,
    "docs/readme.txt": b"read me",
}

NOT_FOUND_PAGE = b"<h1>custom 404</h1>"


@pytest.fixture
def site(tmp_path: Path) -> Tuple[Path, Path]:
    """
    Create a document root and a server-files directory.

    Returns:
        (root, files) directories; files holds 404.html
    """
    root = tmp_path / "serverroot"
    files = tmp_path / "serverfiles"
    for name, data in SITE_FILES.items():
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    files.mkdir()
    (files / "404.html").write_bytes(NOT_FOUND_PAGE)
    return root, files


@pytest.fixture
def dispatcher(site: Tuple[Path, Path], cache: ResourceCache, clock: FakeClock) -> RequestDispatcher:
    """Create a dispatcher over the temporary site with a 60s max age."""
    root, files = site
    return RequestDispatcher(cache=cache, root=root, files_root=files, max_age=60, clock=clock)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int, site: Tuple[Path, Path]) -> AsyncGenerator[WebServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a WebServer on a random free port over the temporary site
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    root, files = site
    dispatcher = RequestDispatcher(
        cache=ResourceCache(max_entries=2),
        root=root,
        files_root=files,
        max_age=60,
    )
    srv = WebServer(host='127.0.0.1', port=server_port, dispatcher=dispatcher)

    # Start server in background task
    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    # Cleanup
    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class HttpResponse:
    """A parsed HTTP response as seen by the test client."""

    def __init__(self, status_line: str, headers: Dict[str, str], body: bytes):
        self.status_line = status_line
        self.headers = headers
        self.body = body

    @property
    def status(self) -> int:
        return int(self.status_line.split()[1])


async def http_request(port: int, raw: bytes, host: str = '127.0.0.1') -> HttpResponse:
    """
    Send raw request bytes and read the full response.

    The server closes the connection after one response, so the body is
    everything after the blank line.
    """
    reader, writer = await asyncio.open_connection(host, port)
    try:
        writer.write(raw)
        await writer.drain()
        data = await reader.read()
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except Exception:
            pass

    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return HttpResponse(lines[0], headers, body)


async def http_get(port: int, path: str) -> HttpResponse:
    """Issue a GET request for path."""
    return await http_request(port, f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
