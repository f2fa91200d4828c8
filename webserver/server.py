#!/usr/bin/env python3
"""
Web Server Entry Point

This is the main entry point for starting the cached web server.

Usage:
    python -m webserver.server                     # Default settings (0.0.0.0:3490)
    python -m webserver.server --port 8080         # Custom port
    python -m webserver.server --root ./public     # Custom document root
    python -m webserver.server --debug             # Debug logging + cache listings
    python -m webserver.server --max-entries 200   # Custom cache size

Environment Variables:
    WEBSERVER_HOST               - Server bind address
    WEBSERVER_PORT               - Server port
    WEBSERVER_ROOT               - Document root
    WEBSERVER_FILES              - Directory holding 404.html
    WEBSERVER_CACHE_MAX_ENTRIES  - Maximum cache size
    WEBSERVER_CACHE_MAX_AGE      - Seconds before a cached file is reloaded
    WEBSERVER_DEBUG              - Enable debug mode (true/false)
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from .cache.store import ResourceCache
from .config.settings import settings
from .dispatch.dispatcher import RequestDispatcher
from .network.tcp_server import WebServer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Static file web server with an in-memory LRU cache",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--root",
        type=str,
        default=settings.SERVER_ROOT,
        help="Directory served to clients",
    )

    parser.add_argument(
        "--files",
        type=str,
        default=settings.SERVER_FILES,
        help="Directory holding server pages such as 404.html",
    )

    parser.add_argument(
        "--max-entries",
        type=int,
        default=settings.CACHE_MAX_ENTRIES,
        help="Maximum number of cached files (0 = unbounded)",
    )

    parser.add_argument(
        "--index-buckets",
        type=int,
        default=settings.CACHE_INDEX_BUCKETS,
        help="Cache hash index buckets (0 = default)",
    )

    parser.add_argument(
        "--max-age",
        type=int,
        default=settings.CACHE_MAX_AGE,
        help="Seconds before a cached file is reloaded (0 = never)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else settings.LOG_LEVEL.upper()

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def build_server(args: argparse.Namespace) -> WebServer:
    """Wire cache, dispatcher and server together from parsed arguments."""
    cache = ResourceCache(
        max_entries=args.max_entries,
        index_buckets=args.index_buckets,
    )
    dispatcher = RequestDispatcher(
        cache=cache,
        root=args.root,
        files_root=args.files,
        max_age=args.max_age,
    )
    return WebServer(host=args.host, port=args.port, dispatcher=dispatcher)


async def serve(server: WebServer) -> None:
    """
    Run server until stop() is called or SIGTERM/SIGINT arrives.

    Signal handlers are installed on the running loop for the lifetime of
    the call and removed again afterwards.
    """
    logger = logging.getLogger(__name__)
    loop = asyncio.get_running_loop()
    signals = (signal.SIGTERM, signal.SIGINT) if sys.platform != 'win32' else ()
    pending = set()

    def on_signal(sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, closing listener")
        task = loop.create_task(server.stop())
        pending.add(task)
        task.add_done_callback(pending.discard)

    for sig in signals:
        loop.add_signal_handler(sig, on_signal, sig)

    try:
        await server.start()
    finally:
        for sig in signals:
            loop.remove_signal_handler(sig)
        await server.stop()


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    server = build_server(args)

    logger.info(
        f"Web server on {args.host}:{args.port}, root {args.root}, "
        f"cache {args.max_entries} entries / {args.max_age}s max age"
        f"{', debug' if args.debug else ''}"
    )

    try:
        asyncio.run(serve(server))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    logger.info("Server stopped")


if __name__ == "__main__":
    main()
