"""
Async HTTP Server Module

This module implements the asynchronous accept loop for the web server.

Each connection carries exactly one request:
1. Read the request line and skip the header lines
2. Parse the request line using ProtocolParser
3. Dispatch it in a worker thread (file I/O blocks)
4. Frame and send the response, then close the connection
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..cache.store import ResourceCache
from ..config.settings import settings
from ..dispatch.dispatcher import RequestDispatcher
from ..protocol.messages import Response
from ..protocol.parser import ProtocolParser
from .response_writer import ResponseWriter

logger = logging.getLogger(__name__)

HEADER_TERMINATORS = (b"\r\n", b"\n", b"")


class WebServer:
    """
    Asynchronous TCP server speaking HTTP/1.1 with Connection: close.

    All connections share one RequestDispatcher and therefore one
    ResourceCache. Dispatching runs in the default thread pool, so several
    requests may use the cache at the same time; the cache serializes them.

    Usage:
        server = WebServer(host='0.0.0.0', port=3490)
        await server.start()  # Returns after stop()

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 3490)
        dispatcher: The RequestDispatcher shared by all connections
        parser: The ProtocolParser for request lines
        response_writer: Frames and sends responses
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            dispatcher: RequestDispatcher = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            dispatcher: RequestDispatcher instance (creates one from settings
                        if not provided)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.dispatcher = dispatcher if dispatcher is not None else RequestDispatcher()
        self.parser = ProtocolParser()
        self.response_writer = ResponseWriter(self.parser)

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._connection_count = 0
        self._total_requests = 0

    @property
    def cache(self) -> ResourceCache:
        return self.dispatcher.cache

    async def _read_head(self, reader: StreamReader) -> bytes:
        """
        Read the request line and discard the header lines after it.

        Returns:
            The request line; b"" if the client sent nothing, and a blank
            request line is returned without reading further

        Raises:
            ValueError: If a line exceeds the read buffer or there are too
                        many header lines
        """
        request_line = await reader.readline()
        if not request_line.strip():
            return request_line

        for _ in range(settings.MAX_HEADER_LINES):
            line = await reader.readline()
            if line in HEADER_TERMINATORS:
                return request_line
        raise ValueError("too many header lines")

    async def _discard_input(self, reader: StreamReader, writer: StreamWriter) -> None:
        """
        Half-close and read off what the client is still sending.

        The socket must not close with unread input or the client may get a
        reset instead of the response. Stops at EOF or after LINGER_TIMEOUT.
        """
        if writer.can_write_eof():
            writer.write_eof()

        async def drain() -> None:
            while await reader.read(settings.READ_BUFFER_SIZE):
                pass

        try:
            await asyncio.wait_for(drain(), timeout=settings.LINGER_TIMEOUT)
        except asyncio.TimeoutError:
            logger.debug("Client kept sending after the response, closing")

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self._connection_count += 1
        logger.debug(f"Client connected: {addr}")

        try:
            try:
                data = await asyncio.wait_for(
                    self._read_head(reader),
                    timeout=settings.CONNECTION_TIMEOUT,
                )
            except asyncio.TimeoutError:
                logger.debug(f"Timed out waiting for request from {addr}")
                return
            except ValueError as exc:
                logger.debug(f"Oversized request from {addr}: {exc}")
                await self.response_writer.send(writer, Response.bad_request())
                await self._discard_input(reader, writer)
                return

            if not data:
                logger.debug(f"Client disconnected without a request: {addr}")
                return

            try:
                raw = data.decode().rstrip('\r\n')
            except UnicodeDecodeError:
                await self.response_writer.send(writer, Response.bad_request())
                return

            logger.debug(f"Request from {addr}: {raw}")
            request = self.parser.parse_request(raw)
            self._total_requests += 1

            try:
                response = await asyncio.to_thread(self.dispatcher.dispatch, request)
            except Exception as exc:
                logger.exception(f"Error dispatching {raw!r}: {exc}")
                response = Response.server_error()

            await self.response_writer.send(writer, response)
            logger.info(f'{addr} "{raw}" {response.status.value} {len(response.body)}')

        except ConnectionResetError:
            logger.debug(f"Connection reset by client: {addr}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def start(self) -> None:
        """
        Bind the listening socket and accept connections until stopped.

        Returns once stop() closes the listener or the task running this
        coroutine is cancelled.
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=settings.READ_BUFFER_SIZE,
        )
        self._running = True

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # stop() closing the listener also lands here
            logger.debug("Accept loop ended")
        finally:
            self._running = False

    async def stop(self) -> None:
        """Close the listener; connections already accepted run to completion."""
        if self._server is None:
            return

        listener, self._server = self._server, None
        listener.close()
        try:
            await listener.wait_closed()
        finally:
            self._running = False

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with connection and request counts plus the cache's
            own statistics under "cache_stats".
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "total_requests": self._total_requests,
            "cache_stats": self.cache.get_stats(),
        }
