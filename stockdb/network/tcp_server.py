"""
Async TCP Server Module

This module implements the single-client TCP server for stockdb.

The server accepts exactly one client for its whole lifetime. As soon as
that client connects the listening socket is closed; any connection that
slips in before the close is dropped without a response. When the
session ends the server shuts down.

Serving more than one client would need a serialization point per Stock
around the lookup, update and rewrite of changePrice.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..config.settings import settings
from ..protocol.interpreter import CommandInterpreter
from ..store.catalog import Catalog
from .session import Session

logger = logging.getLogger(__name__)


class StockServer:
    """
    Asynchronous single-session TCP server for the stock catalog.

    Usage:
        server = StockServer(catalog, host='0.0.0.0', port=7272)
        await server.start()  # Returns once the client session ends

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 7272)
        catalog: The Catalog queried by the session
        interpreter: The CommandInterpreter executing requests
    """

    def __init__(
            self,
            catalog: Catalog,
            host: str = None,
            port: int = None,
            echo: bool = None,
    ):
        """
        Initialize the server.

        Args:
            catalog: Loaded Catalog to serve
            host: Bind address (default from settings)
            port: Port number (default from settings)
            echo: Print request lines to stdout (default from settings)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.catalog = catalog
        self.interpreter = CommandInterpreter(catalog)
        self.echo = echo

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._session: Optional[Session] = None
        self._finished = asyncio.Event()
        self._running = False
        self._rejected_connections = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle the client connection.

        The first connection becomes the session; later ones are closed
        immediately.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')

        if self._session is not None or self._finished.is_set():
            self._rejected_connections += 1
            logger.warning(f"Rejecting additional client {addr}")
            await self._close_writer(writer)
            return

        self._session = Session(reader, writer, self.interpreter, echo=self.echo)
        logger.info(f"Client connected: {addr}")

        # Only one client per server lifetime
        if self._server is not None:
            self._server.close()

        try:
            await self._session.run()
        except ConnectionResetError:
            logger.debug(f"Connection reset by client: {addr}")
        except (ConnectionError, OSError) as exc:
            logger.error(f"Channel error with client {addr}: {exc}")
        except Exception as exc:  # Log unexpected errors; the session is over either way
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            await self._close_writer(writer)
            logger.info(f"Session with {addr} ended after {self._session.requests} request(s)")
            self._finished.set()

    @staticmethod
    async def _close_writer(writer: StreamWriter) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            pass

    async def start(self) -> None:
        """
        Start the server and serve a single client session.

        Returns when the session ends, or when stop() is called before
        a client connects.

        Example:
            server = StockServer(catalog, port=7272)
            asyncio.run(server.start())
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
            await self._finished.wait()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            await self.stop()

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the listening socket and the active session, if any.
        """
        if self._session is not None and not self._finished.is_set():
            self._session.writer.close()
        self._finished.set()

        if self._server is None:
            return

        server, self._server = self._server, None
        server.close()
        try:
            await server.wait_closed()
        finally:
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including session state,
            request count, and catalog statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "session_state": self._session.state.name if self._session else None,
            "total_requests": self._session.requests if self._session else 0,
            "rejected_connections": self._rejected_connections,
            "catalog_stats": self.catalog.get_stats(),
        }
