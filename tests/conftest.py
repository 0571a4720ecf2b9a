"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
from contextlib import closing
from pathlib import Path
from typing import AsyncGenerator, Callable, List

import pytest
import pytest_asyncio

from stockdb.network.tcp_server import StockServer
from stockdb.protocol.interpreter import CommandInterpreter
from stockdb.protocol.parser import ProtocolParser
from stockdb.store.catalog import Catalog

HEADER = "Date,Close/Last,Volume,Open,High,Low"

AAPL_ROWS = [
    "01/06/2020,$299.80,33870100,$293.79,$299.96,$292.75",
    "01/02/2020,$300.35,1000,$299.00,$301.00,$298.50",
    "12/31/2019,$293.65,25247630,$289.93,$293.68,$289.52",
]

MSFT_ROWS = [
    "01/02/2020,$160.62,22622100,$158.78,$160.73,$158.33",
    "01/03/2020,$158.62,21116200,$158.32,$159.95,$158.06",
]


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Source File Fixtures
# ============================================================================

@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., str]:
    """
    Factory writing a price file into tmp_path.

    Usage:
        path = write_csv("AAPL", ["01/02/2020,$300.35,1000,$299.00,$301.00,$298.50"])
    """
    def factory(symbol: str, rows: List[str], header: str = HEADER, name: str = None) -> str:
        path = tmp_path / (name or f"{symbol}.csv")
        path.write_text("\n".join([symbol, header, *rows]) + "\n")
        return str(path)
    return factory


@pytest.fixture
def aapl_csv(write_csv) -> str:
    """AAPL price file with rows out of date order."""
    return write_csv("AAPL", AAPL_ROWS)


@pytest.fixture
def msft_csv(write_csv) -> str:
    """MSFT price file."""
    return write_csv("MSFT", MSFT_ROWS)


# ============================================================================
# Store and Protocol Fixtures
# ============================================================================

@pytest.fixture
def catalog(aapl_csv: str, msft_csv: str) -> Catalog:
    """Catalog loaded with AAPL then MSFT."""
    return Catalog.load([aapl_csv, msft_csv])


@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def interpreter(catalog: Catalog) -> CommandInterpreter:
    """Create a CommandInterpreter over the test catalog."""
    return CommandInterpreter(catalog)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(catalog: Catalog, server_port: int) -> AsyncGenerator[StockServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a StockServer on a random free port
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = StockServer(catalog, host='127.0.0.1', port=server_port, echo=False)

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

class AsyncClient:
    """
    Helper class for testing server interactions.

    Usage:
        async with AsyncClient('127.0.0.1', 7272) as client:
            response = await client.send_command("price AAPL, 01/02/2020")
            assert response == "$300.35"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def send_command(self, command: str) -> str:
        """
        Send a command and receive the response.

        Args:
            command: Command string (newline will be added if missing)

        Returns:
            Response string without its trailing newline
        """
        if not command.endswith('\n'):
            command += '\n'

        self.writer.write(command.encode())
        await self.writer.drain()

        response = await asyncio.wait_for(self.reader.readline(), timeout=5)
        return response.decode().rstrip('\n')

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int) -> Callable[[], AsyncClient]:
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("list")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
