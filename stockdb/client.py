#!/usr/bin/env python3
"""
Interactive Client for stockdb

A command-line client for querying the stockdb server. Commands are
checked with the same parser the server uses, so malformed input is
reported locally and never sent.

Usage:
    python -m stockdb.client                  # Connect to localhost:7272
    python -m stockdb.client --host 1.2.3.4   # Connect to specific host
    python -m stockdb.client --port 8080      # Connect to specific port

Commands:
    list                                   - List loaded symbols
    price SYMBOL, MM/DD/YYYY               - Close price for a day
    changePrice SYMBOL, MM/DD/YYYY, PRICE  - Change a close price
    quit                                   - Close connection and exit
"""

import argparse
import socket
import sys
from typing import Callable, Optional

from .config.settings import settings
from .protocol.commands import INVALID_SYNTAX, CommandType
from .protocol.parser import ProtocolParser

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

PROMPT = "> "


class StockClient:
    """Simple blocking TCP client for stockdb."""

    def __init__(self, host: str, port: int, timeout: float = None):
        self.host = host
        self.port = port
        self.timeout = timeout if timeout is not None else settings.CLIENT_TIMEOUT
        self.socket: Optional[socket.socket] = None
        self._buffer = b""

    def connect(self) -> bool:
        """Connect to the server."""
        try:
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            return True
        except OSError as e:
            print(f"Connection error: {e}", file=sys.stderr)
            self.socket = None
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None
        self._buffer = b""

    def send_line(self, line: str) -> None:
        """Send one request line."""
        if not self.socket:
            raise ConnectionError("not connected")
        self.socket.sendall(f"{line}\n".encode('utf-8'))

    def read_line(self) -> Optional[str]:
        """
        Read one response line.

        Returns:
            The line without its terminator (possibly empty), or None if
            the server closed the connection.
        """
        if not self.socket:
            raise ConnectionError("not connected")

        while b"\n" not in self._buffer:
            chunk = self.socket.recv(4096)
            if not chunk:
                return None
            self._buffer += chunk

        line, self._buffer = self._buffer.split(b"\n", 1)
        line = line.replace(b"\r", b"")[:settings.MAX_RESPONSE_LENGTH]
        return line.decode('utf-8', errors='replace')

    def request(self, line: str) -> Optional[str]:
        """Send a request and wait for its response line."""
        self.send_line(line)
        return self.read_line()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def run_repl(
        client: StockClient,
        read_input: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
) -> None:
    """
    Run the interactive request loop until quit, end of input, or hang-up.

    Args:
        client: A connected StockClient
        read_input: Prompting line source (raises EOFError at end of input)
        write: Output sink for responses and local errors
    """
    parser = ProtocolParser()

    while True:
        try:
            line = read_input(PROMPT).rstrip()
        except EOFError:
            break

        if not line:
            continue

        command = parser.parse_request(line)
        if command.type == CommandType.UNKNOWN:
            write(INVALID_SYNTAX)
            continue

        if command.type == CommandType.QUIT:
            try:
                client.send_line(line)
            except OSError:
                pass  # Already gone; quitting anyway
            break

        try:
            response = client.request(line)
        except OSError as e:
            write(f"Connection error: {e}")
            break

        if response is None:
            write("Server closed")
            break

        # changePrice succeeds with an empty line; print nothing for it
        if response:
            write(response)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Interactive client for stockdb"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Server port (default: {settings.PORT})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.CLIENT_TIMEOUT,
        help=f"Socket timeout in seconds (default: {settings.CLIENT_TIMEOUT})"
    )

    args = parser.parse_args(argv)

    client = StockClient(args.host, args.port, args.timeout)
    if not client.connect():
        print("Failed to connect. Is the server running?", file=sys.stderr)
        return 1

    try:
        run_repl(client)
    except KeyboardInterrupt:
        print()
    finally:
        client.disconnect()

    return 0


if __name__ == "__main__":
    sys.exit(main())
