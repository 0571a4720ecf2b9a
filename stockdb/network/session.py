"""
Session Loop Module

Drives one client connection: read a request line, dispatch it, write
exactly one response line, repeat until 'quit' or end-of-channel.

States:
    AWAITING_REQUEST -> (line received) -> DISPATCHING
    DISPATCHING      -> (response sent) -> AWAITING_REQUEST
    any              -> ('quit' or end-of-channel) -> CLOSED

Requests are processed strictly one at a time; there is no pipelining.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from enum import Enum, auto
from typing import Optional

from ..config.settings import settings
from ..protocol.commands import CommandType, Response
from ..protocol.interpreter import CommandInterpreter
from ..protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of a session."""
    AWAITING_REQUEST = auto()
    DISPATCHING = auto()
    CLOSED = auto()


async def read_line(reader: StreamReader, max_length: int = None) -> Optional[bytes]:
    """
    Read one request line from the channel.

    Every carriage return is dropped. Bytes beyond max_length are read and
    discarded, so an over-long line is truncated rather than rejected. A
    UTF-8 character split by the cut is dropped whole.

    Args:
        reader: StreamReader for the client connection
        max_length: Maximum number of bytes kept (default from settings)

    Returns:
        The line without its terminator, the partial line if the channel
        closes mid-line, or None on clean end-of-channel.
    """
    limit = max_length if max_length is not None else settings.MAX_LINE_LENGTH
    buffer = bytearray()
    truncated = False

    while True:
        try:
            chunk = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            if not exc.partial and not buffer:
                return None
            buffer += exc.partial.replace(b"\r", b"")
            break
        except asyncio.LimitOverrunError as exc:
            # Line longer than the stream buffer; drain what is there
            chunk = await reader.readexactly(exc.consumed)
            buffer += chunk.replace(b"\r", b"")
            truncated = truncated or len(buffer) > limit
            del buffer[limit:]
            continue

        buffer += chunk[:-1].replace(b"\r", b"")
        break

    if truncated or len(buffer) > limit:
        return _trim_partial_char(bytes(buffer[:limit]))
    return bytes(buffer)


def _trim_partial_char(line: bytes) -> bytes:
    """Drop a UTF-8 character cut in half by truncation."""
    start = len(line)
    while start > 0 and len(line) - start < 3 and line[start - 1] & 0xC0 == 0x80:
        start -= 1
    if start == 0 or line[start - 1] < 0xC0:
        return line

    lead = line[start - 1]
    width = 2 if lead < 0xE0 else 3 if lead < 0xF0 else 4
    if len(line) - (start - 1) < width:
        return line[:start - 1]
    return line


class Session:
    """
    A single client session.

    Attributes:
        state: Current SessionState
        requests: Number of request lines processed
    """

    def __init__(
            self,
            reader: StreamReader,
            writer: StreamWriter,
            interpreter: CommandInterpreter,
            echo: bool = None,
    ):
        self.reader = reader
        self.writer = writer
        self.interpreter = interpreter
        self.parser = ProtocolParser()
        self.echo = echo if echo is not None else settings.ECHO_REQUESTS
        self.state = SessionState.AWAITING_REQUEST
        self.requests = 0

    async def run(self) -> None:
        """
        Process requests until the client quits or hangs up.

        Connection errors other than a clean close propagate to the caller.
        """
        addr = self.writer.get_extra_info('peername')

        while self.state != SessionState.CLOSED:
            data = await read_line(self.reader)
            if data is None:
                logger.debug(f"Client disconnected: {addr}")
                self.state = SessionState.CLOSED
                break

            self.state = SessionState.DISPATCHING
            self.requests += 1

            if self.echo:
                print(data.decode(errors="replace"), flush=True)

            try:
                raw = data.decode()
            except UnicodeDecodeError:
                await self._send(Response.invalid_syntax())
                continue

            command = self.parser.parse_request(raw)
            if command.type == CommandType.QUIT:
                logger.debug(f"Client requested quit: {addr}")
                self.state = SessionState.CLOSED
                break

            await self._send(self.interpreter.execute(command))

    async def _send(self, response: Response) -> None:
        self.writer.write(self.parser.format_response(response).encode())
        await self.writer.drain()
        self.state = SessionState.AWAITING_REQUEST
