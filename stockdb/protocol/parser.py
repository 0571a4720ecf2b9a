"""
Protocol Parser Module

This module handles parsing of raw protocol commands and formatting of
responses. The same parser validates input on the client, before a line
is sent, and on the server, before a command is dispatched.
"""

import re

from .commands import INVALID_SYNTAX, Command, CommandType, Response, ResponseStatus
from ..store.records import TradeDate, parse_money

_PRICE_RE = re.compile(r"price (?P<symbol>[^,\s]+), ?(?P<date>[^,]+)")
_CHANGE_PRICE_RE = re.compile(
    r"changePrice (?P<symbol>[^,\s]+), ?(?P<date>[^,]+), ?(?P<price>[^,]+)"
)


class ProtocolParser:
    """
    Parser for the stockdb line protocol.

    Protocol Format:
        Request:  <command>\\n
        Response: <payload>\\n

    Commands (case-sensitive):
        list                                 -> AAPL, MSFT
        price SYMBOL, MM/DD/YYYY             -> $300.35 | Invalid syntax
        changePrice SYMBOL, MM/DD/YYYY, 310  -> (empty line) | Invalid syntax
        quit                                 -> (connection closed)

    Constraints:
        - The space after each comma is optional, at most one
        - Symbols are non-empty and contain no whitespace or commas
        - Prices may carry a leading '$'
        - Nothing may follow a command's last argument
    """

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Only the line terminator is stripped; any other stray character
        makes the request invalid.

        Args:
            data: Raw request string (may include trailing newline)

        Returns:
            Command object representing the parsed request.
            Returns Command with type=UNKNOWN for invalid/malformed requests.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("price AAPL, 01/02/2020")
            >>> cmd.type == CommandType.PRICE
            True
            >>> cmd.symbol
            'AAPL'
            >>> str(cmd.date)
            '01/02/2020'
        """
        raw = data.rstrip("\r\n")

        if raw == "list":
            return Command(type=CommandType.LIST, raw=raw)
        if raw == "quit":
            return Command(type=CommandType.QUIT, raw=raw)
        if raw.startswith("price "):
            return self._parse_price(raw)
        if raw.startswith("changePrice "):
            return self._parse_change_price(raw)

        return Command(type=CommandType.UNKNOWN, raw=raw)

    def _parse_price(self, raw: str) -> Command:
        """
        Parse a price command.

        Format: price SYMBOL, MM/DD/YYYY
        """
        match = _PRICE_RE.fullmatch(raw)
        if match is None:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        try:
            date = TradeDate.parse(match.group("date"))
        except ValueError:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(
            type=CommandType.PRICE,
            symbol=match.group("symbol"),
            date=date,
            raw=raw,
        )

    def _parse_change_price(self, raw: str) -> Command:
        """
        Parse a changePrice command.

        Format: changePrice SYMBOL, MM/DD/YYYY, PRICE
        """
        match = _CHANGE_PRICE_RE.fullmatch(raw)
        if match is None:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        try:
            date = TradeDate.parse(match.group("date"))
            price = parse_money(match.group("price"))
        except ValueError:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(
            type=CommandType.CHANGE_PRICE,
            symbol=match.group("symbol"),
            date=date,
            price=price,
            raw=raw,
        )

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into a protocol string.

        Args:
            response: Response object to format

        Returns:
            Formatted response string WITH trailing newline.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.price(300.35))
            '$300.35\\n'
            >>> parser.format_response(Response.changed())
            '\\n'
            >>> parser.format_response(Response.invalid_syntax())
            'Invalid syntax\\n'
        """
        if response.status == ResponseStatus.ERROR:
            return f"{INVALID_SYNTAX}\n"
        return f"{response.value}\n"
