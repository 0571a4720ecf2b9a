"""
Protocol Command and Response Definitions

This module defines the data structures for protocol commands and responses.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional

from ..store.records import TradeDate, format_money


class CommandType(Enum):
    """Enumeration of supported command types."""
    LIST = auto()
    PRICE = auto()
    CHANGE_PRICE = auto()
    QUIT = auto()
    UNKNOWN = auto()


class ResponseStatus(Enum):
    """Enumeration of response statuses."""
    OK = "OK"
    ERROR = "ERROR"


INVALID_SYNTAX = "Invalid syntax"


@dataclass
class Command:
    """
    Represents a parsed protocol command.

    Attributes:
        type: The type of command (LIST, PRICE, CHANGE_PRICE, QUIT, UNKNOWN)
        symbol: Stock symbol for PRICE and CHANGE_PRICE
        date: Trading date for PRICE and CHANGE_PRICE
        price: New close price for CHANGE_PRICE
        raw: The original raw command string
    """
    type: CommandType
    symbol: str = ""
    date: Optional[TradeDate] = None
    price: Optional[float] = None
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the command carries the arguments its type needs."""
        if self.type in (CommandType.LIST, CommandType.QUIT):
            return True
        if self.type == CommandType.PRICE:
            return bool(self.symbol) and self.date is not None
        if self.type == CommandType.CHANGE_PRICE:
            return bool(self.symbol) and self.date is not None and self.price is not None
        return False


@dataclass
class Response:
    """
    Represents a protocol response.

    An OK response carries its payload in value, which may be empty:
    changePrice answers with an empty line on success.

    Attributes:
        status: OK or ERROR
        value: The payload for OK responses
    """
    status: ResponseStatus
    value: str = ""

    @classmethod
    def ok(cls, value: str = "") -> "Response":
        """Create a successful response."""
        return cls(status=ResponseStatus.OK, value=value)

    @classmethod
    def invalid_syntax(cls) -> "Response":
        """Create the error response used for every failure."""
        return cls(status=ResponseStatus.ERROR)

    @classmethod
    def symbols(cls, symbols: Iterable[str]) -> "Response":
        """Create a list response."""
        return cls.ok(", ".join(symbols))

    @classmethod
    def price(cls, close: float) -> "Response":
        """Create a price response."""
        return cls.ok(format_money(close))

    @classmethod
    def changed(cls) -> "Response":
        """Create the empty response for a successful changePrice."""
        return cls.ok()
