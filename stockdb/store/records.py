"""
Record Store Module

This module holds the per-symbol price series and the value types it is
built from.

A Stock keeps its rows sorted ascending by sort key at all times:
rows are collected during load, sorted once, and afterwards only the
close field of a single row is ever replaced.

Lookups use binary search over the sorted rows, so both operations are
O(log n):
- lookup: Find the row for an exact date
- set_close: Replace the close price of the row for an exact date
"""

import math
import re
from bisect import bisect_left
from dataclasses import dataclass, field, replace
from typing import List, Optional

_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})", re.ASCII)
_MONEY_RE = re.compile(r"\$?([+-]?(?:\d+(?:\.\d*)?|\.\d+))", re.ASCII)

MIN_YEAR = 1800
MAX_YEAR = 3000


@dataclass(frozen=True)
class TradeDate:
    """
    A calendar date as written in source files and requests (MM/DD/YYYY).

    Day is only range-checked (1-31), not checked against the month.
    """
    year: int
    month: int
    day: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month out of range: {self.month}")
        if not 1 <= self.day <= 31:
            raise ValueError(f"day out of range: {self.day}")
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise ValueError(f"year out of range: {self.year}")

    @classmethod
    def parse(cls, text: str) -> "TradeDate":
        """
        Parse a MM/DD/YYYY date.

        Args:
            text: Date text with no surrounding content

        Returns:
            The parsed TradeDate

        Raises:
            ValueError: If the text is not a date or a field is out of range
        """
        match = _DATE_RE.fullmatch(text)
        if match is None:
            raise ValueError(f"invalid date: {text!r}")
        month, day, year = (int(part) for part in match.groups())
        return cls(year=year, month=month, day=day)

    @property
    def sort_key(self) -> int:
        """Integer key ordering dates chronologically."""
        return self.year * 10000 + self.month * 100 + self.day

    def __str__(self) -> str:
        return f"{self.month:02d}/{self.day:02d}/{self.year:04d}"


def parse_money(text: str) -> float:
    """Parse a price such as '$209.05' or '209.05'."""
    match = _MONEY_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid price: {text!r}")
    value = float(match.group(1))
    if not math.isfinite(value):
        raise ValueError(f"price out of range: {text!r}")
    return value


def format_money(value: float) -> str:
    """Render a price with a dollar sign and two decimals."""
    return f"${value:.2f}"


@dataclass(frozen=True)
class PriceRow:
    """
    One trading day of a stock.

    Rows are immutable; changing the close price replaces the row.
    """
    date: TradeDate
    close: float
    volume: int
    open: float
    high: float
    low: float

    @property
    def sort_key(self) -> int:
        return self.date.sort_key


@dataclass
class Stock:
    """
    A symbol's daily price series together with the file it came from.

    Attributes:
        symbol: Ticker symbol, unique within a Catalog
        path: Source file the stock is persisted to
        rows: Price rows sorted ascending by sort key
    """
    symbol: str
    path: str
    rows: List[PriceRow] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def sort_rows(self) -> None:
        """Sort rows by date. Rows sharing a date are all kept."""
        self.rows.sort(key=lambda row: row.sort_key)

    def _find_index(self, date: TradeDate) -> Optional[int]:
        key = date.sort_key
        idx = bisect_left(self.rows, key, key=lambda row: row.sort_key)
        if idx < len(self.rows) and self.rows[idx].sort_key == key:
            return idx
        return None

    def lookup(self, date: TradeDate) -> Optional[PriceRow]:
        """
        Find the row for an exact date.

        Args:
            date: The trading date to look up

        Returns:
            The matching row, or None if no row has that date
            (there is no nearest-date fallback)

        Time Complexity: O(log n)
        """
        idx = self._find_index(date)
        return self.rows[idx] if idx is not None else None

    def set_close(self, date: TradeDate, price: float) -> bool:
        """
        Replace the close price of the row for an exact date.

        The row keeps its position; no other field changes.

        Returns:
            True if a row was updated, False if no row has that date
        """
        idx = self._find_index(date)
        if idx is None:
            return False
        self.rows[idx] = replace(self.rows[idx], close=price)
        return True
