"""
Catalog Module

The Catalog owns every Stock the server knows about, keyed by symbol
(case-sensitive). Iteration and listing follow load order.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .errors import LoadError
from .persistence import load_from
from .records import Stock

logger = logging.getLogger(__name__)


class Catalog:
    """
    Symbol-indexed collection of stocks.

    A catalog is built once at startup and is never resized afterwards.
    Loading is all-or-nothing: a single unloadable source file or a
    duplicate symbol fails the whole load.

    Usage:
        catalog = Catalog.load(["AAPL.csv", "MSFT.csv"])
        stock = catalog.by_symbol("AAPL")
    """

    def __init__(self):
        self._stocks: Dict[str, Stock] = {}

    @classmethod
    def load(cls, paths: Iterable[str]) -> "Catalog":
        """
        Load one stock per source file.

        Args:
            paths: Source file paths, in the order symbols should be listed

        Returns:
            A populated Catalog

        Raises:
            LoadError: If any file fails to load or a symbol repeats
        """
        catalog = cls()
        for path in paths:
            catalog.add(load_from(path))
        logger.info(f"Catalog loaded {len(catalog)} symbol(s)")
        return catalog

    def add(self, stock: Stock) -> None:
        """Register a stock; raises LoadError if its symbol is taken."""
        if stock.symbol in self._stocks:
            raise LoadError(
                f"duplicate symbol {stock.symbol!r} in {stock.path} "
                f"(already loaded from {self._stocks[stock.symbol].path})"
            )
        self._stocks[stock.symbol] = stock

    def by_symbol(self, symbol: str) -> Optional[Stock]:
        return self._stocks.get(symbol)

    def list_symbols(self) -> List[str]:
        return list(self._stocks)

    def __len__(self) -> int:
        return len(self._stocks)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._stocks

    def __iter__(self) -> Iterator[Stock]:
        return iter(self._stocks.values())

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the catalog.

        Returns:
            Dictionary containing:
            - total_symbols: Number of loaded stocks
            - total_rows: Rows across all stocks
            - rows_per_symbol: Row count keyed by symbol
        """
        rows_per_symbol = {stock.symbol: len(stock) for stock in self}
        return {
            "total_symbols": len(self._stocks),
            "total_rows": sum(rows_per_symbol.values()),
            "rows_per_symbol": rows_per_symbol,
        }
