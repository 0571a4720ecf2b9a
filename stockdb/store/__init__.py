"""Store module for stockdb."""

from .catalog import Catalog
from .errors import LoadError, PersistenceError, RowParseError, StockDBError
from .persistence import load_from, rewrite
from .records import PriceRow, Stock, TradeDate

__all__ = [
    "Catalog",
    "LoadError",
    "PersistenceError",
    "PriceRow",
    "RowParseError",
    "Stock",
    "StockDBError",
    "TradeDate",
    "load_from",
    "rewrite",
]
