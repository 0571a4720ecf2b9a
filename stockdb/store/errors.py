"""Exceptions raised by the stock store."""


class StockDBError(Exception):
    """Base class for stockdb errors."""


class LoadError(StockDBError):
    """A source file could not be loaded; fatal at startup."""


class RowParseError(StockDBError, ValueError):
    """A single data line is malformed. The loader skips such lines."""


class PersistenceError(StockDBError):
    """A stock could not be written back to its source file."""
