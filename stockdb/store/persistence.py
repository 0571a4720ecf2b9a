"""
Persistence Adapter Module

Loads a Stock from its CSV source file and writes it back after a change.

File Format:
    Line 1:  <SYMBOL>
    Line 2:  header (ignored on read, regenerated on write)
    Line 3+: MM/DD/YYYY,$close,volume,$open,$high,$low

Rewrites go through a sibling temporary file that is fsynced and then
renamed over the original, so the visible file is always either the old
or the new complete version.
"""

import logging
import os
from typing import List

from .errors import LoadError, PersistenceError, RowParseError
from .records import PriceRow, Stock, TradeDate, format_money, parse_money

logger = logging.getLogger(__name__)

HEADER = "Date,Close/Last,Volume,Open,High,Low"
FIELD_COUNT = 6
TEMP_SUFFIX = ".tmp"


def parse_row(line: str) -> PriceRow:
    """
    Parse one data line into a PriceRow.

    Args:
        line: Data line without its line terminator

    Returns:
        The parsed row

    Raises:
        RowParseError: If the field count is wrong or any field is invalid
    """
    fields: List[str] = [part.strip() for part in line.split(",")]
    if len(fields) != FIELD_COUNT:
        raise RowParseError(f"expected {FIELD_COUNT} fields, got {len(fields)}")

    date_s, close_s, volume_s, open_s, high_s, low_s = fields
    try:
        date = TradeDate.parse(date_s)
        close = parse_money(close_s)
        volume = _parse_volume(volume_s)
        open_ = parse_money(open_s)
        high = parse_money(high_s)
        low = parse_money(low_s)
    except ValueError as exc:
        raise RowParseError(str(exc)) from exc

    return PriceRow(date=date, close=close, volume=volume, open=open_, high=high, low=low)


def _parse_volume(text: str) -> int:
    if not text.isascii() or not text.isdigit():
        raise ValueError(f"invalid volume: {text!r}")
    return int(text)


def format_row(row: PriceRow) -> str:
    """Render a row as a data line (no line terminator)."""
    return ",".join([
        str(row.date),
        format_money(row.close),
        str(row.volume),
        format_money(row.open),
        format_money(row.high),
        format_money(row.low),
    ])


def load_from(path: str) -> Stock:
    """
    Load a Stock from a source file.

    Malformed data lines are skipped; a missing symbol or header line
    aborts the load.

    Args:
        path: Path of the CSV file

    Returns:
        Stock with rows sorted by date

    Raises:
        LoadError: If the file cannot be read or lacks a symbol/header line
    """
    skipped = 0
    try:
        with open(path, "r", encoding="utf-8", newline="") as fh:
            symbol = fh.readline().strip()
            if not symbol:
                raise LoadError(f"{path}: missing symbol line")
            if not fh.readline():
                raise LoadError(f"{path}: missing header line")

            stock = Stock(symbol=symbol, path=path)
            for lineno, line in enumerate(fh, start=3):
                line = line.rstrip("\r\n")
                if not line:
                    continue
                try:
                    stock.rows.append(parse_row(line))
                except RowParseError as exc:
                    skipped += 1
                    logger.debug(f"{path}:{lineno}: skipping row: {exc}")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"{path}: {exc}") from exc

    stock.sort_rows()

    if skipped:
        logger.warning(f"{path}: skipped {skipped} malformed row(s)")
    logger.info(f"Loaded {symbol} with {len(stock)} rows from {path}")
    return stock


def rewrite(stock: Stock) -> None:
    """
    Atomically rewrite a stock's source file from its in-memory rows.

    Args:
        stock: The stock to persist

    Raises:
        PersistenceError: If the file could not be written; the original
            file is left untouched in that case
    """
    tmp_path = stock.path + TEMP_SUFFIX
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(f"{stock.symbol}\n")
            fh.write(f"{HEADER}\n")
            for row in stock.rows:
                fh.write(f"{format_row(row)}\n")
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, stock.path)
    except OSError as exc:
        logger.error(f"Failed to persist {stock.symbol} to {stock.path}: {exc}")
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as cleanup_exc:
            logger.warning(f"Could not remove {tmp_path}: {cleanup_exc}")
        raise PersistenceError(f"{stock.path}: {exc}") from exc

    logger.debug(f"Persisted {stock.symbol} ({len(stock)} rows) to {stock.path}")
