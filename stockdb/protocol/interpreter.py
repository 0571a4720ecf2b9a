"""
Command Interpreter Module

Executes parsed commands against the Catalog and builds the response.
Every failure, whether bad syntax, an unknown symbol, a missing date or a
failed write, is reported to the client as 'Invalid syntax'.
"""

import logging

from .commands import Command, CommandType, Response
from ..store.catalog import Catalog
from ..store.errors import PersistenceError
from ..store.persistence import rewrite

logger = logging.getLogger(__name__)


class CommandInterpreter:
    """
    Routes commands to Catalog and Stock operations.

    The interpreter keeps no per-call state. A changePrice is resolved
    completely, including the file rewrite, before execute() returns.

    Attributes:
        catalog: The Catalog commands are executed against
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def execute(self, command: Command) -> Response:
        """
        Execute a parsed command.

        Args:
            command: The Command object to execute

        Returns:
            Response object with the result
        """
        if not command.is_valid:
            return Response.invalid_syntax()

        if command.type == CommandType.LIST:
            return Response.symbols(self.catalog.list_symbols())

        if command.type == CommandType.PRICE:
            return self._price(command)

        if command.type == CommandType.CHANGE_PRICE:
            return self._change_price(command)

        # QUIT never reaches the interpreter; the session loop ends instead
        return Response.invalid_syntax()

    def _price(self, command: Command) -> Response:
        stock = self.catalog.by_symbol(command.symbol)
        if stock is None:
            return Response.invalid_syntax()

        row = stock.lookup(command.date)
        if row is None:
            return Response.invalid_syntax()

        return Response.price(row.close)

    def _change_price(self, command: Command) -> Response:
        """
        Update a close price and persist the stock.

        If the rewrite fails, the previous close price is restored so
        memory and file stay in agreement.
        """
        stock = self.catalog.by_symbol(command.symbol)
        if stock is None:
            return Response.invalid_syntax()

        previous = stock.lookup(command.date)
        if previous is None:
            return Response.invalid_syntax()

        stock.set_close(command.date, command.price)
        try:
            rewrite(stock)
        except PersistenceError as exc:
            stock.set_close(command.date, previous.close)
            logger.error(f"changePrice {stock.symbol} {command.date} rolled back: {exc}")
            return Response.invalid_syntax()

        logger.info(f"Changed {stock.symbol} {command.date} close "
                    f"from {previous.close:.2f} to {command.price:.2f}")
        return Response.changed()
