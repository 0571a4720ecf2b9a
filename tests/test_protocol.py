"""
Tests for the Protocol Parser

These tests verify the ProtocolParser class:
- parse_request(): Parse raw commands into Command objects
- format_response(): Format Response objects into protocol strings

Run with: python -m pytest tests/test_protocol.py -v
"""

import pytest

from stockdb.protocol.commands import Command, CommandType, Response, ResponseStatus
from stockdb.protocol.parser import ProtocolParser
from stockdb.store.records import TradeDate


class TestParseRequestLIST:
    """Test parsing list commands."""

    def test_parse_list(self, parser: ProtocolParser):
        cmd = parser.parse_request("list")
        assert cmd.type == CommandType.LIST
        assert cmd.is_valid

    def test_parse_list_with_newline(self, parser: ProtocolParser):
        """Test the line terminator is stripped, CRLF included."""
        assert parser.parse_request("list\n").type == CommandType.LIST
        assert parser.parse_request("list\r\n").type == CommandType.LIST

    @pytest.mark.parametrize("line", ["LIST", "List", "list ", " list", "list AAPL", "lists"])
    def test_parse_list_strict(self, parser: ProtocolParser, line):
        """Test list is case-sensitive and takes nothing else."""
        assert parser.parse_request(line).type == CommandType.UNKNOWN


class TestParseRequestPRICE:
    """Test parsing price commands."""

    def test_parse_price_basic(self, parser: ProtocolParser):
        cmd = parser.parse_request("price AAPL, 01/02/2020")

        assert cmd.type == CommandType.PRICE
        assert cmd.symbol == "AAPL"
        assert cmd.date == TradeDate(2020, 1, 2)
        assert cmd.price is None
        assert cmd.is_valid

    def test_parse_price_without_space(self, parser: ProtocolParser):
        cmd = parser.parse_request("price AAPL,01/02/2020")
        assert cmd.type == CommandType.PRICE
        assert cmd.symbol == "AAPL"

    def test_parse_price_keeps_raw(self, parser: ProtocolParser):
        cmd = parser.parse_request("price AAPL, 01/02/2020\n")
        assert cmd.raw == "price AAPL, 01/02/2020"

    @pytest.mark.parametrize("line", [
        "price",
        "price ",
        "price AAPL",                     # missing date
        "price AAPL,",                    # empty date
        "price AAPL, ",
        "price , 01/02/2020",             # empty symbol
        "price AAPL 01/02/2020",          # missing comma
        "price AAPL,, 01/02/2020",        # stray comma
        "price AAPL,  01/02/2020",        # two spaces
        "price AAPL, 01/02/2020 ",        # trailing content
        "price AAPL, 01/02/2020, 5",
        "price AAPL, 13/01/2020",         # invalid month
        "price AAPL, 2020-01-02",
        "price  AAPL, 01/02/2020",
        "Price AAPL, 01/02/2020",
    ])
    def test_parse_price_invalid(self, parser: ProtocolParser, line):
        assert parser.parse_request(line).type == CommandType.UNKNOWN


class TestParseRequestCHANGEPRICE:
    """Test parsing changePrice commands."""

    def test_parse_change_price_basic(self, parser: ProtocolParser):
        cmd = parser.parse_request("changePrice AAPL, 01/02/2020, 310.00")

        assert cmd.type == CommandType.CHANGE_PRICE
        assert cmd.symbol == "AAPL"
        assert cmd.date == TradeDate(2020, 1, 2)
        assert cmd.price == pytest.approx(310.0)
        assert cmd.is_valid

    def test_parse_change_price_compact(self, parser: ProtocolParser):
        cmd = parser.parse_request("changePrice AAPL,01/02/2020,10")
        assert cmd.type == CommandType.CHANGE_PRICE
        assert cmd.price == 10.0

    def test_parse_change_price_dollar(self, parser: ProtocolParser):
        cmd = parser.parse_request("changePrice AAPL, 01/02/2020, $12.5")
        assert cmd.type == CommandType.CHANGE_PRICE
        assert cmd.price == 12.5

    @pytest.mark.parametrize("line", [
        "changePrice",
        "changePrice AAPL",
        "changePrice AAPL, 01/02/2020",           # missing price
        "changePrice AAPL, 01/02/2020,",          # empty price
        "changePrice AAPL,13/01/2020,10",         # invalid month
        "changePrice AAPL, 01/02/2020, ten",      # non-numeric
        "changePrice AAPL, 01/02/2020, 10 ",      # trailing content
        "changePrice AAPL, 01/02/2020, 10, 11",
        "changePrice , 01/02/2020, 10",           # empty symbol
        "changePrice AAPL, , 10",                 # empty date
        "changePrice AAPL 01/02/2020 10",
        "changeprice AAPL, 01/02/2020, 10",
        "changePrice AAPL, 01/02/2020, " + "9" * 400,  # overflowing price
    ])
    def test_parse_change_price_invalid(self, parser: ProtocolParser, line):
        assert parser.parse_request(line).type == CommandType.UNKNOWN


class TestParseRequestQUIT:
    """Test parsing quit command."""

    def test_parse_quit(self, parser: ProtocolParser):
        assert parser.parse_request("quit").type == CommandType.QUIT

    def test_parse_quit_with_newline(self, parser: ProtocolParser):
        assert parser.parse_request("quit\n").type == CommandType.QUIT

    @pytest.mark.parametrize("line", ["QUIT", "quit now", "exit"])
    def test_parse_quit_strict(self, parser: ProtocolParser, line):
        assert parser.parse_request(line).type == CommandType.UNKNOWN


class TestParseRequestUnknown:
    """Test unknown and empty input."""

    def test_parse_empty(self, parser: ProtocolParser):
        cmd = parser.parse_request("")
        assert cmd.type == CommandType.UNKNOWN
        assert not cmd.is_valid

    def test_parse_garbage(self, parser: ProtocolParser):
        assert parser.parse_request("PUT key value").type == CommandType.UNKNOWN

    def test_incomplete_command_is_invalid(self):
        assert not Command(type=CommandType.PRICE, symbol="AAPL").is_valid
        assert not Command(type=CommandType.CHANGE_PRICE, symbol="AAPL",
                           date=TradeDate(2020, 1, 2)).is_valid


class TestFormatResponse:
    """Test format_response()."""

    def test_format_price(self, parser: ProtocolParser):
        assert parser.format_response(Response.price(300.35)) == "$300.35\n"

    def test_format_price_rounds_to_cents(self, parser: ProtocolParser):
        assert parser.format_response(Response.price(310)) == "$310.00\n"

    def test_format_symbols(self, parser: ProtocolParser):
        assert parser.format_response(Response.symbols(["AAPL", "MSFT"])) == "AAPL, MSFT\n"

    def test_format_single_symbol(self, parser: ProtocolParser):
        assert parser.format_response(Response.symbols(["AAPL"])) == "AAPL\n"

    def test_format_changed_is_empty_line(self, parser: ProtocolParser):
        response = Response.changed()
        assert response.status == ResponseStatus.OK
        assert parser.format_response(response) == "\n"

    def test_format_invalid_syntax(self, parser: ProtocolParser):
        response = Response.invalid_syntax()
        assert response.status == ResponseStatus.ERROR
        assert parser.format_response(response) == "Invalid syntax\n"
