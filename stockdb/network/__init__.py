"""Network module for stockdb."""

from .session import Session, SessionState, read_line
from .tcp_server import StockServer

__all__ = ["Session", "SessionState", "StockServer", "read_line"]
