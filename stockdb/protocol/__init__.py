"""Protocol module for stockdb."""

from .commands import Command, CommandType, Response, ResponseStatus
from .interpreter import CommandInterpreter
from .parser import ProtocolParser

__all__ = [
    "Command",
    "CommandInterpreter",
    "CommandType",
    "Response",
    "ResponseStatus",
    "ProtocolParser",
]
