"""
numguess - a line-oriented TCP number guessing game on asyncio.
"""

__version__ = "0.1.0"

from ._types import FixedSecret, GuessRange, RandomSecret
from .config import Config
from .errors import BindError, GuessError, InvalidFormat, OutOfRange, StreamError
from .game_round import GameRound
from .server import Server
from .session import ConnectionHandler
from .validator import GuessValidator

__all__ = [
    "BindError",
    "Config",
    "ConnectionHandler",
    "FixedSecret",
    "GameRound",
    "GuessError",
    "GuessRange",
    "GuessValidator",
    "InvalidFormat",
    "OutOfRange",
    "RandomSecret",
    "Server",
    "StreamError",
]
