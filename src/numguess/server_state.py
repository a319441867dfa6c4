from typing import TYPE_CHECKING
import asyncio
import random
if TYPE_CHECKING:
    from .line_conn import LineConn

class ServerState:
    """
    Server state shared by all LineConn instances. Only touched from the event loop thread.
    """
    def __init__(self, rng: random.Random | None = None):
        # One LineConn per open client connection.
        self.connections: set[LineConn] = set()
        # One ConnectionHandler.run() task per session; a task can outlive its connection briefly.
        self.tasks: set[asyncio.Task[None]] = set()
        # Process-wide generator every GameRound draws its secret from.
        self.rng = rng or random.Random()
        self.total_sessions = 0
        self.sessions_won = 0
