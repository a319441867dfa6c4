"""
asyncio.Protocol for one game client.

The protocol side splits the incoming byte stream into lines and queues them; the session side
(ConnectionHandler, running as its own task) pulls them with readline() and answers with writeline().

Protocol callbacks used here:
- connection_made(transport): build the GameRound and handler, start the handler task.
- data_received(data): buffer bytes, queue every complete line.
- eof_received(): the client half-closed; queued lines are still answered, then readline() returns None.
- connection_lost(exc): wake the handler so it can finish; exc is set for resets and I/O faults.
- pause_writing()/resume_writing(): transport write buffer crossed its high/low water marks.
"""
import asyncio
import collections
import logging

from .config import Config
from .errors import StreamError
from .flow_control import FlowControl, HIGH_WATER_LINES
from .game_round import GameRound
from .server_state import ServerState
from .session import ConnectionHandler
from .util import format_addr, get_remote_addr

logger = logging.getLogger(__name__)


class LineConn(asyncio.Protocol):

    def __init__(self,
                 config: Config,
                 server_state: ServerState,
                 loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop or asyncio.get_event_loop()
        self.config = config
        self.max_line_length = config.max_line_length

        # Per-connection state
        self.transport: asyncio.Transport | None = None
        self.flow_control: FlowControl | None = None
        self.client: tuple[str, int] | None = None
        self.buffer = b""
        self.lines: collections.deque[str] = collections.deque()
        self.message_event = asyncio.Event()
        self.eof = False
        self.disconnected = False
        self._closing = False

        # Shared server state
        self.server_state = server_state
        self.connections = server_state.connections
        self.tasks = server_state.tasks

        self.handler: ConnectionHandler | None = None

    def connection_made(self, transport: asyncio.Transport):
        self.connections.add(self)
        self.transport = transport
        self.flow_control = FlowControl(transport)
        self.client = get_remote_addr(transport)
        logger.info("%s - Connected", format_addr(self.client))

        # every session gets its own round
        game_round = GameRound(self.config.secret_source, rng=self.server_state.rng)
        self.handler = ConnectionHandler(
            stream=self,
            game_round=game_round,
            validator=self.config.make_validator(),
            greeting=self.config.greeting,
            enrich=self.config.enrich,
            read_timeout=self.config.read_timeout,
        )
        self.server_state.total_sessions += 1

        task = self.loop.create_task(self.handler.run())
        task.add_done_callback(self.on_session_done)
        task.add_done_callback(self.tasks.discard)
        self.tasks.add(task)

    def connection_lost(self, exc: Exception | None = None) -> None:
        """
        Called when the peer closes the connection, when we close it, or on a network error.
        """
        self.connections.discard(self)
        self.disconnected = True
        if exc is not None:
            logger.warning("%s - Connection lost: %s", format_addr(self.client), exc)
        else:
            logger.info("%s - Disconnected", format_addr(self.client))

        self.message_event.set()
        if self.flow_control is not None:
            self.flow_control.resume_writing()  # release a writer blocked in drain()

    def eof_received(self):
        if self.buffer:
            # last line without a terminator
            self.lines.append(self.buffer.decode("utf-8", errors="replace").rstrip("\r"))
            self.buffer = b""
        self.eof = True
        self.message_event.set()
        # keep the transport open so replies to already queued lines still go out
        return True

    def data_received(self, data: bytes):
        self.buffer += data
        *complete, self.buffer = self.buffer.split(b"\n")
        for raw in complete:
            if len(raw) > self.max_line_length:
                self._reject_long_line()
                return
            line = raw.decode("utf-8", errors="replace").rstrip("\r")
            logger.debug("%s - Received: %r", format_addr(self.client), line)
            self.lines.append(line)

        if len(self.buffer) > self.max_line_length:
            self._reject_long_line()
            return

        if complete:
            self.message_event.set()
        if len(self.lines) > HIGH_WATER_LINES:
            self.flow_control.pause_reading()

    def _reject_long_line(self) -> None:
        logger.warning(
            "%s - Line longer than %d bytes, closing connection",
            format_addr(self.client),
            self.max_line_length,
        )
        self.buffer = b""
        self.close()

    async def readline(self) -> str | None:
        """
        Wait for the next line from the client. None means the client is done sending.
        """
        while not self.lines:
            if self.eof or self.disconnected:
                return None
            self.flow_control.resume_reading()
            await self.message_event.wait()
            self.message_event.clear()

        line = self.lines.popleft()
        if len(self.lines) <= HIGH_WATER_LINES:
            self.flow_control.resume_reading()
        return line

    async def writeline(self, line: str) -> None:
        if self.flow_control.write_paused and not self.disconnected:
            await self.flow_control.drain()

        if self.disconnected or self.transport.is_closing():
            raise StreamError(f"cannot write to {format_addr(self.client)}: connection closed")

        logger.debug("%s - Sending: %r", format_addr(self.client), line)
        self.transport.write(line.encode("utf-8") + b"\n")

    def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        self.transport.close()  # flushes buffered writes first

    def on_session_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            self.close()
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s - Exception in game session", format_addr(self.client), exc_info=exc)
            self.close()
            return
        if self.handler is not None and self.handler.won:
            self.server_state.sessions_won += 1

    def shutdown(self) -> None:
        """
        Called by the server to commence a graceful shutdown.
        """
        self.close()

    def pause_writing(self) -> None:
        """
        Called by the transport when the write buffer exceeds the high water mark
        """
        self.flow_control.pause_writing()

    def resume_writing(self) -> None:
        """
        Called by the transport when the write buffer goes below the low water mark
        """
        self.flow_control.resume_writing()
