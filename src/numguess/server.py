from typing import Generator
import asyncio
import functools
import signal
import sys
import logging
import contextlib
import threading
import click
from .config import Config
from .errors import BindError
from .server_state import ServerState
from .line_conn import LineConn


HANDLED_SIGNALS = {
    signal.SIGINT: "SIGINT",
    signal.SIGTERM: "SIGTERM",
}
if sys.platform == "win32":
    HANDLED_SIGNALS[signal.SIGBREAK] = "SIGBREAK"


logger = logging.getLogger(__name__)


class Server:
    def __init__(self, config: Config):
        self.config = config
        self.server_state = ServerState(rng=config.make_rng())
        self.started = False
        self.should_exit = False
        self.force_exit = False
        self._captured_signals: list[int] = []
        self.server: asyncio.Server | None = None

    def run(self) -> None:
        return asyncio.run(self.serve())

    async def serve(self) -> None:
        with self.capture_signals():
            await self._serve()

    async def _serve(self):
        logger.info("Starting %s server...", self.config.game_name)
        await self.startup()
        if self.should_exit:
            return
        await self.main_loop()
        await self.shutdown()
        logger.info("Server shutdown complete!")

    @property
    def port(self) -> int | None:
        """The bound port, useful when the config asked for port 0."""
        if not self.started or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[1]

    async def startup(self) -> None:
        loop = asyncio.get_running_loop()
        protocol_factory = functools.partial(
            LineConn,
            config=self.config,
            server_state=self.server_state,
            loop=loop,
        )
        try:
            server = await loop.create_server(protocol_factory,
                                              host=self.config.host,
                                              port=self.config.port,
                                              backlog=self.config.backlog
                                              )
        except OSError as exc:
            logger.error(exc)
            raise BindError(f"could not bind {self.config.host}:{self.config.port}: {exc}") from exc

        self.server = server
        self.started = True
        self._log_startup_message(server.sockets[0])

    def _log_startup_message(self, listener):
        addr_format = "%s://%s:%d"
        host = "0.0.0.0" if self.config.host is None else self.config.host
        if ":" in host:
            # It's an IPv6 address.
            addr_format = "%s://[%s]:%d"

        port = self.config.port
        if port == 0:
            port = listener.getsockname()[1]

        message = f"{self.config.game_name} running on {addr_format} (Press CTRL+C to quit)"
        color_message = f"{self.config.game_name} running on " + click.style(addr_format, bold=True) + " (Press CTRL+C to quit)"
        logger.info(
            message,
            "tcp",
            host,
            port,
            extra={"color_message": color_message},
        )

    async def main_loop(self) -> None:
        """
        The asyncio server accepts connections and runs sessions on its own; this loop
        only waits for a signal to set should_exit.
        """
        while not self.should_exit:
            await asyncio.sleep(0.1)

    async def shutdown(self) -> None:
        logger.info("Shutting down server...")
        # Stop accepting new connections
        self.server.close()

        # Close every live connection; each handler sees end of stream and finishes.
        for connection in list(self.server_state.connections):
            connection.shutdown()

        # let the closes run before we start waiting on them
        await asyncio.sleep(0.1)

        try:
            await asyncio.wait_for(
                self._wait_tasks_to_complete(),
                timeout=self.config.timeout_graceful_shutdown
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Graceful shutdown timed out. Forcing exit."
            )
            for t in self.server_state.tasks:
                if not t.done():
                    t.cancel(msg="Task cancelled due to timeout during graceful shutdown")

        logger.info(
            "Played %d sessions, %d won",
            self.server_state.total_sessions,
            self.server_state.sessions_won,
        )

    async def _wait_tasks_to_complete(self) -> None:
        # Wait for existing connections to close
        if self.server_state.connections and not self.force_exit:
            logger.info("Waiting for connections to close. (CTRL+C to force quit)")
            while self.server_state.connections and not self.force_exit:
                await asyncio.sleep(0.1)

        # A session task can still be finishing after its connection is gone
        if self.server_state.tasks and not self.force_exit:
            logger.info("Waiting for game sessions to complete. (CTRL+C to force quit)")
            while self.server_state.tasks and not self.force_exit:
                await asyncio.sleep(0.1)

        await self.server.wait_closed()

    # signal handling
    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        """
        Signals can only be listened to from the main thread
        """
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        original_handlers = {sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS.keys()}
        try:
            yield
        finally:
            # Restore original signal handlers
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)
            # Re-raise captured signals in reverse order so the default handlers see them
            for captured_signal in reversed(self._captured_signals):
                signal.raise_signal(captured_signal)

    def handle_exit(self, sig: int, frame) -> None:
        self._captured_signals.append(sig)
        if self.should_exit and sig == signal.SIGINT:
            self.force_exit = True
        else:
            self.should_exit = True
