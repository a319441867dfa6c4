import asyncio
import logging

import pytest

from numguess import Config, FixedSecret, GuessRange, Server

TIMEOUT = 5


class FakeStream:
    """In-memory stand-in for LineConn: feeds scripted lines, records replies."""

    def __init__(self, lines=(), fail_close=False, hang=False):
        self.incoming = list(lines)
        self.sent = []
        self.close_calls = 0
        self.fail_close = fail_close
        self.hang = hang

    async def readline(self):
        if self.incoming:
            return self.incoming.pop(0)
        if self.hang:
            await asyncio.Event().wait()
        return None

    async def writeline(self, line):
        self.sent.append(line)

    def close(self):
        self.close_calls += 1
        if self.fail_close:
            raise OSError("close failed")


class StubRandom:
    """Hands out scripted secrets in order."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = []

    def randint(self, low, high):
        self.calls.append((low, high))
        return self.values.pop(0)


@pytest.fixture(autouse=True)
def reset_package_logger():
    # the CLI installs its own handler and stops propagation, which hides records from caplog
    package_logger = logging.getLogger("numguess")
    yield
    package_logger.handlers[:] = []
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture()
def fake_stream():
    return FakeStream


@pytest.fixture()
def stub_random():
    return StubRandom


@pytest.fixture()
def make_config():
    def factory(**overrides):
        options = {
            "host": "127.0.0.1",
            "port": 0,
            "secret_source": FixedSecret(42),
            "guess_range": GuessRange(1, 100),
            "timeout_graceful_shutdown": TIMEOUT,
        }
        options.update(overrides)
        return Config(**options)
    return factory


class GameClient:
    """Line-level test client over a real socket."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.reader = reader
        self.writer = writer

    @classmethod
    async def connect(cls, server: Server) -> "GameClient":
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        return cls(reader, writer)

    async def send(self, line: str) -> None:
        self.writer.write(line.encode("utf-8") + b"\n")
        await self.writer.drain()

    async def recv(self) -> str | None:
        raw = await asyncio.wait_for(self.reader.readline(), TIMEOUT)
        if not raw:
            return None
        return raw.decode("utf-8").rstrip("\n")

    async def close(self) -> None:
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except ConnectionError:
            pass


async def wait_for_sessions(server: Server) -> None:
    """Wait until every session task on the server has finished."""
    async def drained():
        while server.server_state.tasks:
            await asyncio.sleep(0.01)
    await asyncio.wait_for(drained(), TIMEOUT)


@pytest.fixture()
def run_with_server():
    """
    Run `scenario(server)` against a started server on an ephemeral port, shutting it down afterwards.
    """
    def runner(config, scenario, prepare=None):
        async def main():
            server = Server(config)
            if prepare is not None:
                prepare(server)
            await server.startup()
            try:
                return await scenario(server)
            finally:
                await server.shutdown()
        return asyncio.run(main())
    return runner


@pytest.fixture()
def game_client():
    return GameClient


@pytest.fixture()
def sessions_drained():
    return wait_for_sessions
