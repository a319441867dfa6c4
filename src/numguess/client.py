import asyncio
import logging
from typing import Callable

import click

from .config import DEFAULT_PORT
from .session import CONGRATULATIONS, EXIT_COMMAND

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"


async def play(host: str = DEFAULT_HOST,
               port: int = DEFAULT_PORT,
               read_input: Callable[[], str] = input,
               echo: Callable[[str], None] = click.echo) -> None:
    """
    Console client: print the greeting, then send each console line and print the reply.

    read_input blocks, so it runs in the default executor and the event loop stays free.
    """
    loop = asyncio.get_running_loop()
    reader, writer = await asyncio.open_connection(host, port)
    echo("Connected to Game Server")
    try:
        greeting = await reader.readline()
        if not greeting:
            echo("Connection closed by server.")
            return
        echo(greeting.decode("utf-8").rstrip("\r\n"))

        while True:
            try:
                line = await loop.run_in_executor(None, read_input)
            except EOFError:
                break

            writer.write(line.encode("utf-8") + b"\n")
            await writer.drain()
            if line.strip().lower() == EXIT_COMMAND:
                break

            reply = await reader.readline()
            if not reply:
                echo("Connection closed by server.")
                break
            text = reply.decode("utf-8").rstrip()
            echo(f"Server: {text}")
            if CONGRATULATIONS in text:
                # the server closes the session after a correct guess
                break
    except ConnectionError as exc:
        logger.error("Lost connection to %s:%d: %s", host, port, exc)
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError:
            pass
