"""
One client's game, from greeting to close.

greeting -> awaiting_guess -> evaluating -> awaiting_guess | finished

The handler only knows its stream and its GameRound. Whoever creates it decides how run() is scheduled;
the server wraps it in an asyncio task per connection.
"""
import asyncio
import logging

from ._types import Enricher, LineStream, SessionState
from .errors import GuessError, StreamError
from .game_round import GameRound
from .validator import GuessValidator

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"
TRY_AGAIN = "Try again!"
# only the session-ending reply carries this
CONGRATULATIONS = "Congratulations!"


def congratulations(attempts: int) -> str:
    noun = "attempt" if attempts == 1 else "attempts"
    return f"{CONGRATULATIONS} You guessed correctly in {attempts} {noun}!"


class ConnectionHandler:

    def __init__(self,
                 stream: LineStream,
                 game_round: GameRound,
                 validator: GuessValidator,
                 greeting: str,
                 enrich: Enricher | None = None,
                 read_timeout: float | None = None):
        self.stream = stream
        self.game_round = game_round
        self.validator = validator
        self.greeting = greeting
        self.enrich = enrich
        self.read_timeout = read_timeout

        self.state: SessionState = "greeting"
        self.attempts = 0
        self.won = False
        self._closed = False

    async def run(self) -> None:
        try:
            await self.stream.writeline(self.greeting)
            self.state = "awaiting_guess"

            while self.state != "finished":
                line = await self._receive()
                if line is None:
                    logger.debug("Stream closed by client")
                    break
                if line.strip().lower() == EXIT_COMMAND:
                    logger.debug("Client sent exit")
                    break
                reply = self.evaluate(line)
                await self.stream.writeline(reply)
        except StreamError as exc:
            logger.warning("Session ended by stream error: %s", exc)
        except asyncio.TimeoutError:
            logger.info("No guess received within %ss, closing session", self.read_timeout)
        finally:
            self.finish()

    async def _receive(self) -> str | None:
        if self.read_timeout is None:
            return await self.stream.readline()
        return await asyncio.wait_for(self.stream.readline(), timeout=self.read_timeout)

    def evaluate(self, line: str) -> str:
        """
        Handle one guess line and return the reply. Invalid input never ends the session.
        """
        self.state = "evaluating"
        try:
            guess = self.validator.validate(line)
        except GuessError as exc:
            logger.debug("Rejected guess %r: %s", line, exc.kind)
            self.state = "awaiting_guess"
            return str(exc)

        self.attempts += 1
        if self.game_round.is_match(guess):
            self.won = True
            self.state = "finished"
            reply = congratulations(self.attempts)
        else:
            self.state = "awaiting_guess"
            reply = TRY_AGAIN

        if self.enrich is not None:
            reply = self.enrich(reply, guess, self.game_round)
        return reply

    def finish(self) -> None:
        """
        Terminal state. Closes the stream once; a failing close is logged, not raised.
        """
        self.state = "finished"
        if self._closed:
            return
        self._closed = True
        try:
            self.stream.close()
        except Exception:
            logger.exception("Error while closing client stream")
