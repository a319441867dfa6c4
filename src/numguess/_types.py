from typing import Callable, Literal, NamedTuple, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from .game_round import GameRound


class GuessRange(NamedTuple):
    low: int
    high: int

    def contains(self, value: int) -> bool:
        return self.low <= value <= self.high


class FixedSecret(NamedTuple):
    value: int


class RandomSecret(NamedTuple):
    low: int
    high: int


SecretSource = FixedSecret | RandomSecret

SessionState = Literal["greeting", "awaiting_guess", "evaluating", "finished"]

# (reply, guess, game_round) -> reply
Enricher = Callable[[str, int, "GameRound"], str]


class LineStream(Protocol):
    async def readline(self) -> str | None: ...

    async def writeline(self, line: str) -> None: ...

    def close(self) -> None: ...
