import random

from ._types import FixedSecret, RandomSecret, SecretSource


class GameRound:
    """
    The secret for one connection. It is chosen once, here, and never changes.
    A RandomSecret is drawn from `rng` so callers can hand in a seeded generator.
    """

    def __init__(self, secret_source: SecretSource, rng: random.Random | None = None):
        if isinstance(secret_source, FixedSecret):
            self._secret = secret_source.value
        elif isinstance(secret_source, RandomSecret):
            rng = rng or random.Random()
            self._secret = rng.randint(secret_source.low, secret_source.high)
        else:
            raise TypeError(f"Unsupported secret source: {secret_source!r}")

    @property
    def secret(self) -> int:
        return self._secret

    def is_match(self, guess: int) -> bool:
        return guess == self._secret

    def __repr__(self) -> str:
        return f"<GameRound at {id(self):#x}>"
