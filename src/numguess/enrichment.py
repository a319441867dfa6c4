"""
Optional decorations for guess-result lines.

Each hook takes (reply, guess, game_round) and returns the line to send. They run
synchronously on the reply right before it is written and are off by default.
"""
import time
from collections import Counter

from ._types import Enricher
from .game_round import GameRound


def timestamp(reply: str, guess: int, game_round: GameRound) -> str:
    return f"TIME: {int(time.time())} {reply}"


def parity(reply: str, guess: int, game_round: GameRound) -> str:
    kind = "even" if guess % 2 == 0 else "odd"
    return f"{reply} ({guess} is {kind})"


def magnitude(reply: str, guess: int, game_round: GameRound) -> str:
    if game_round.is_match(guess):
        return reply
    direction = "higher" if guess < game_round.secret else "lower"
    return f"{reply} Go {direction}."


def code_hint(reply: str, guess: int, game_round: GameRound) -> str:
    if game_round.is_match(guess):
        return reply
    placed, misplaced = score_code(guess, game_round.secret)
    return f"{reply} Hint: {placed} correct position, {misplaced} correct digit but wrong position"


def score_code(guess: int, secret: int, width: int = 4) -> tuple[int, int]:
    """
    Compare two codes digit by digit, zero padded to `width`.
    Returns (digits in the right place, right digits in the wrong place).
    """
    guess_digits = f"{guess:0{width}d}"
    secret_digits = f"{secret:0{width}d}"

    placed = sum(1 for g, s in zip(guess_digits, secret_digits) if g == s)
    # each secret digit can be claimed once
    common = Counter(guess_digits) & Counter(secret_digits)
    return placed, sum(common.values()) - placed


ENRICHERS: dict[str, Enricher] = {
    "timestamp": timestamp,
    "parity": parity,
    "magnitude": magnitude,
    "hint": code_hint,
}


def get_enricher(names: str | None) -> Enricher | None:
    """
    Build one hook from a comma separated list of names, applied left to right.
    An empty value disables enrichment.
    """
    if not names:
        return None

    hooks = []
    for name in names.split(","):
        name = name.strip().lower()
        if not name:
            continue
        if name not in ENRICHERS:
            raise ValueError(f"Unknown enrichment {name!r}, expected one of: {', '.join(ENRICHERS)}")
        hooks.append(ENRICHERS[name])

    if not hooks:
        return None
    if len(hooks) == 1:
        return hooks[0]

    def chained(reply: str, guess: int, game_round: GameRound) -> str:
        for hook in hooks:
            reply = hook(reply, guess, game_round)
        return reply

    return chained
