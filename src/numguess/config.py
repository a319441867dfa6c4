import random

from ._types import Enricher, FixedSecret, GuessRange, RandomSecret, SecretSource
from .enrichment import get_enricher
from .validator import GuessValidator

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_MAX_LINE_LENGTH = 1024

PRESETS = {
    "classic": {
        "game_name": "Number Guessing Game",
        "secret_source": RandomSecret(1, 100),
        "guess_range": GuessRange(1, 100),
    },
    # the code breaker server advertises 1000-9999 but never enforced it
    "codebreaker": {
        "game_name": "Code Breaker Game",
        "secret_source": FixedSecret(1111),
        "guess_range": None,
        "advertised_range": GuessRange(1000, 9999),
    },
}


class Config:

    def __init__(
            self,
            host: str = DEFAULT_HOST,
            port: int = DEFAULT_PORT,
            backlog: int = 100,
            secret_source: SecretSource = RandomSecret(1, 100),
            guess_range: GuessRange | None = GuessRange(1, 100),
            digits: int | None = None,
            enrichment: str | Enricher | None = None,
            read_timeout: float | None = None,
            max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
            timeout_graceful_shutdown: float | None = None,
            seed: int | None = None,
            game_name: str = "Number Guessing Game",
            greeting: str | None = None,
            advertised_range: GuessRange | None = None,
    ):
        if guess_range is not None and guess_range.low > guess_range.high:
            raise ValueError(f"Invalid guess range {guess_range.low}-{guess_range.high}")
        if isinstance(secret_source, RandomSecret) and secret_source.low > secret_source.high:
            raise ValueError(f"Invalid secret range {secret_source.low}-{secret_source.high}")

        self.host = host
        self.port = port
        self.backlog = backlog
        self.secret_source = secret_source
        self.guess_range = guess_range
        self.digits = digits
        self.enrich = get_enricher(enrichment) if isinstance(enrichment, str) or enrichment is None else enrichment
        self.read_timeout = read_timeout
        self.max_line_length = max_line_length
        self.timeout_graceful_shutdown = timeout_graceful_shutdown
        self.seed = seed
        self.game_name = game_name
        self.advertised_range = advertised_range or guess_range
        self.greeting = greeting or self._default_greeting()

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "Config":
        try:
            options = dict(PRESETS[name])
        except KeyError:
            raise ValueError(f"Unknown game preset {name!r}, expected one of: {', '.join(PRESETS)}") from None
        options.update(overrides)
        return cls(**options)

    def _default_greeting(self) -> str:
        if self.advertised_range is not None and self.digits is None:
            valid = f"a number between {self.advertised_range.low} and {self.advertised_range.high}"
        else:
            valid = self.make_validator().describe()
        return f"Welcome to the {self.game_name}! Enter {valid}, or 'exit' to quit."

    def make_validator(self) -> GuessValidator:
        return GuessValidator(guess_range=self.guess_range, digits=self.digits)

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)
