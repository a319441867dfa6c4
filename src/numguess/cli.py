import asyncio
import re
import sys

import click

from . import __version__
from ._types import FixedSecret, GuessRange, RandomSecret
from .client import DEFAULT_HOST, play
from .config import DEFAULT_HOST as DEFAULT_BIND_HOST, DEFAULT_PORT, PRESETS, Config
from .enrichment import ENRICHERS
from .errors import BindError
from .logging_config import configure_logging
from .server import Server

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]

_RANGE_RE = re.compile(r"\s*(-?[0-9]+)\s*-\s*(-?[0-9]+)\s*")


class RangeParamType(click.ParamType):
    """LOW-HIGH, inclusive."""
    name = "range"

    def convert(self, value, param, ctx):
        if isinstance(value, GuessRange):
            return value
        match = _RANGE_RE.fullmatch(str(value))
        if match is None:
            self.fail(f"{value!r} is not a LOW-HIGH range", param, ctx)
        parsed = GuessRange(int(match.group(1)), int(match.group(2)))
        if parsed.low > parsed.high:
            self.fail(f"{value!r} has LOW greater than HIGH", param, ctx)
        return parsed


RANGE = RangeParamType()


def validate_enrichment(ctx, param, value):
    if not value:
        return None
    unknown = [name.strip() for name in value.split(",") if name.strip() and name.strip().lower() not in ENRICHERS]
    if unknown:
        raise click.BadParameter(f"unknown hook(s) {', '.join(unknown)}; choose from {', '.join(ENRICHERS)}")
    return value


def build_config(preset: str,
                 host: str,
                 port: int,
                 secret: int | None,
                 secret_range: GuessRange | None,
                 guess_range: GuessRange | None,
                 unbounded: bool,
                 digits: int | None,
                 enrich: str | None,
                 read_timeout: float | None,
                 seed: int | None) -> Config:
    overrides = {"host": host, "port": port, "enrichment": enrich, "read_timeout": read_timeout, "seed": seed}
    if secret is not None:
        overrides["secret_source"] = FixedSecret(secret)
    elif secret_range is not None:
        overrides["secret_source"] = RandomSecret(secret_range.low, secret_range.high)
    if unbounded:
        overrides["guess_range"] = None
    elif guess_range is not None:
        overrides["guess_range"] = guess_range
    if digits is not None:
        overrides["digits"] = digits
    return Config.from_preset(preset, **overrides)


@click.group(context_settings={"auto_envvar_prefix": "NUMGUESS"})
@click.version_option(__version__, prog_name="numguess")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default="info", show_default=True)
def main(log_level: str) -> None:
    """Number guessing game over TCP."""
    configure_logging(log_level.upper())


@main.command()
@click.option("--preset", type=click.Choice(list(PRESETS)), default="classic", show_default=True,
              help="Game variant to start from.")
@click.option("--host", default=DEFAULT_BIND_HOST, show_default=True, help="Bind socket to this host.")
@click.option("--port", type=int, default=DEFAULT_PORT, show_default=True, help="Bind socket to this port.")
@click.option("--secret", type=int, default=None, help="Use this fixed secret for every session.")
@click.option("--secret-range", type=RANGE, default=None, help="Draw a random secret from LOW-HIGH.")
@click.option("--range", "guess_range", type=RANGE, default=None, help="Reject guesses outside LOW-HIGH.")
@click.option("--unbounded", is_flag=True, default=False, help="Accept any integer guess.")
@click.option("--digits", type=click.IntRange(min=1), default=None, help="Require guesses of exactly N digits.")
@click.option("--enrich", default=None, callback=validate_enrichment,
              help=f"Comma separated reply hooks: {', '.join(ENRICHERS)}.")
@click.option("--read-timeout", type=float, default=None, help="Close sessions idle for this many seconds.")
@click.option("--seed", type=int, default=None, help="Seed the secret generator.")
def serve(preset, host, port, secret, secret_range, guess_range, unbounded, digits, enrich, read_timeout, seed) -> None:
    """Run the game server."""
    try:
        config = build_config(preset, host, port, secret, secret_range, guess_range, unbounded, digits,
                              enrich, read_timeout, seed)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    server = Server(config)
    try:
        server.run()
    except BindError:
        sys.exit(1)


@main.command()
@click.option("--host", default=DEFAULT_HOST, show_default=True, help="Server host.")
@click.option("--port", type=int, default=DEFAULT_PORT, show_default=True, help="Server port.")
def client(host: str, port: int) -> None:
    """Play against a running server from the console."""
    try:
        asyncio.run(play(host, port))
    except OSError as exc:
        raise click.ClickException(f"could not connect to {host}:{port}: {exc}") from exc
