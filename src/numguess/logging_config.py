import logging
import sys

import click

LEVEL_COLORS = {
    logging.DEBUG: "cyan",
    logging.INFO: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bright_red",
}


class ColourizedFormatter(logging.Formatter):
    """
    Uses a record's `color_message` extra when colours are on, and colours the level name.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool | None = None):
        if use_colors is None:
            use_colors = sys.stderr.isatty()
        self.use_colors = use_colors
        super().__init__(fmt=fmt, datefmt=datefmt)

    def formatMessage(self, record: logging.LogRecord) -> str:
        # don't mutate the record, other handlers may format it too
        values = dict(record.__dict__)
        levelname = record.levelname
        separator = " " * (8 - len(levelname))
        if self.use_colors:
            levelname = click.style(levelname, fg=LEVEL_COLORS.get(record.levelno))
            if "color_message" in values:
                values["message"] = values["color_message"] % record.args if record.args else values["color_message"]
        values["levelprefix"] = f"{levelname}:{separator}"
        return self._style._fmt % values


def configure_logging(level: int | str = logging.INFO, use_colors: bool | None = None) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ColourizedFormatter("%(levelprefix)s %(message)s", use_colors=use_colors))

    package_logger = logging.getLogger("numguess")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False
