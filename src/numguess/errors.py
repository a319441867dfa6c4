from typing import Literal


class NumguessError(Exception):
    """Base exception for the project."""


class GuessError(NumguessError, ValueError):
    """
    A guess line that cannot be used. The message is user facing and is sent
    to the client as-is.
    """
    kind: Literal["invalid_format", "out_of_range"]


class InvalidFormat(GuessError):
    kind = "invalid_format"


class OutOfRange(GuessError):
    kind = "out_of_range"


class StreamError(NumguessError, ConnectionError):
    """Raised when the client connection breaks while a session is running."""


class BindError(NumguessError, OSError):
    """Raised when the listener cannot acquire its address."""
