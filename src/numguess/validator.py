import re

from ._types import GuessRange
from .errors import InvalidFormat, OutOfRange

# int() also takes "4_2", " 42", "٤٢"; guesses are plain base-10 ASCII only
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class GuessValidator:
    """
    Turns one line of client input into an integer guess.

    guess_range: inclusive bounds, or None for no range check.
    digits: when set, the input must be exactly that many digits (code breaker format).
    """

    def __init__(self, guess_range: GuessRange | None = None, digits: int | None = None):
        self.guess_range = guess_range
        self.digits = digits

    def validate(self, raw_line: str) -> int:
        text = raw_line.strip()

        if self.digits is not None:
            if len(text) != self.digits:
                raise InvalidFormat(f"Invalid input: must contain exactly {self.digits} digits")
            if not all("0" <= char <= "9" for char in text):
                raise InvalidFormat("Invalid input: must contain only digits")
        elif _INTEGER_RE.fullmatch(text) is None:
            raise InvalidFormat("Invalid input: Not a valid integer")

        try:
            guess = int(text)
        except ValueError:
            # past the interpreter's int string conversion limit
            if self.guess_range is not None:
                raise self._out_of_range() from None
            raise InvalidFormat("Invalid input: number is too long") from None

        if self.guess_range is not None and not self.guess_range.contains(guess):
            raise self._out_of_range()
        return guess

    def _out_of_range(self) -> OutOfRange:
        low, high = self.guess_range
        return OutOfRange(f"Out of range: enter a number between {low} and {high}")

    def describe(self) -> str:
        """Human readable description of what a valid guess looks like."""
        if self.digits is not None:
            return f"a {self.digits}-digit code"
        if self.guess_range is not None:
            return f"a number between {self.guess_range.low} and {self.guess_range.high}"
        return "a whole number"
