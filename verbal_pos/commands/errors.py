"""Expected, user-facing command failures.

Every class here is a `ValueError`: the caller maps it to a response envelope instead of treating it
as an internal error.
"""

from __future__ import annotations


class CommandError(ValueError):
    """Base class for commands that cannot be executed as written."""


class EmptyCommandError(CommandError):
    """Raised when the command text is missing or blank."""


class UnrecognizedCommandError(CommandError):
    """Raised when no recognizer gate accepts the text."""


class CommandParseError(CommandError):
    """Raised when a recognizer gate accepts the text but its structured pattern does not match."""

    def __init__(self, recognizer: str, usage: str) -> None:
        super().__init__(usage)
        self.recognizer = recognizer
        self.usage = usage


class CommandValidationError(CommandError):
    """Raised when captured fields violate a numeric or presence constraint."""
