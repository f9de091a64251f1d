"""Command parser orchestration: normalize, recognize, validate."""

from __future__ import annotations

from dataclasses import dataclass

from verbal_pos.commands.errors import EmptyCommandError, UnrecognizedCommandError
from verbal_pos.commands.normalize import normalize_command
from verbal_pos.commands.rules_parser import match_command
from verbal_pos.commands.schema import Command
from verbal_pos.commands.validate import validate_match


@dataclass(frozen=True)
class ParseResult:
    """Validated command plus the normalized text it was recognized from."""

    command: Command
    normalized: str


def parse_command_with_text(text: str | None) -> ParseResult:
    """Parse raw command text into a validated command.

    Strategy:
        1) Reject blank input.
        2) Normalize number words and trigger-word misrecognitions.
        3) Run the recognizer cascade; the first accepting gate decides the intent.
        4) Validate the captured fields for that intent.

    Raises:
        EmptyCommandError: If the text is missing or blank.
        UnrecognizedCommandError: If no recognizer accepts the text.
        CommandParseError: If a recognizer accepts the text but cannot parse it.
        CommandValidationError: If the parsed fields are invalid.
    """

    original = (text or "").strip()
    if not original:
        raise EmptyCommandError("Command text is required")

    normalized = normalize_command(original)
    match = match_command(normalized)
    if match is None:
        raise UnrecognizedCommandError(f"unrecognized command: {normalized!r}")

    return ParseResult(command=validate_match(match), normalized=normalized)


def parse_command(text: str | None) -> Command:
    """Parse raw text into a validated command (convenience wrapper)."""

    return parse_command_with_text(text).command
