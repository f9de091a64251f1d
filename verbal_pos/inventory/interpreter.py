"""Text-command interpreter entry point.

Hard contract: every call returns exactly one `ResponseEnvelope`. Expected failures become their own
envelope types; unrecognized text becomes the help envelope; unexpected errors are logged and
surface only the generic server message.
"""

from __future__ import annotations

import logging
from time import monotonic

from verbal_pos.commands.errors import (
    CommandParseError,
    CommandValidationError,
    EmptyCommandError,
    UnrecognizedCommandError,
)
from verbal_pos.commands.parser import parse_command_with_text
from verbal_pos.inventory.envelope import (
    ResponseEnvelope,
    empty_input_envelope,
    help_envelope,
    parse_failure_envelope,
    server_error_envelope,
    validation_envelope,
)
from verbal_pos.inventory.executor import CommandExecutor

logger = logging.getLogger(__name__)


async def execute_command(text: str | None, executor: CommandExecutor) -> ResponseEnvelope:
    """Interpret one command text and return its response envelope."""

    started = monotonic()

    # noinspection PyBroadException
    try:
        parse_result = parse_command_with_text(text)
    except EmptyCommandError as exc:
        envelope = empty_input_envelope(str(exc))
        intent = "empty"
    except UnrecognizedCommandError:
        envelope = help_envelope()
        intent = "unrecognized"
    except CommandParseError as exc:
        envelope = parse_failure_envelope(exc.usage)
        intent = exc.recognizer
    except CommandValidationError as exc:
        envelope = validation_envelope(str(exc))
        intent = "invalid"
    except Exception:
        logger.exception("command parsing failed")
        envelope = server_error_envelope()
        intent = "error"
    else:
        intent = parse_result.command.intent
        # noinspection PyBroadException
        try:
            envelope = await executor.execute(parse_result.command)
        except Exception:
            # Interpreter boundary: internal details must never reach the caller.
            logger.exception("command failed intent=%s", intent)
            envelope = server_error_envelope()

    latency_ms = int((monotonic() - started) * 1000)
    logger.info(
        "handled intent=%s type=%s status=%d latency_ms=%d",
        intent,
        envelope.type,
        envelope.status_code,
        latency_ms,
    )
    return envelope
