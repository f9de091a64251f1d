"""Lexical normalization for deterministic command parsing."""

from __future__ import annotations

import re

from verbal_pos.commands.dictionaries import WORD_SUBSTITUTIONS

_SUBSTITUTION_RES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(rf"\b{re.escape(word)}\b", flags=re.IGNORECASE), replacement)
    for word, replacement in WORD_SUBSTITUTIONS
)


def normalize_command(text: str) -> str:
    """Rewrite known number words and trigger-word misrecognitions to canonical tokens.

    Normalization is intentionally naive:
        - Whole-word, case-insensitive matching.
        - Entries are applied one after another in table order; later entries see the output of
          earlier ones (no overlap protection).
        - Everything else passes through unchanged, including letter case.

    The goal is to absorb common speech-to-text noise, not to correct spelling.
    """

    value = text or ""
    for pattern, replacement in _SUBSTITUTION_RES:
        value = pattern.sub(replacement, value)
    return value
