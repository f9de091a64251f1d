"""Rules-based command recognizer cascade.

The cascade is intentionally strict and deterministic:
    - every recognizer is a cheap prefix/substring gate followed by one structured pattern,
    - recognizers are tried in a fixed, declared order and the first gate that accepts wins,
    - a gate that accepts text its pattern cannot parse is a parse failure, not a fallthrough.

Reordering `RECOGNIZERS` changes how ambiguous commands are classified (for example
"update product x price 5" must never reach the "change price" recognizer).
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from verbal_pos.commands.dictionaries import (
    LOW_STOCK_PHRASES,
    SELL_TRIGGER_WORD,
    TODAY_SALES_PREFIX,
    USAGE_ADD_PRODUCT,
    USAGE_CHANGE_PRICE,
    USAGE_SELL,
    USAGE_SELL_COLLOQUIAL,
    USAGE_UPDATE_PRODUCT,
)
from verbal_pos.commands.errors import CommandParseError
from verbal_pos.commands.schema import Intent

_NUMBER = r"\d+(?:\.\d+)?"

_UPDATE_PRODUCT_RES: tuple[tuple[Intent, re.Pattern[str]], ...] = tuple(
    (
        intent,
        re.compile(
            rf"^update product\s+(?P<name>.+?)\s+{keyword}\s+(?P<value>{_NUMBER})",
            flags=re.IGNORECASE,
        ),
    )
    for keyword, intent in (
        ("price", Intent.update_product_price),
        ("stock", Intent.update_product_stock),
        ("low", Intent.update_product_threshold),
    )
)

_CHANGE_PRICE_RE = re.compile(
    rf"^change price\s+(?P<name>.+?)\s+(?:to\s+)?(?P<value>{_NUMBER})",
    flags=re.IGNORECASE,
)

_ADD_PRODUCT_RE = re.compile(
    rf"^add product\s+(?P<name>.+?)\s+stock\s+(?P<stock>{_NUMBER})\s+price\s+(?P<price>{_NUMBER})"
    rf"(?:\s+unit\s+(?P<unit>\S+))?(?:\s+low\s+(?P<low>{_NUMBER}))?$",
    flags=re.IGNORECASE,
)

# The optional unit word ("kg", "packet", ...) is matched and discarded. It may not be directly
# followed by "to", otherwise "sell 2 sugar to Ali" would read "sugar" as the unit.
_SELL_RE = re.compile(
    rf"^sell\s+(?P<quantity>{_NUMBER})\s+(?:[a-zA-Z]+\s+(?!to\s))?(?P<name>.+?)"
    rf"(?:\s+to\s+(?P<customer>.+))?$",
    flags=re.IGNORECASE,
)

_SELL_COLLOQUIAL_RE = re.compile(
    rf"^(?P<quantity>{_NUMBER})\s+(?:[a-zA-Z]+\s+)?(?P<name>.+?)\s+{SELL_TRIGGER_WORD}",
    flags=re.IGNORECASE,
)

_SELL_TRIGGER_RE = re.compile(rf"\b{SELL_TRIGGER_WORD}")


@dataclass(frozen=True)
class RecognizerMatch:
    """A classified command plus its raw captured fields (trimmed strings)."""

    intent: Intent
    fields: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Recognizer:
    """One step of the cascade.

    `gate` sees the lowercased normalized text; `extract` sees the normalized text with its original
    letter case so that product and customer names keep the case the user typed.
    """

    name: str
    gate: Callable[[str], bool]
    extract: Callable[[str], RecognizerMatch | None]
    usage: str = ""

    def try_match(self, text: str) -> RecognizerMatch | None:
        """Return the match if this recognizer owns the text, `None` if its gate rejects it.

        Raises:
            CommandParseError: If the gate accepts the text but the structured pattern fails.
        """

        if not self.gate(text.lower()):
            return None
        match = self.extract(text)
        if match is None:
            raise CommandParseError(self.name, self.usage)
        return match


def _captures(match: re.Match[str], *names: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for name in names:
        value = match.group(name)
        if value is not None:
            fields[name] = value.strip()
    return fields


def extract_update_product(text: str) -> RecognizerMatch | None:
    """Extract `update product <name> price|stock|low <number>` (price tried first)."""

    for intent, pattern in _UPDATE_PRODUCT_RES:
        match = pattern.match(text)
        if match:
            return RecognizerMatch(intent=intent, fields=_captures(match, "name", "value"))
    return None


def extract_change_price(text: str) -> RecognizerMatch | None:
    """Extract `change price <name> [to] <price>`."""

    match = _CHANGE_PRICE_RE.match(text)
    if not match:
        return None
    return RecognizerMatch(intent=Intent.change_price, fields=_captures(match, "name", "value"))


def extract_add_product(text: str) -> RecognizerMatch | None:
    """Extract `add product <name> stock <n> price <n> [unit <token>] [low <n>]`.

    Missing optional fields are left out; defaults are applied by the validator.
    """

    match = _ADD_PRODUCT_RE.match(text)
    if not match:
        return None
    return RecognizerMatch(
        intent=Intent.add_product,
        fields=_captures(match, "name", "stock", "price", "unit", "low"),
    )


def extract_sell(text: str) -> RecognizerMatch | None:
    """Extract `sell <quantity> [unit] <name> [to <customer>]`."""

    match = _SELL_RE.match(text)
    if not match:
        return None
    return RecognizerMatch(
        intent=Intent.sell_by_name,
        fields=_captures(match, "quantity", "name", "customer"),
    )


def extract_sell_colloquial(text: str) -> RecognizerMatch | None:
    """Extract `<quantity> [unit] <name> bech ...` (no customer slot)."""

    match = _SELL_COLLOQUIAL_RE.match(text)
    if not match:
        return None
    return RecognizerMatch(
        intent=Intent.sell_colloquial,
        fields=_captures(match, "quantity", "name"),
    )


def _is_today_summary(lowered: str) -> bool:
    return ("today" in lowered and "sale" in lowered) or lowered.startswith(TODAY_SALES_PREFIX)


def _is_low_stock(lowered: str) -> bool:
    return any(phrase in lowered for phrase in LOW_STOCK_PHRASES)


RECOGNIZERS: tuple[Recognizer, ...] = (
    Recognizer(
        name="update_product",
        gate=lambda t: t.startswith("update product"),
        extract=extract_update_product,
        usage=USAGE_UPDATE_PRODUCT,
    ),
    Recognizer(
        name="change_price",
        gate=lambda t: t.startswith("change price"),
        extract=extract_change_price,
        usage=USAGE_CHANGE_PRICE,
    ),
    Recognizer(
        name="add_product",
        gate=lambda t: t.startswith("add product"),
        extract=extract_add_product,
        usage=USAGE_ADD_PRODUCT,
    ),
    Recognizer(
        name="today_summary",
        gate=_is_today_summary,
        extract=lambda _t: RecognizerMatch(intent=Intent.today_summary),
    ),
    Recognizer(
        name="low_stock",
        gate=_is_low_stock,
        extract=lambda _t: RecognizerMatch(intent=Intent.low_stock),
    ),
    Recognizer(
        name="sell",
        gate=lambda t: t.startswith("sell "),
        extract=extract_sell,
        usage=USAGE_SELL,
    ),
    Recognizer(
        name="sell_colloquial",
        gate=lambda t: _SELL_TRIGGER_RE.search(t) is not None,
        extract=extract_sell_colloquial,
        usage=USAGE_SELL_COLLOQUIAL,
    ),
)


def match_command(text: str) -> RecognizerMatch | None:
    """Run the cascade over normalized text.

    Returns:
        The first recognizer match, or `None` if no gate accepts the text.

    Raises:
        CommandParseError: If the first accepting gate cannot parse the text.
    """

    for recognizer in RECOGNIZERS:
        match = recognizer.try_match(text)
        if match is not None:
            return match
    return None
