"""Fixed vocabularies for the command parser.

These tables are used by the normalizer, the recognizers and the help/usage envelopes. They should
remain small and deterministic; there is no fuzzy matching beyond what is listed here.
"""

from __future__ import annotations

from decimal import Decimal

# Ordered: each entry is applied to the output of the previous ones.
WORD_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("one", "1"),
    ("two", "2"),
    ("three", "3"),
    ("four", "4"),
    ("for", "4"),  # speech-to-text homophone of "four"
    ("five", "5"),
    ("six", "6"),
    ("seven", "7"),
    ("eight", "8"),
    ("ate", "8"),  # speech-to-text homophone of "eight"
    ("nine", "9"),
    ("ten", "10"),
    # Speech-to-text variants of "bech" (Urdu "sell").
    ("betch", "bech"),
    ("beech", "bech"),
    ("bach", "bech"),
    ("beige", "bech"),
)

SELL_TRIGGER_WORD = "bech"

TODAY_SALES_PREFIX = "today sales"
LOW_STOCK_PHRASES: tuple[str, ...] = ("low stock", "stock kam")

DEFAULT_UNIT = "unit"
DEFAULT_LOW_STOCK_THRESHOLD = 5

# Largest quantity, stock or price accepted; fits the NUMERIC(14, 3) columns.
MAX_AMOUNT = Decimal("99999999999")

HELP_MESSAGE = "Could not understand command. Supported examples:"

HELP_EXAMPLES: tuple[str, ...] = (
    "sell 2 sugar",
    "sell 2 kg sugar to Ali",
    "2 kg sugar bech di",
    "show today sales",
    "show low stock",
    "add product sugar stock 10 price 100",
    "update product sugar price 120",
    "change price sugar to 120",
)

USAGE_UPDATE_PRODUCT = (
    "Could not parse update product command. "
    "Use: update product <name> price <price> | stock <qty> | low <threshold>"
)
USAGE_CHANGE_PRICE = "Could not parse change price command. Use: change price <name> to <price>"
USAGE_ADD_PRODUCT = (
    "Could not parse add product command. "
    "Use: add product <name> stock <qty> price <price> [unit <unit>] [low <threshold>]"
)
USAGE_SELL = "Could not parse sell command. Use: sell <quantity> <productName> [to <customerName>]"
USAGE_SELL_COLLOQUIAL = "Could not parse bech command. Try: 2 kg sugar bech di"
