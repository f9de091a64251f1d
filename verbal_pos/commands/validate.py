"""Per-intent field validation.

Turns raw captured strings into typed command models. All checks run before the repository is
touched, so a rejected command never causes a partial mutation.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from verbal_pos.commands.dictionaries import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    DEFAULT_UNIT,
    MAX_AMOUNT,
)
from verbal_pos.commands.errors import CommandValidationError
from verbal_pos.commands.rules_parser import RecognizerMatch
from verbal_pos.commands.schema import (
    UPDATE_INTENT_FIELDS,
    AddProductCommand,
    Command,
    Intent,
    ProductField,
    ReportCommand,
    SellCommand,
    UpdateProductCommand,
)

MSG_PRICE = "Price per unit must be a positive number"
MSG_STOCK = "Stock quantity must be a non-negative number"
MSG_THRESHOLD = "Low stock threshold must be a non-negative number"
MSG_QUANTITY = "Quantity must be a positive number"
MSG_NAME = "Product name is required"

_NON_NEGATIVE_MESSAGES: dict[ProductField, str] = {
    ProductField.stock_quantity: MSG_STOCK,
    ProductField.low_stock_threshold: MSG_THRESHOLD,
}


def _decimal(raw: str | None, message: str) -> Decimal:
    try:
        value = Decimal((raw or "").strip())
    except InvalidOperation as exc:
        raise CommandValidationError(message) from exc
    if not value.is_finite():
        raise CommandValidationError(message)
    if value > MAX_AMOUNT:
        raise CommandValidationError(f"{message} up to {MAX_AMOUNT}")
    return value


def positive_decimal(raw: str | None, message: str) -> Decimal:
    """Parse a decimal that must be strictly greater than zero."""

    value = _decimal(raw, message)
    if value <= 0:
        raise CommandValidationError(message)
    return value


def non_negative_decimal(raw: str | None, message: str) -> Decimal:
    """Parse a decimal that must be zero or greater."""

    value = _decimal(raw, message)
    if value < 0:
        raise CommandValidationError(message)
    return value


def required_name(raw: str | None, message: str = MSG_NAME) -> str:
    value = (raw or "").strip()
    if not value:
        raise CommandValidationError(message)
    return value


def _optional_name(raw: str | None) -> str | None:
    value = (raw or "").strip()
    return value or None


def _validate_add_product(fields: dict[str, str]) -> AddProductCommand:
    name = required_name(fields.get("name"))
    stock = non_negative_decimal(fields.get("stock"), MSG_STOCK)
    price = positive_decimal(fields.get("price"), MSG_PRICE)
    unit = _optional_name(fields.get("unit")) or DEFAULT_UNIT
    low_raw = fields.get("low")
    low = (
        non_negative_decimal(low_raw, MSG_THRESHOLD)
        if low_raw is not None
        else Decimal(DEFAULT_LOW_STOCK_THRESHOLD)
    )
    return AddProductCommand(
        name=name,
        unit=unit,
        stock_quantity=stock,
        price_per_unit=price,
        low_stock_threshold=low,
    )


def _validate_update(intent: Intent, fields: dict[str, str]) -> UpdateProductCommand:
    name = required_name(fields.get("name"))
    target = UPDATE_INTENT_FIELDS[intent]
    if target == ProductField.price_per_unit:
        value = positive_decimal(fields.get("value"), MSG_PRICE)
    else:
        value = non_negative_decimal(fields.get("value"), _NON_NEGATIVE_MESSAGES[target])
    return UpdateProductCommand(intent=intent, name=name, value=value)


def _validate_sell(intent: Intent, fields: dict[str, str]) -> SellCommand:
    quantity = positive_decimal(fields.get("quantity"), MSG_QUANTITY)
    name = required_name(fields.get("name"))
    customer = _optional_name(fields.get("customer")) if intent == Intent.sell_by_name else None
    return SellCommand(intent=intent, quantity=quantity, name=name, customer_name=customer)


def validate_match(match: RecognizerMatch) -> Command:
    """Validate a recognizer match into a typed command.

    Raises:
        CommandValidationError: If a field is missing or violates its numeric constraint.
    """

    intent = match.intent
    if intent == Intent.add_product:
        return _validate_add_product(match.fields)
    if intent in UPDATE_INTENT_FIELDS:
        return _validate_update(intent, match.fields)
    if intent in {Intent.sell_by_name, Intent.sell_colloquial}:
        return _validate_sell(intent, match.fields)
    if intent in {Intent.today_summary, Intent.low_stock}:
        return ReportCommand(intent=intent)

    raise CommandValidationError(f"unsupported intent: {intent}")
