"""Validated command schema (Pydantic models).

This schema is the contract between the text parser and the inventory executor. The executor only
ever sees these models; raw regex captures never leave the parser layer.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from verbal_pos.commands.dictionaries import DEFAULT_LOW_STOCK_THRESHOLD, DEFAULT_UNIT


class Intent(StrEnum):
    """Closed set of command intents."""

    sell_by_name = "sell_by_name"
    sell_colloquial = "sell_colloquial"
    add_product = "add_product"
    update_product_price = "update_product_price"
    update_product_stock = "update_product_stock"
    update_product_threshold = "update_product_threshold"
    change_price = "change_price"
    today_summary = "today_summary"
    low_stock = "low_stock"
    unrecognized = "unrecognized"


class ProductField(StrEnum):
    """Product fields a single update command may overwrite."""

    price_per_unit = "price_per_unit"
    stock_quantity = "stock_quantity"
    low_stock_threshold = "low_stock_threshold"


UPDATE_INTENT_FIELDS: dict[Intent, ProductField] = {
    Intent.update_product_price: ProductField.price_per_unit,
    Intent.update_product_stock: ProductField.stock_quantity,
    Intent.update_product_threshold: ProductField.low_stock_threshold,
    Intent.change_price: ProductField.price_per_unit,
}


class _Command(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)


class AddProductCommand(_Command):
    """Create a product with an initial stock level."""

    intent: Literal[Intent.add_product] = Intent.add_product
    name: str = Field(min_length=1)
    unit: str = Field(default=DEFAULT_UNIT, min_length=1)
    stock_quantity: Decimal = Field(ge=0)
    price_per_unit: Decimal = Field(gt=0)
    low_stock_threshold: Decimal = Field(default=Decimal(DEFAULT_LOW_STOCK_THRESHOLD), ge=0)


class UpdateProductCommand(_Command):
    """Overwrite exactly one field of an existing product."""

    intent: Literal[
        Intent.update_product_price,
        Intent.update_product_stock,
        Intent.update_product_threshold,
        Intent.change_price,
    ]
    name: str = Field(min_length=1)
    value: Decimal = Field(ge=0)

    @property
    def field(self) -> ProductField:
        return UPDATE_INTENT_FIELDS[self.intent]

    @model_validator(mode="after")
    def validate_price_is_positive(self) -> UpdateProductCommand:
        """Prices must be strictly positive; stock and thresholds may be zero."""

        if self.field == ProductField.price_per_unit and self.value <= 0:
            raise ValueError("price must be > 0")
        return self


class SellCommand(_Command):
    """Sell a quantity of a product, optionally to a named customer."""

    intent: Literal[Intent.sell_by_name, Intent.sell_colloquial]
    quantity: Decimal = Field(gt=0)
    name: str = Field(min_length=1)
    customer_name: str | None = None

    @model_validator(mode="after")
    def validate_customer(self) -> SellCommand:
        """The colloquial form has no customer slot."""

        if self.intent == Intent.sell_colloquial and self.customer_name is not None:
            raise ValueError("customer_name is not supported for colloquial sales")
        return self


class ReportCommand(_Command):
    """Parameterless read-only queries."""

    intent: Literal[Intent.today_summary, Intent.low_stock]


Command = AddProductCommand | UpdateProductCommand | SellCommand | ReportCommand
