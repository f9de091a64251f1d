"""Inventory entities (Pydantic models).

Field names are snake_case in Python and camelCase on the wire (`stockQuantity`, `pricePerUnit`,
...), which is what the dashboard client reads.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from verbal_pos.commands.dictionaries import MAX_AMOUNT


def wire_number(value: Decimal) -> float:
    """JSON form of an amount. Inputs are capped at `MAX_AMOUNT`, so the float is always finite."""

    return float(value)


# Decimals are exact in Python and plain JSON numbers on the wire.
Amount = Annotated[Decimal, PlainSerializer(wire_number, return_type=float, when_used="json")]


class _Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class NewProduct(_Entity):
    """Fields required to insert a product."""

    name: str = Field(min_length=1)
    unit: str = Field(default="unit", min_length=1)
    stock_quantity: Amount = Field(default=Decimal(0), ge=0, le=MAX_AMOUNT)
    price_per_unit: Amount = Field(gt=0, le=MAX_AMOUNT)
    low_stock_threshold: Amount = Field(default=Decimal(5), ge=0, le=MAX_AMOUNT)


class Product(_Entity):
    """A stored product."""

    id: int
    name: str
    unit: str
    stock_quantity: Amount
    price_per_unit: Amount
    low_stock_threshold: Amount
    created_at: datetime
    updated_at: datetime


class Sale(_Entity):
    """A stored sale; `total_price` is computed from the product price at sale time."""

    id: int
    product_id: int
    quantity: Amount
    total_price: Amount
    customer_name: str | None = None
    created_at: datetime
    updated_at: datetime


class SaleWithProduct(Sale):
    """A sale joined with the product it refers to."""

    product: Product


class RecordedSale(BaseModel):
    """Result of an atomic sale: the inserted sale and the product after the stock decrement."""

    sale: Sale
    product: Product
