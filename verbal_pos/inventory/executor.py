"""Inventory operation executor.

Given a validated command, performs exactly one logical operation against the repository and
builds the success envelope. Expected failures (unknown product, insufficient stock) become failure
envelopes here; anything else propagates to the interpreter boundary.
"""

from __future__ import annotations

import logging
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from verbal_pos.commands.schema import (
    AddProductCommand,
    Command,
    Intent,
    ReportCommand,
    SellCommand,
    UpdateProductCommand,
)
from verbal_pos.inventory.dates import Clock, local_today_bounds, utc_now
from verbal_pos.inventory.envelope import (
    ResponseEnvelope,
    ResponseType,
    insufficient_stock_envelope,
    not_found_envelope,
    success,
)
from verbal_pos.inventory.models import NewProduct, Product, SaleWithProduct, wire_number
from verbal_pos.inventory.repository import (
    InsufficientStockError,
    InventoryRepository,
    ProductNotFoundError,
)

logger = logging.getLogger(__name__)

_UPDATE_MESSAGES: dict[Intent, str] = {
    Intent.update_product_price: "Product price updated successfully via command",
    Intent.change_price: "Product price updated successfully via command",
    Intent.update_product_stock: "Product stock updated successfully via command",
    Intent.update_product_threshold: "Product low-stock threshold updated successfully via command",
}


def to_wire(model: BaseModel) -> dict[str, Any]:
    """Dump a model to its camelCase JSON form."""

    return model.model_dump(mode="json", by_alias=True)


def summarize_sales(sales: list[SaleWithProduct]) -> dict[str, Any]:
    """Build the `{count, totalEarned, sales}` summary payload."""

    total = sum((s.total_price for s in sales), start=0)
    return {
        "count": len(sales),
        "totalEarned": wire_number(total),
        "sales": [to_wire(s) for s in sales],
    }


class CommandExecutor:
    """Runs validated commands against an `InventoryRepository`."""

    def __init__(
            self,
            repository: InventoryRepository,
            *,
            timezone: ZoneInfo,
            clock: Clock = utc_now,
    ) -> None:
        self.repository = repository
        self.timezone = timezone
        self.clock = clock

    async def execute(self, command: Command) -> ResponseEnvelope:
        if isinstance(command, AddProductCommand):
            return await self.add_product(command)
        if isinstance(command, UpdateProductCommand):
            return await self.update_product(command)
        if isinstance(command, SellCommand):
            return await self.sell(command)
        if isinstance(command, ReportCommand):
            if command.intent == Intent.today_summary:
                return await self.today_summary()
            return await self.low_stock()
        raise TypeError(f"unsupported command: {command!r}")

    async def add_product(self, command: AddProductCommand) -> ResponseEnvelope:
        product = await self.repository.create_product(
            NewProduct(
                name=command.name,
                unit=command.unit,
                stock_quantity=command.stock_quantity,
                price_per_unit=command.price_per_unit,
                low_stock_threshold=command.low_stock_threshold,
            )
        )
        return success(
            ResponseType.product_create,
            "Product created successfully via command",
            {"product": to_wire(product)},
        )

    async def update_product(self, command: UpdateProductCommand) -> ResponseEnvelope:
        product = await self.repository.find_product_by_name(command.name)
        if product is None:
            return not_found_envelope(command.name)

        try:
            saved = await self.repository.update_product_field(
                product.id,
                command.field,
                command.value,
            )
        except ProductNotFoundError:
            # Deleted between lookup and update.
            return not_found_envelope(command.name)

        return success(
            ResponseType.product_update,
            _UPDATE_MESSAGES[command.intent],
            {"product": to_wire(saved)},
        )

    async def sell(self, command: SellCommand) -> ResponseEnvelope:
        product = await self.repository.find_product_by_name(command.name)
        if product is None:
            return not_found_envelope(command.name)

        try:
            recorded = await self.repository.record_sale(
                product.id,
                command.quantity,
                command.customer_name,
            )
        except InsufficientStockError as exc:
            logger.info(
                "insufficient stock product_id=%s available=%s requested=%s",
                product.id,
                exc.available,
                exc.requested,
            )
            return insufficient_stock_envelope(exc.available, exc.requested)
        except ProductNotFoundError:
            # Deleted between lookup and sale.
            return not_found_envelope(command.name)

        return success(
            ResponseType.sale,
            "Sale recorded successfully via command",
            {
                "sale": to_wire(recorded.sale),
                "product": _remaining_stock_view(recorded.product),
            },
        )

    async def today_summary(self) -> ResponseEnvelope:
        start, end = local_today_bounds(self.clock(), self.timezone)
        sales = await self.repository.find_sales_in_range(start, end)
        return success(ResponseType.summary, "Today's sales summary", summarize_sales(sales))

    async def low_stock(self) -> ResponseEnvelope:
        products = await self.repository.find_low_stock_products()
        return success(
            ResponseType.low_stock,
            "Low stock products",
            {"products": [to_wire(p) for p in products]},
        )


def _remaining_stock_view(product: Product) -> dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "remainingStock": wire_number(product.stock_quantity),
        "unit": product.unit,
    }
