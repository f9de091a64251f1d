"""Inventory repository contract.

The executor and the HTTP routes depend only on this protocol. The PostgreSQL implementation lives
in `verbal_pos.db.repository`; tests use an in-memory implementation.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from verbal_pos.commands.schema import ProductField
from verbal_pos.inventory.models import NewProduct, Product, RecordedSale, SaleWithProduct


class ProductNotFoundError(LookupError):
    """Raised when a referenced product does not exist."""

    def __init__(self, reference: str | int) -> None:
        super().__init__(f"Product not found: {reference}")
        self.reference = reference


class InsufficientStockError(ValueError):
    """Raised when a sale asks for more than the current stock; nothing is written."""

    def __init__(self, available: Decimal, requested: Decimal) -> None:
        super().__init__(f"Not enough stock: available={available} requested={requested}")
        self.available = available
        self.requested = requested


class InventoryRepository(Protocol):
    """Storage operations used by the command interpreter and the REST routes."""

    async def find_product_by_name(self, name: str) -> Product | None:
        """Case-insensitive exact name lookup; the oldest product wins if names repeat."""
        ...

    async def list_products(self) -> list[Product]:
        """All products, newest first."""
        ...

    async def create_product(self, fields: NewProduct) -> Product:
        ...

    async def update_product_field(
            self,
            product_id: int,
            field: ProductField,
            value: Decimal,
    ) -> Product:
        """Overwrite one field of a product and return the stored row.

        Other columns are left as they are in storage, so a sale recorded between the caller's
        lookup and this write keeps its stock decrement.

        Raises:
            ProductNotFoundError: If the product no longer exists.
        """
        ...

    async def record_sale(
            self,
            product_id: int,
            quantity: Decimal,
            customer_name: str | None = None,
    ) -> RecordedSale:
        """Atomically decrement stock (only if enough is left) and insert the sale.

        Raises:
            ProductNotFoundError: If the product no longer exists.
            InsufficientStockError: If `quantity` exceeds the current stock.
        """
        ...

    async def find_sales_in_range(self, start: datetime, end: datetime) -> list[SaleWithProduct]:
        """Sales with `start <= created_at < end`, oldest first, joined with their product."""
        ...

    async def find_low_stock_products(self) -> list[Product]:
        """Products with `stock_quantity <= low_stock_threshold`."""
        ...
