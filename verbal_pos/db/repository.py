"""PostgreSQL implementation of `InventoryRepository`.

All queries are parameterized. The sell path is a single transaction: a conditional stock decrement
(`... WHERE stock_quantity >= quantity`) followed by the sale insert, so concurrent sales of the same
product can never oversell and a sale row never exists without its decrement.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, LiteralString, cast

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from verbal_pos.commands.schema import ProductField
from verbal_pos.db.pool import get_conn
from verbal_pos.inventory.models import (
    NewProduct,
    Product,
    RecordedSale,
    Sale,
    SaleWithProduct,
)
from verbal_pos.inventory.repository import InsufficientStockError, ProductNotFoundError

_PRODUCT_COLUMNS = (
    "id, name, unit, stock_quantity, price_per_unit, low_stock_threshold, created_at, updated_at"
)
_SALE_COLUMNS = "id, product_id, quantity, total_price, customer_name, created_at, updated_at"

# Only these columns can be written by a single-field update.
_UPDATABLE_COLUMNS: dict[ProductField, str] = {
    ProductField.price_per_unit: "price_per_unit",
    ProductField.stock_quantity: "stock_quantity",
    ProductField.low_stock_threshold: "low_stock_threshold",
}


def _prefixed(columns: str, alias: str, prefix: str = "") -> str:
    return ", ".join(f"{alias}.{c.strip()} AS {prefix}{c.strip()}" for c in columns.split(","))


def _sale_with_product(row: dict[str, Any]) -> SaleWithProduct:
    product = {k.removeprefix("p_"): v for k, v in row.items() if k.startswith("p_")}
    sale = {k: v for k, v in row.items() if not k.startswith("p_")}
    return SaleWithProduct(**sale, product=Product(**product))


class PostgresInventoryRepository:
    """Inventory storage backed by the `products` and `sales` tables."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self.pool = pool

    async def _fetch_one(self, query: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        async with get_conn(self.pool) as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(cast(LiteralString, query), params)
                return await cur.fetchone()

    async def _fetch_all(self, query: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        async with get_conn(self.pool) as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(cast(LiteralString, query), params)
                return await cur.fetchall()

    async def find_product_by_name(self, name: str) -> Product | None:
        row = await self._fetch_one(
            f"""
            SELECT {_PRODUCT_COLUMNS}
            FROM products
            WHERE lower(name) = lower(%s)
            ORDER BY created_at, id
            LIMIT 1
            """,
            (name.strip(),),
        )
        return Product(**row) if row else None

    async def list_products(self) -> list[Product]:
        rows = await self._fetch_all(
            f"SELECT {_PRODUCT_COLUMNS} FROM products ORDER BY created_at DESC, id DESC"
        )
        return [Product(**r) for r in rows]

    async def create_product(self, fields: NewProduct) -> Product:
        row = await self._fetch_one(
            f"""
            INSERT INTO products (name, unit, stock_quantity, price_per_unit, low_stock_threshold)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {_PRODUCT_COLUMNS}
            """,
            (
                fields.name,
                fields.unit,
                fields.stock_quantity,
                fields.price_per_unit,
                fields.low_stock_threshold,
            ),
        )
        assert row is not None
        return Product(**row)

    async def update_product_field(
            self,
            product_id: int,
            field: ProductField,
            value: Decimal,
    ) -> Product:
        column = _UPDATABLE_COLUMNS[field]
        row = await self._fetch_one(
            f"""
            UPDATE products
            SET {column} = %s,
                updated_at = NOW()
            WHERE id = %s
            RETURNING {_PRODUCT_COLUMNS}
            """,
            (value, product_id),
        )
        if row is None:
            raise ProductNotFoundError(product_id)
        return Product(**row)

    async def record_sale(
            self,
            product_id: int,
            quantity: Decimal,
            customer_name: str | None = None,
    ) -> RecordedSale:
        async with get_conn(self.pool) as conn:
            async with conn.transaction():
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        f"""
                        UPDATE products
                        SET stock_quantity = stock_quantity - %s,
                            updated_at     = NOW()
                        WHERE id = %s
                          AND stock_quantity >= %s
                        RETURNING {_PRODUCT_COLUMNS}
                        """,
                        (quantity, product_id, quantity),
                    )
                    product_row = await cur.fetchone()

                    if product_row is None:
                        await cur.execute(
                            "SELECT stock_quantity FROM products WHERE id = %s",
                            (product_id,),
                        )
                        current = await cur.fetchone()
                        if current is None:
                            raise ProductNotFoundError(product_id)
                        raise InsufficientStockError(current["stock_quantity"], quantity)

                    product = Product(**product_row)
                    await cur.execute(
                        f"""
                        INSERT INTO sales (product_id, quantity, total_price, customer_name)
                        VALUES (%s, %s, %s, %s)
                        RETURNING {_SALE_COLUMNS}
                        """,
                        (product_id, quantity, product.price_per_unit * quantity, customer_name),
                    )
                    sale_row = await cur.fetchone()

        assert sale_row is not None
        return RecordedSale(sale=Sale(**sale_row), product=product)

    async def find_sales_in_range(self, start: datetime, end: datetime) -> list[SaleWithProduct]:
        rows = await self._fetch_all(
            f"""
            SELECT {_prefixed(_SALE_COLUMNS, "s")},
                   {_prefixed(_PRODUCT_COLUMNS, "p", "p_")}
            FROM sales s
                     JOIN products p ON p.id = s.product_id
            WHERE s.created_at >= %s
              AND s.created_at < %s
            ORDER BY s.created_at, s.id
            """,
            (start, end),
        )
        return [_sale_with_product(r) for r in rows]

    async def find_low_stock_products(self) -> list[Product]:
        rows = await self._fetch_all(
            f"""
            SELECT {_PRODUCT_COLUMNS}
            FROM products
            WHERE stock_quantity <= low_stock_threshold
            ORDER BY name, id
            """
        )
        return [Product(**r) for r in rows]
