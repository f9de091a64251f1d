"""Pytest configuration and shared fixtures.

The repository uses a flat layout without requiring an installed package. This conftest ensures
tests can import from the `verbal_pos.*` namespace when running `pytest` locally, and provides an
in-memory `InventoryRepository` so that interpreter and API tests run without Postgres.
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

# Ensure `import verbal_pos...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from verbal_pos.app import App, build_app  # noqa: E402
from verbal_pos.commands.schema import ProductField  # noqa: E402
from verbal_pos.config.settings import Settings  # noqa: E402
from verbal_pos.inventory.executor import CommandExecutor  # noqa: E402
from verbal_pos.inventory.models import (  # noqa: E402
    NewProduct,
    Product,
    RecordedSale,
    Sale,
    SaleWithProduct,
)
from verbal_pos.inventory.repository import (  # noqa: E402
    InsufficientStockError,
    ProductNotFoundError,
)

FIXED_NOW = datetime(2025, 11, 28, 12, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock; every call advances by one millisecond to keep timestamps ordered."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(milliseconds=1)
        return current


class InMemoryInventoryRepository:
    """Dict-backed repository with the same semantics as the Postgres implementation."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.products: dict[int, Product] = {}
        self.sales: dict[int, Sale] = {}
        self.calls: list[str] = []

    async def find_product_by_name(self, name: str) -> Product | None:
        self.calls.append("find_product_by_name")
        matches = [p for p in self.products.values() if p.name.lower() == name.strip().lower()]
        matches.sort(key=lambda p: (p.created_at, p.id))
        return matches[0] if matches else None

    async def list_products(self) -> list[Product]:
        self.calls.append("list_products")
        return sorted(self.products.values(), key=lambda p: (p.created_at, p.id), reverse=True)

    async def create_product(self, fields: NewProduct) -> Product:
        self.calls.append("create_product")
        now = self.clock()
        product = Product(
            id=len(self.products) + 1,
            **fields.model_dump(),
            created_at=now,
            updated_at=now,
        )
        self.products[product.id] = product
        return product

    async def update_product_field(
            self,
            product_id: int,
            field: ProductField,
            value: Decimal,
    ) -> Product:
        self.calls.append("update_product_field")
        current = self.products.get(product_id)
        if current is None:
            raise ProductNotFoundError(product_id)
        saved = current.model_copy(update={field.value: value, "updated_at": self.clock()})
        self.products[product_id] = saved
        return saved

    async def record_sale(
            self,
            product_id: int,
            quantity: Decimal,
            customer_name: str | None = None,
    ) -> RecordedSale:
        self.calls.append("record_sale")
        product = self.products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if product.stock_quantity < quantity:
            raise InsufficientStockError(product.stock_quantity, quantity)

        now = self.clock()
        product = product.model_copy(
            update={"stock_quantity": product.stock_quantity - quantity, "updated_at": now}
        )
        self.products[product_id] = product
        sale = Sale(
            id=len(self.sales) + 1,
            product_id=product_id,
            quantity=quantity,
            total_price=product.price_per_unit * quantity,
            customer_name=customer_name,
            created_at=now,
            updated_at=now,
        )
        self.sales[sale.id] = sale
        return RecordedSale(sale=sale, product=product)

    async def find_sales_in_range(self, start: datetime, end: datetime) -> list[SaleWithProduct]:
        self.calls.append("find_sales_in_range")
        return [
            SaleWithProduct(**s.model_dump(), product=self.products[s.product_id])
            for s in sorted(self.sales.values(), key=lambda s: (s.created_at, s.id))
            if start <= s.created_at < end
        ]

    async def find_low_stock_products(self) -> list[Product]:
        self.calls.append("find_low_stock_products")
        return sorted(
            (p for p in self.products.values() if p.stock_quantity <= p.low_stock_threshold),
            key=lambda p: (p.name, p.id),
        )

    def add(self, name: str, *, stock: str, price: str, low: str = "5", unit: str = "unit") -> Product:
        """Synchronously seed a product (test helper)."""

        now = self.clock()
        product = Product(
            id=len(self.products) + 1,
            name=name,
            unit=unit,
            stock_quantity=Decimal(stock),
            price_per_unit=Decimal(price),
            low_stock_threshold=Decimal(low),
            created_at=now,
            updated_at=now,
        )
        self.products[product.id] = product
        return product


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository(clock: FakeClock) -> InMemoryInventoryRepository:
    return InMemoryInventoryRepository(clock)


@pytest.fixture
def executor(repository: InMemoryInventoryRepository, clock: FakeClock) -> CommandExecutor:
    return CommandExecutor(repository, timezone=ZoneInfo("UTC"), clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(DATABASE_URL="postgresql://unused/verbal_pos", STORE_TIMEZONE="UTC")


@pytest.fixture
def app(settings: Settings, repository: InMemoryInventoryRepository, clock: FakeClock) -> App:
    return build_app(settings, repository, clock=clock)
