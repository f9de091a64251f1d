"""Integration tests against a real Postgres database.

These tests exercise the end-to-end pipeline:
command interpreter -> executor -> PostgresInventoryRepository -> psycopg async pool.

They are skipped if `DATABASE_URL` is not configured or the DB is unreachable.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from collections.abc import AsyncIterator, Iterator
from decimal import Decimal
from typing import Any, LiteralString, NoReturn, cast
from zoneinfo import ZoneInfo

import psycopg
import pytest
from dotenv import load_dotenv
from psycopg import sql
from psycopg.conninfo import make_conninfo
from psycopg_pool import AsyncConnectionPool

from verbal_pos.commands.schema import ProductField
from verbal_pos.db.migrate import connect_utc, list_migration_files
from verbal_pos.db.pool import create_pool, get_conn
from verbal_pos.db.repository import PostgresInventoryRepository
from verbal_pos.inventory.executor import CommandExecutor
from verbal_pos.inventory.interpreter import execute_command
from verbal_pos.inventory.models import NewProduct
from verbal_pos.inventory.repository import ProductNotFoundError


def _skip(reason: str) -> NoReturn:
    pytest.skip(reason)


def _require_database_url() -> str:
    load_dotenv(".env")
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        _skip("DATABASE_URL is not set; skipping integration tests")
    return database_url


@pytest.fixture(scope="session")
def prepared_schema() -> Iterator[str]:
    """Create an isolated schema and run all migrations inside it."""

    database_url = _require_database_url()
    schema = f"it_{uuid.uuid4().hex}"

    try:
        conn_ctx = connect_utc(database_url)
    except psycopg.OperationalError as exc:
        _skip(f"Postgres is unreachable ({exc}); skipping integration tests")

    with conn_ctx as conn:
        with conn.transaction():
            conn.execute(
                sql.SQL("CREATE SCHEMA {}").format(sql.Identifier(schema)),
                prepare=False,
            )
            conn.execute(
                sql.SQL("SET search_path TO {}").format(sql.Identifier(schema)),
                prepare=False,
            )
            for migration in list_migration_files():
                sql_text = migration.read_text(encoding="utf-8")
                conn.execute(cast(LiteralString, sql_text), prepare=False)

    yield schema

    # noinspection PyBroadException
    try:
        with psycopg.connect(database_url) as conn:
            with conn.transaction():
                conn.execute(
                    sql.SQL("DROP SCHEMA IF EXISTS {} CASCADE").format(sql.Identifier(schema)),
                    prepare=False,
                )
    except Exception:
        # Cleanup best-effort: do not fail test run on teardown.
        pass


@pytest.fixture
async def pool(prepared_schema: str) -> AsyncIterator[AsyncConnectionPool]:
    """Pool whose connections resolve tables in the isolated schema; tables start empty."""

    conninfo = make_conninfo(_require_database_url(), options=f"-c search_path={prepared_schema}")
    db_pool = create_pool(conninfo, max_size=5)
    try:
        await db_pool.open(wait=True)
    except Exception as exc:
        _skip(f"Postgres is unreachable ({exc}); skipping integration tests")

    async with get_conn(db_pool) as conn:
        await conn.execute("TRUNCATE sales, products RESTART IDENTITY")

    yield db_pool
    await db_pool.close()


@pytest.fixture
def pg_repository(pool: AsyncConnectionPool) -> PostgresInventoryRepository:
    return PostgresInventoryRepository(pool)


@pytest.fixture
def pg_executor(pg_repository: PostgresInventoryRepository) -> CommandExecutor:
    return CommandExecutor(pg_repository, timezone=ZoneInfo("UTC"))


async def _seed(repository: PostgresInventoryRepository, name: str, stock: str, price: str) -> Any:
    return await repository.create_product(
        NewProduct(name=name, stock_quantity=Decimal(stock), price_per_unit=Decimal(price))
    )


@pytest.mark.asyncio
async def test_pool_enforces_utc_timezone(pool: AsyncConnectionPool) -> None:
    async with get_conn(pool) as conn:
        async with conn.cursor() as cur:
            await cur.execute("SHOW TimeZone", prepare=False)
            row = await cur.fetchone()
        assert row is not None
        assert row[0] == "UTC"


@pytest.mark.asyncio
async def test_sell_round_trip(pg_executor: CommandExecutor, pg_repository: Any) -> None:
    await _seed(pg_repository, "sugar", "10", "50")

    envelope = await execute_command("sell 2 Sugar to Ali", pg_executor)

    assert envelope.type == "sale"
    assert envelope.data is not None
    assert envelope.data["sale"]["totalPrice"] == 100
    stored = await pg_repository.find_product_by_name("SUGAR")
    assert stored.stock_quantity == Decimal(8)

    summary = await execute_command("today sales", pg_executor)
    assert summary.data is not None
    assert summary.data["count"] == 1
    assert summary.data["sales"][0]["customerName"] == "Ali"
    assert summary.data["sales"][0]["product"]["name"] == "sugar"


@pytest.mark.asyncio
async def test_insufficient_stock_writes_nothing(pg_executor: CommandExecutor, pg_repository: Any) -> None:
    await _seed(pg_repository, "sugar", "10", "50")

    envelope = await execute_command("sell 20 sugar", pg_executor)

    assert envelope.type == "stock"
    assert envelope.data == {"available": 10, "requested": 20}
    stored = await pg_repository.find_product_by_name("sugar")
    assert stored.stock_quantity == Decimal(10)
    assert await pg_repository.find_sales_in_range(
        stored.created_at.replace(year=2000), stored.created_at.replace(year=2100)
    ) == []


@pytest.mark.asyncio
async def test_concurrent_sales_never_oversell(pg_executor: CommandExecutor, pg_repository: Any) -> None:
    await _seed(pg_repository, "sugar", "10", "50")

    envelopes = await asyncio.gather(
        *(execute_command("sell 3 sugar", pg_executor) for _ in range(5))
    )

    assert sorted(e.type for e in envelopes) == ["sale", "sale", "sale", "stock", "stock"]
    stored = await pg_repository.find_product_by_name("sugar")
    assert stored.stock_quantity == Decimal(1)


@pytest.mark.asyncio
async def test_update_and_low_stock(pg_executor: CommandExecutor, pg_repository: Any) -> None:
    await execute_command("add product rice stock 5 price 80 unit kg low 2", pg_executor)
    await execute_command("update product RICE stock 1", pg_executor)

    stored = await pg_repository.find_product_by_name("rice")
    assert stored.unit == "kg"
    assert stored.stock_quantity == Decimal(1)
    assert stored.price_per_unit == Decimal(80)
    assert stored.low_stock_threshold == Decimal(2)

    first = await execute_command("show low stock", pg_executor)
    second = await execute_command("show low stock", pg_executor)
    assert first.data == second.data
    assert first.data is not None
    assert [p["name"] for p in first.data["products"]] == ["rice"]


@pytest.mark.asyncio
async def test_field_update_keeps_concurrent_sale(pg_repository: Any) -> None:
    sugar = await _seed(pg_repository, "sugar", "10", "50")

    await pg_repository.record_sale(sugar.id, Decimal(2))
    updated = await pg_repository.update_product_field(
        sugar.id, ProductField.price_per_unit, Decimal(60)
    )

    assert updated.price_per_unit == Decimal(60)
    assert updated.stock_quantity == Decimal(8)
    assert updated.updated_at >= sugar.updated_at

    with pytest.raises(ProductNotFoundError):
        await pg_repository.update_product_field(999, ProductField.stock_quantity, Decimal(1))
