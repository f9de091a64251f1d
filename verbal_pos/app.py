"""Application composition root.

This module wires together configuration, the DB pool, the repository and the command executor for
the API and bot runtimes.
"""

from __future__ import annotations

from dataclasses import dataclass

from psycopg_pool import AsyncConnectionPool

from verbal_pos.config.settings import Settings
from verbal_pos.db.pool import create_pool
from verbal_pos.db.repository import PostgresInventoryRepository
from verbal_pos.inventory.dates import Clock, utc_now
from verbal_pos.inventory.executor import CommandExecutor
from verbal_pos.inventory.repository import InventoryRepository


@dataclass(frozen=True)
class App:
    """Shared application dependencies for route and message handlers."""

    settings: Settings
    repository: InventoryRepository
    executor: CommandExecutor
    pool: AsyncConnectionPool | None = None

    async def open(self) -> None:
        if self.pool is not None:
            await self.pool.open(wait=True)

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()


def build_app(
        settings: Settings,
        repository: InventoryRepository,
        *,
        pool: AsyncConnectionPool | None = None,
        clock: Clock = utc_now,
) -> App:
    """Assemble an `App` around an existing repository (tests pass an in-memory one)."""

    executor = CommandExecutor(repository, timezone=settings.tz, clock=clock)
    return App(settings=settings, repository=repository, executor=executor, pool=pool)


def create_app(settings: Settings) -> App:
    """Create the application container backed by PostgreSQL.

    Note:
        The returned DB pool is not opened. Call `await app.open()` at startup.
    """

    pool = create_pool(settings.database_url, max_size=10)
    return build_app(settings, PostgresInventoryRepository(pool), pool=pool)
