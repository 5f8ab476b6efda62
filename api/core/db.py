"""
Async database access helpers (raw SQL) using asyncpg.

The pool is created once per process by the FastAPI lifespan (see
`api/main.py`), stored on `app.state.pool` and handed to request handlers
through the `get_pool` dependency. Nothing here keeps a module-level pool.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Helpers accept either the pool or a single connection, so the same
repository code runs standalone or inside `transaction()`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Union

import asyncpg
from fastapi import Request

from . import settings

logger = logging.getLogger(__name__)

Executor = Union[asyncpg.Pool, asyncpg.Connection]

# Failures that mean "storage is unavailable or rejected the statement".
DB_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


async def _on_connect(conn: asyncpg.Connection) -> None:
    logger.info("db_connection_opened pid=%s", conn.get_server_pid())


async def create_pool() -> asyncpg.Pool:
    """
    Open the process-wide pool. DSN falls back to libpq PG* env vars.
    """
    pool = await asyncpg.create_pool(
        dsn=settings.database_url(),
        min_size=min(settings.pool_min_size(), settings.pool_max_size()),
        max_size=settings.pool_max_size(),
        max_inactive_connection_lifetime=settings.pool_idle_timeout_s(),
        timeout=settings.pool_connect_timeout_s(),
        command_timeout=settings.command_timeout_s(),
        init=_on_connect,
    )
    logger.info("db_pool_ready max_size=%s", settings.pool_max_size())
    return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return None
    await pool.close()
    logger.info("db_pool_closed")


def get_pool(request: Request) -> asyncpg.Pool:
    """
    FastAPI dependency returning the pool opened on startup.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is None:
        raise RuntimeError("DB pool is not initialized. It is opened in the app lifespan.")
    return pool


@asynccontextmanager
async def transaction(pool: asyncpg.Pool) -> AsyncIterator[asyncpg.Connection]:
    """
    Acquire one connection and run the block in a transaction.

    Any exception rolls the transaction back and propagates.
    """
    async with pool.acquire() as conn:  # type: asyncpg.Connection
        async with conn.transaction():
            yield conn


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(conn: Executor, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(conn: Executor, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def fetch_value(conn: Executor, sql: str, *args: Any) -> Any:
    return await conn.fetchval(sql, *args)


async def execute(conn: Executor, sql: str, *args: Any) -> None:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
    """
    await conn.execute(sql, *args)


async def execute_many(conn: Executor, sql: str, records: list[tuple[Any, ...]]) -> None:
    if not records:
        return None
    await conn.executemany(sql, records)
