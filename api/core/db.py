"""
Async database access helpers (raw SQL) using asyncpg.

The pool is created once in the FastAPI lifespan (see `api/main.py`) and
kept on `app.state.pool`. Handlers receive it through the `get_pool`
dependency and hand it down to services explicitly; nothing here holds a
module-level connection.

Helpers accept either a pool or a single connection, since both expose
fetchrow/fetch/execute. Inside a transaction, pass the connection.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Union

import asyncpg
from fastapi import Request

from . import config

logger = logging.getLogger(__name__)

Executor = Union[asyncpg.Pool, asyncpg.Connection]


async def create_pool() -> asyncpg.Pool:
    logger.info("db_connect min_size=%s max_size=%s", config.pool_min_size(), config.pool_max_size())
    return await asyncpg.create_pool(
        **config.connect_kwargs(),
        min_size=config.pool_min_size(),
        max_size=config.pool_max_size(),
        command_timeout=config.command_timeout_s(),
    )


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return None
    await pool.close()


def get_pool(request: Request) -> asyncpg.Pool:
    """
    FastAPI dependency returning the pool created at startup.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is None:
        raise RuntimeError("DB pool is not initialized. It is created in the app lifespan.")
    return pool


@asynccontextmanager
async def transaction(pool: asyncpg.Pool) -> AsyncIterator[asyncpg.Connection]:
    """
    Acquire one connection and run the block inside a transaction.

    Leaving the block normally commits; any exception rolls back and is
    re-raised to the caller.
    """
    async with pool.acquire() as conn:  # type: asyncpg.Connection
        async with conn.transaction():
            yield conn


async def ping(executor: Executor) -> None:
    await executor.execute("SELECT 1")


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(executor: Executor, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await executor.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(executor: Executor, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await executor.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(executor: Executor, sql: str, *args: Any) -> None:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
    """
    await executor.execute(sql, *args)
