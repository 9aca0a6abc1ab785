"""
Async database access helpers (raw SQL) using asyncpg.

`connect()` opens a pool and wraps it in a `Database`. There is no
module-level pool: the lifecycle owns the `Database` and hands it to the
stores that need it.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
from typing import Any

import asyncpg

# Errors raised by the driver or the socket underneath it.
# asyncio.TimeoutError (command_timeout, connect) is not an OSError before 3.11.
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class DatabaseError(RuntimeError):
    pass


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def connect(dsn: str) -> "Database":
    try:
        pool = await asyncpg.create_pool(
            dsn=dsn,
            min_size=1,
            max_size=5,
            command_timeout=30,
        )
    except _DRIVER_ERRORS as exc:
        raise DatabaseError(f"Could not open connection pool: {exc}") from exc
    return Database(pool)


class Database:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def close(self) -> None:
        await self._pool.close()

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        try:
            row = await self._pool.fetchrow(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise DatabaseError(str(exc)) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        try:
            rows = await self._pool.fetch(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise DatabaseError(str(exc)) from exc
        return [_record_to_dict(r) for r in rows]

    async def fetch_value(self, sql: str, *args: Any) -> Any:
        try:
            return await self._pool.fetchval(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise DatabaseError(str(exc)) from exc

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the command status tag.
        """
        try:
            return await self._pool.execute(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise DatabaseError(str(exc)) from exc
