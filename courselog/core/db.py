"""
Postgres-backed data store (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI opens it on startup and closes
it on shutdown (see `courselog/main.py`); requests receive the store through
`courselog.core.dependencies.get_store`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
- table and column names come from code, never from requests, and are still
  validated and quoted before they reach SQL text.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from typing import Any, Mapping, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .config import data_store_kind, env_int
from .errors import StoreError
from .store import ALL_COLUMNS, DataStore, Join, MemoryStore, Search

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_pool: asyncpg.Pool | None = None


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> asyncpg.Pool:
    global _pool
    if _pool is not None:
        return _pool
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=env_int("DB_POOL_MIN", 1),
        max_size=env_int("DB_POOL_MAX", 5),
        command_timeout=env_int("DB_COMMAND_TIMEOUT", 30),
    )
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


async def open_store() -> DataStore:
    """
    Build the process-wide store selected by DATA_STORE.
    """
    kind = data_store_kind()
    if kind == "memory":
        logger.info("data_store_opened kind=memory")
        return MemoryStore()
    if kind != "postgres":
        raise RuntimeError(f"Unknown DATA_STORE: {kind!r}.")
    store = PostgresStore(await init_pool())
    logger.info("data_store_opened kind=postgres")
    return store


def quote_ident(name: str) -> str:
    if not _IDENTIFIER.match(name or ""):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _column_list(alias: str, columns: Sequence[str]) -> str:
    if tuple(columns) == ALL_COLUMNS:
        return f"{alias}.*"
    return ", ".join(f"{alias}.{quote_ident(col)}" for col in columns)


def build_select(
    table: str,
    *,
    filters: Mapping[str, Any] | None = None,
    columns: Sequence[str] = ALL_COLUMNS,
    order_by: str | None = None,
    descending: bool = False,
    join: Join | None = None,
    search: Search | None = None,
    limit: int | None = None,
) -> tuple[str, list[Any]]:
    """
    Build a SELECT statement and its positional arguments.

    Joined columns are selected as "<alias>.<column>" and nested back into a
    dict by `_nest_joined`.
    """
    args: list[Any] = []
    select_parts = [_column_list("t", columns)]
    from_sql = f"FROM {quote_ident(table)} t"

    if join is not None:
        quote_ident(join.key)
        select_parts.extend(f'j.{quote_ident(col)} AS "{join.key}.{col}"' for col in join.columns)
        select_parts.append(f'j.{quote_ident(join.primary_key)} AS "__join_key"')
        from_sql += (
            f" LEFT JOIN {quote_ident(join.table)} j"
            f" ON j.{quote_ident(join.primary_key)} = t.{quote_ident(join.foreign_key)}"
        )

    where: list[str] = []
    for col, value in (filters or {}).items():
        args.append(value)
        where.append(f"t.{quote_ident(col)} = ${len(args)}")

    if search is not None and search.columns:
        args.append(f"%{_escape_like(search.term)}%")
        placeholder = f"${len(args)}"
        where.append(
            "(" + " OR ".join(f"t.{quote_ident(col)} ILIKE {placeholder}" for col in search.columns) + ")"
        )

    sql = f"SELECT {', '.join(select_parts)} {from_sql}"
    if where:
        sql += " WHERE " + " AND ".join(where)
    if order_by is not None:
        sql += f" ORDER BY t.{quote_ident(order_by)} {'DESC' if descending else 'ASC'}"
    if limit is not None:
        args.append(int(limit))
        sql += f" LIMIT ${len(args)}"
    return sql, args


def build_insert(table: str, values: Mapping[str, Any]) -> tuple[str, list[Any]]:
    cols = list(values)
    if not cols:
        raise ValueError("Insert requires at least one column.")
    placeholders = ", ".join(f"${i}" for i in range(1, len(cols) + 1))
    sql = (
        f"INSERT INTO {quote_ident(table)} ({', '.join(quote_ident(c) for c in cols)}) "
        f"VALUES ({placeholders}) RETURNING *"
    )
    return sql, [values[c] for c in cols]


def build_upsert(table: str, values: Mapping[str, Any], *, conflict_key: str) -> tuple[str, list[Any]]:
    sql, args = build_insert(table, values)
    updates = [c for c in values if c != conflict_key]
    sql = sql.removesuffix(" RETURNING *")
    if updates:
        assignments = ", ".join(f"{quote_ident(c)} = EXCLUDED.{quote_ident(c)}" for c in updates)
        sql += f" ON CONFLICT ({quote_ident(conflict_key)}) DO UPDATE SET {assignments}"
    else:
        sql += f" ON CONFLICT ({quote_ident(conflict_key)}) DO NOTHING"
    return sql + " RETURNING *", args


def build_delete(table: str, *, filters: Mapping[str, Any]) -> tuple[str, list[Any]]:
    if not filters:
        raise ValueError("Delete requires at least one filter.")
    args: list[Any] = []
    where: list[str] = []
    for col, value in filters.items():
        args.append(value)
        where.append(f"{quote_ident(col)} = ${len(args)}")
    return f"DELETE FROM {quote_ident(table)} WHERE {' AND '.join(where)} RETURNING 1", args


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _nest_joined(row: dict[str, Any], join: Join) -> dict[str, Any]:
    prefix = f"{join.key}."
    nested = {key[len(prefix):]: row.pop(key) for key in list(row) if key.startswith(prefix)}
    row[join.key] = nested if row.pop("__join_key", None) is not None else None
    return row


class PostgresStore:
    """
    DataStore over an asyncpg pool. Driver errors surface as StoreError.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def _fetch(self, sql: str, args: Sequence[Any]) -> list[dict[str, Any]]:
        try:
            rows = await self._pool.fetch(sql, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
            raise StoreError("Query failed.") from exc
        return [_record_to_dict(r) for r in rows]

    async def select_one(
        self,
        table: str,
        *,
        filters: Mapping[str, Any],
        columns: Sequence[str] = ALL_COLUMNS,
    ) -> dict[str, Any] | None:
        # Fetch two rows so "more than one" can be told apart from "exactly one".
        sql, args = build_select(table, filters=filters, columns=columns, limit=2)
        rows = await self._fetch(sql, args)
        if len(rows) > 1:
            raise StoreError(f"Expected a single row from {table}.")
        return rows[0] if rows else None

    async def select_many(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        columns: Sequence[str] = ALL_COLUMNS,
        order_by: str | None = None,
        descending: bool = False,
        join: Join | None = None,
        search: Search | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        sql, args = build_select(
            table,
            filters=filters,
            columns=columns,
            order_by=order_by,
            descending=descending,
            join=join,
            search=search,
            limit=limit,
        )
        rows = await self._fetch(sql, args)
        if join is not None:
            rows = [_nest_joined(row, join) for row in rows]
        return rows

    async def insert(self, table: str, values: Mapping[str, Any]) -> dict[str, Any]:
        sql, args = build_insert(table, values)
        rows = await self._fetch(sql, args)
        if not rows:
            raise StoreError(f"Insert into {table} returned no row.")
        return rows[0]

    async def upsert(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        conflict_key: str = "id",
    ) -> dict[str, Any]:
        sql, args = build_upsert(table, values, conflict_key=conflict_key)
        rows = await self._fetch(sql, args)
        if not rows:
            raise StoreError(f"Upsert into {table} returned no row.")
        return rows[0]

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> int:
        sql, args = build_delete(table, filters=filters)
        return len(await self._fetch(sql, args))
