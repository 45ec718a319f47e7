"""
Data store client contract.

Feature repositories talk to the store only through `DataStore`, which is
handed to them explicitly (see `courselog.core.dependencies.get_store`). Two
implementations exist:
- `courselog.core.db.PostgresStore` (asyncpg, raw SQL)
- `MemoryStore` below (plain dicts; tests and local runs)

Rows are plain dicts. A `Join` returns the referenced row's columns nested
under the join alias, or `None` when the referenced row does not exist.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Mapping, Protocol, Sequence

from .errors import StoreError

ALL_COLUMNS: tuple[str, ...] = ("*",)

# Columns typed DATE in Postgres; MemoryStore keeps them as datetime.date.
DATE_COLUMNS = frozenset({"date_played"})


@dataclass(frozen=True)
class Join:
    """Many-to-one relation from the selected table to `table`."""

    table: str
    foreign_key: str
    columns: tuple[str, ...]
    alias: str | None = None
    primary_key: str = "id"

    @property
    def key(self) -> str:
        return self.alias or self.table


@dataclass(frozen=True)
class Search:
    """Case-insensitive substring match OR-ed across `columns`."""

    columns: tuple[str, ...]
    term: str


class DataStore(Protocol):
    async def select_one(
        self,
        table: str,
        *,
        filters: Mapping[str, Any],
        columns: Sequence[str] = ALL_COLUMNS,
    ) -> dict[str, Any] | None: ...

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
    ) -> list[dict[str, Any]]: ...

    async def insert(self, table: str, values: Mapping[str, Any]) -> dict[str, Any]: ...

    async def upsert(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        conflict_key: str = "id",
    ) -> dict[str, Any]: ...

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> int: ...


def _project(row: Mapping[str, Any], columns: Sequence[str]) -> dict[str, Any]:
    if tuple(columns) == ALL_COLUMNS:
        return copy.deepcopy(dict(row))
    return {col: copy.deepcopy(row.get(col)) for col in columns}


def _coerce(column: str, value: Any) -> Any:
    if column in DATE_COLUMNS and isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise StoreError(f"Invalid date for {column}: {value!r}") from exc
    if column in DATE_COLUMNS and isinstance(value, datetime):
        return value.date()
    return value


def _normalize(row: dict[str, Any]) -> dict[str, Any]:
    for column in DATE_COLUMNS.intersection(row):
        row[column] = _coerce(column, row[column])
    return row


def _sort_key(value: Any) -> tuple[bool, Any]:
    # NULLs last ascending; reversed they come first, as in Postgres.
    return (value is None, value if value is not None else 0)


class MemoryStore:
    """
    In-process DataStore backed by lists of dicts.

    Rows are deep-copied on the way in and out so callers can never mutate
    stored state. Values in DATE_COLUMNS are held as `datetime.date`, the type
    asyncpg returns for a DATE column, even when rows are seeded or appended
    with ISO strings. Set `fail_with` to make every call raise `StoreError`.
    """

    def __init__(self, tables: Mapping[str, Sequence[Mapping[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.fail_with: str | None = None

    def _rows(self, table: str) -> list[dict[str, Any]]:
        if self.fail_with is not None:
            raise StoreError(self.fail_with)
        rows = self.tables.setdefault(table, [])
        for row in rows:
            _normalize(row)
        return rows

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
        return all(row.get(col) == _coerce(col, value) for col, value in (filters or {}).items())

    async def select_one(
        self,
        table: str,
        *,
        filters: Mapping[str, Any],
        columns: Sequence[str] = ALL_COLUMNS,
    ) -> dict[str, Any] | None:
        found = [row for row in self._rows(table) if self._matches(row, filters)]
        if len(found) > 1:
            raise StoreError(f"Expected a single row from {table}, got {len(found)}.")
        return _project(found[0], columns) if found else None

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
        rows = [row for row in self._rows(table) if self._matches(row, filters)]

        if search is not None:
            term = search.term.lower()
            rows = [
                row
                for row in rows
                if any(term in str(row.get(col) or "").lower() for col in search.columns)
            ]

        if order_by is not None:
            rows = sorted(rows, key=lambda r: _sort_key(r.get(order_by)), reverse=descending)

        if limit is not None:
            rows = rows[:limit]

        out = [_project(row, columns) for row in rows]
        if join is not None:
            related = {r.get(join.primary_key): r for r in self._rows(join.table)}
            for row, source in zip(out, rows):
                target = related.get(source.get(join.foreign_key))
                row[join.key] = _project(target, join.columns) if target is not None else None
        return out

    async def insert(self, table: str, values: Mapping[str, Any]) -> dict[str, Any]:
        rows = self._rows(table)
        row = _normalize(dict(values))
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc))
        rows.append(row)
        return copy.deepcopy(row)

    async def upsert(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        conflict_key: str = "id",
    ) -> dict[str, Any]:
        rows = self._rows(table)
        key = values.get(conflict_key)
        for row in rows:
            if key is not None and row.get(conflict_key) == key:
                row.update(_normalize(dict(values)))
                return copy.deepcopy(row)
        return await self.insert(table, values)

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> int:
        if not filters:
            raise StoreError(f"Refusing to delete from {table} without filters.")
        rows = self._rows(table)
        kept = [row for row in rows if not self._matches(row, filters)]
        removed = len(rows) - len(kept)
        rows[:] = kept
        return removed
