"""SQLAlchemy-backed row store.

Works against any table registered on the SQLModel metadata, using Core
statements on an injected async engine. The engine lifecycle belongs to the
host application (see ``keyforge.db``).
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import MetaData, Table, delete, insert, select
from sqlalchemy.exc import DBAPIError, DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel

import keyforge.models  # noqa: F401  (register tables on SQLModel.metadata)
from keyforge.errors import StoreUnavailable
from keyforge.stores.base import Filters, Row

logger = structlog.get_logger()

# Transport and availability failures. Statement, type and integrity errors
# are programming errors and propagate unchanged.
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, DisconnectionError, OSError)


def _is_unavailable(exc: Exception) -> bool:
    if isinstance(exc, _UNAVAILABLE_ERRORS):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class SQLRowStore:
    """RowStore implementation over SQLAlchemy Core."""

    def __init__(self, engine: AsyncEngine, metadata: MetaData | None = None) -> None:
        self._engine = engine
        self._metadata = metadata if metadata is not None else SQLModel.metadata
        self._log = logger.bind(store="sql")

    def _table(self, name: str) -> Table:
        try:
            return self._metadata.tables[name]
        except KeyError:
            raise ValueError(f"Unknown table: {name}") from None

    @staticmethod
    def _where(table: Table, filters: Filters) -> list[Any]:
        clauses = []
        for column, value in filters.items():
            if column not in table.c:
                raise ValueError(f"Unknown column for {table.name}: {column}")
            clauses.append(table.c[column] == value)
        return clauses

    def _unavailable(self, op: str, table: str, exc: Exception) -> StoreUnavailable:
        self._log.warning(
            "store.unavailable",
            op=op,
            table=table,
            error=type(exc).__name__,
        )
        return StoreUnavailable(
            f"Row store {op} on {table} failed",
            details={"error": type(exc).__name__},
        )

    async def insert(self, table: str, row: Row) -> Row:
        tbl = self._table(table)
        stmt = insert(tbl).values(**row).returning(*tbl.c)
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
                created = result.mappings().one()
        except (DBAPIError, DisconnectionError, OSError) as e:
            if not _is_unavailable(e):
                raise
            raise self._unavailable("insert", table, e) from e
        return dict(created)

    async def select(
        self,
        table: str,
        filters: Filters,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        tbl = self._table(table)
        stmt = select(tbl).where(*self._where(tbl, filters))
        if order_by is not None:
            column = tbl.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except (DBAPIError, DisconnectionError, OSError) as e:
            if not _is_unavailable(e):
                raise
            raise self._unavailable("select", table, e) from e
        return [dict(r) for r in rows]

    async def delete(self, table: str, filters: Filters) -> int:
        tbl = self._table(table)
        if not filters:
            raise ValueError("Refusing unfiltered delete")
        stmt = delete(tbl).where(*self._where(tbl, filters))
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
        except (DBAPIError, DisconnectionError, OSError) as e:
            if not _is_unavailable(e):
                raise
            raise self._unavailable("delete", table, e) from e
        return result.rowcount or 0
