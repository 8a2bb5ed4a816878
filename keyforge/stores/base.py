"""Generic row store interface.

A row store persists plain dict rows in named tables and supports
equality-filtered reads and deletes. Generated fields (ids, timestamps) are
filled in by the store on insert and returned to the caller.

Implementations raise ``StoreUnavailable`` on transport/backend failures.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

Row = dict[str, Any]
Filters = Mapping[str, Any]


@runtime_checkable
class RowStore(Protocol):
    """Abstract row store."""

    async def insert(self, table: str, row: Row) -> Row:
        """Insert a row and return it including store-generated fields."""
        ...

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
        """Return rows whose columns equal every value in ``filters``."""
        ...

    async def delete(self, table: str, filters: Filters) -> int:
        """Delete rows matching ``filters``; return the number removed."""
        ...
