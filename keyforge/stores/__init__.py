"""Row store layer."""

from keyforge.stores.base import Filters, Row, RowStore
from keyforge.stores.sql import SQLRowStore

__all__ = ["Filters", "Row", "RowStore", "SQLRowStore"]
