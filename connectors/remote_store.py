"""
Module: connectors.remote_store

Table-oriented query interface shared by every remote store connector.

Queries are assembled with a chainable builder, in the style of the Supabase
client::

    response = await (
        store.table("products")
        .select("*")
        .eq("status", "active")
        .order("created_at", desc=True)
        .execute()
    )

Executing a query returns a ``StoreResponse`` carrying either ``data`` or a
structured ``StoreError``. Transport failures (network errors, timeouts) are
raised as exceptions by the connector instead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class QueryOperation(str, Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    UPSERT = "upsert"


class Cardinality(str, Enum):
    MANY = "many"
    SINGLE = "single"  # Exactly one row, otherwise an error
    MAYBE_SINGLE = "maybe_single"  # Zero or one row


FILTER_OPERATORS = ("eq", "neq", "in", "gt", "gte", "lt", "lte")


@dataclass
class StoreError:
    """Error reported by the store for a single call."""

    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None

    def __str__(self) -> str:
        return f"{self.message} ({self.code})" if self.code else self.message


class StoreRequestError(Exception):
    """Raised by ``StoreResponse.raise_for_error`` when the store reported an error."""

    def __init__(self, error: StoreError):
        super().__init__(str(error))
        self.error = error


@dataclass
class StoreResponse:
    data: Any = None
    error: StoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> Any:
        """Return ``data`` or raise ``StoreRequestError``."""
        if self.error is not None:
            raise StoreRequestError(self.error)
        return self.data


@dataclass
class Filter:
    column: str
    operator: str
    value: Any

    def matches(self, row: dict[str, Any]) -> bool:
        """Evaluate the filter against a plain row (used by in-process stores)."""
        actual = row.get(self.column)
        if self.operator == "eq":
            return actual == self.value
        if self.operator == "neq":
            return actual != self.value
        if self.operator == "in":
            return actual in self.value
        if actual is None:
            return False
        if self.operator == "gt":
            return actual > self.value
        if self.operator == "gte":
            return actual >= self.value
        if self.operator == "lt":
            return actual < self.value
        if self.operator == "lte":
            return actual <= self.value
        raise ValueError(f"Unsupported filter operator: {self.operator}")


@dataclass
class TableQuery:
    """A single query against one table. Builder methods mutate and return self."""

    table: str
    store: RemoteStore | None = None
    operation: QueryOperation = QueryOperation.SELECT
    columns: str = "*"
    payload: dict[str, Any] | list[dict[str, Any]] | None = None
    filters: list[Filter] = field(default_factory=list)
    ordering: list[tuple[str, bool]] = field(default_factory=list)  # (column, descending)
    row_limit: int | None = None
    row_offset: int | None = None
    cardinality: Cardinality = Cardinality.MANY
    returning: bool = False
    on_conflict: str | None = None

    # --- Operations --- #

    def select(self, columns: str = "*") -> TableQuery:
        """Select rows, or ask a write operation to return the affected rows."""
        self.columns = columns
        if self.operation is not QueryOperation.SELECT:
            self.returning = True
        return self

    def insert(self, record: dict[str, Any] | list[dict[str, Any]]) -> TableQuery:
        self.operation = QueryOperation.INSERT
        self.payload = record
        return self

    def update(self, changes: dict[str, Any]) -> TableQuery:
        self.operation = QueryOperation.UPDATE
        self.payload = changes
        return self

    def delete(self) -> TableQuery:
        self.operation = QueryOperation.DELETE
        return self

    def upsert(self, record: dict[str, Any] | list[dict[str, Any]], on_conflict: str = "id") -> TableQuery:
        self.operation = QueryOperation.UPSERT
        self.payload = record
        self.on_conflict = on_conflict
        return self

    # --- Filters and modifiers --- #

    def filter(self, column: str, operator: str, value: Any) -> TableQuery:
        if operator not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {operator}")
        if operator == "in":
            value = list(value)
        self.filters.append(Filter(column, operator, value))
        return self

    def eq(self, column: str, value: Any) -> TableQuery:
        return self.filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> TableQuery:
        return self.filter(column, "neq", value)

    def in_(self, column: str, values: list[Any] | tuple[Any, ...]) -> TableQuery:
        return self.filter(column, "in", values)

    def gte(self, column: str, value: Any) -> TableQuery:
        return self.filter(column, "gte", value)

    def lte(self, column: str, value: Any) -> TableQuery:
        return self.filter(column, "lte", value)

    def order(self, column: str, desc: bool = False) -> TableQuery:
        self.ordering.append((column, desc))
        return self

    def limit(self, count: int) -> TableQuery:
        if count < 0:
            raise ValueError("limit must be non-negative")
        self.row_limit = count
        return self

    def range(self, start: int, end: int) -> TableQuery:
        """Restrict to rows ``start`` through ``end`` inclusive."""
        if start < 0 or end < start:
            raise ValueError(f"Invalid range: {start}-{end}")
        self.row_offset = start
        self.row_limit = end - start + 1
        return self

    def single(self) -> TableQuery:
        self.cardinality = Cardinality.SINGLE
        return self

    def maybe_single(self) -> TableQuery:
        self.cardinality = Cardinality.MAYBE_SINGLE
        return self

    async def execute(self) -> StoreResponse:
        if self.store is None:
            raise RuntimeError(f"Query on '{self.table}' is not bound to a store")
        return await self.store.execute(self)


class RemoteStore(ABC):
    """Abstract table store. Connectors implement ``execute``."""

    def table(self, name: str) -> TableQuery:
        return TableQuery(table=name, store=self)

    @abstractmethod
    async def execute(self, query: TableQuery) -> StoreResponse:
        """Run the query; report store-side failures through ``StoreResponse.error``."""
