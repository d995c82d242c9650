"""
Module: connectors.in_memory_store

In-memory table store implementing the remote store interface, seeded with the
VeggieMarket demo catalog. Used by the demo and by tests; failures can be
injected per table to exercise the fallback paths.
"""

import asyncio
import copy
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from config.config import DEMO_BUYER_ID, DEMO_SELLER_ID

from .remote_store import (
    Cardinality,
    QueryOperation,
    RemoteStore,
    StoreError,
    StoreResponse,
    TableQuery,
)

logger = logging.getLogger(__name__)

_MULTIPLE_OR_NONE = "JSON object requested, multiple (or no) rows returned"


def _timestamp(offset_minutes: int = 0) -> str:
    base = datetime(2025, 12, 29, 9, 0, tzinfo=timezone.utc)
    return (base + timedelta(minutes=offset_minutes)).isoformat()


def demo_tables() -> dict[str, list[dict[str, Any]]]:
    """Rows of the demo marketplace, keyed by table name."""
    return {
        "products": [
            {
                "id": "10000000-0000-0000-0000-000000000001",
                "name": "Fresh Tomatoes",
                "description": "Vine-ripened tomatoes from local farms",
                "price": 40,
                "unit": "kg",
                "stock_quantity": 50,
                "min_order_quantity": 1,
                "status": "active",
                "category": "vegetables",
                "images": ["https://images.unsplash.com/photo-1607305387299-a3d9611cd469"],
                "seller_id": DEMO_SELLER_ID,
                "created_at": _timestamp(30),
                "updated_at": _timestamp(30),
            },
            {
                "id": "10000000-0000-0000-0000-000000000002",
                "name": "Fresh Potatoes",
                "description": "Farm potatoes",
                "price": 30,
                "unit": "kg",
                "stock_quantity": 100,
                "min_order_quantity": 1,
                "status": "active",
                "category": "vegetables",
                "images": ["https://images.unsplash.com/photo-1518709268805-4e9042af2176"],
                "seller_id": DEMO_SELLER_ID,
                "created_at": _timestamp(20),
                "updated_at": _timestamp(20),
            },
            {
                "id": "10000000-0000-0000-0000-000000000003",
                "name": "Red Onions",
                "description": "",
                "price": 35,
                "unit": "kg",
                "stock_quantity": 0,
                "min_order_quantity": 1,
                "status": "active",
                "category": "vegetables",
                "images": [],
                "seller_id": DEMO_SELLER_ID,
                "created_at": _timestamp(10),
                "updated_at": _timestamp(10),
            },
            {
                "id": "10000000-0000-0000-0000-000000000004",
                "name": "Winter Carrots",
                "description": "Seasonal, currently unlisted",
                "price": 25,
                "unit": "kg",
                "stock_quantity": 40,
                "min_order_quantity": 1,
                "status": "inactive",
                "category": "vegetables",
                "images": [],
                "seller_id": DEMO_SELLER_ID,
                "created_at": _timestamp(0),
                "updated_at": _timestamp(0),
            },
        ],
        "notifications": [
            {
                "id": "20000000-0000-0000-0000-000000000001",
                "user_id": DEMO_BUYER_ID,
                "title": "Order shipped",
                "message": "Your order #102 is on its way",
                "type": "order",
                "is_read": False,
                "metadata": {"order_id": 102},
                "created_at": _timestamp(40),
            },
            {
                "id": "20000000-0000-0000-0000-000000000002",
                "user_id": DEMO_BUYER_ID,
                "title": "Weekend offer",
                "message": "10% off on all leafy greens",
                "type": "promotion",
                "is_read": True,
                "metadata": None,
                "created_at": _timestamp(5),
            },
        ],
        "reviews": [
            {
                "id": "30000000-0000-0000-0000-000000000001",
                "product_id": "10000000-0000-0000-0000-000000000001",
                "buyer_id": DEMO_BUYER_ID,
                "rating": 5,
                "comment": "Great quality vegetables!",
                "created_at": _timestamp(50),
            },
            {
                "id": "30000000-0000-0000-0000-000000000002",
                "product_id": "10000000-0000-0000-0000-000000000002",
                "buyer_id": DEMO_BUYER_ID,
                "rating": 4,
                "comment": None,
                "created_at": _timestamp(45),
            },
        ],
        "seller_stats": [
            {
                "id": "40000000-0000-0000-0000-000000000001",
                "seller_id": DEMO_SELLER_ID,
                "total_orders": 3,
                "total_revenue": 320.0,
                "total_products": 4,
                "average_rating": 4.5,
                "last_updated": _timestamp(60),
            }
        ],
    }


class InMemoryStore(RemoteStore):
    """
    Remote store connector backed by plain dictionaries.

    ``fail_table`` makes every call against a table return a store error;
    ``disconnect`` makes every call raise ``ConnectionError`` as an unreachable
    backend would. Executed queries are recorded in ``calls``.
    """

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None, latency: float = 0.0):
        self.tables: dict[str, list[dict[str, Any]]] = copy.deepcopy(tables) if tables else {}
        self.latency = latency
        self.calls: list[TableQuery] = []
        self._table_errors: dict[str, StoreError] = {}
        self._operation_errors: dict[tuple[str, QueryOperation], StoreError] = {}
        self._connected = True

    @classmethod
    def with_demo_data(cls, latency: float = 0.0) -> "InMemoryStore":
        return cls(demo_tables(), latency=latency)

    # --- Failure injection --- #

    def fail_table(
        self,
        table: str,
        message: str = "relation does not exist",
        code: str = "42P01",
        operation: QueryOperation | None = None,
    ) -> None:
        """Make calls against ``table`` (optionally one operation only) report an error."""
        error = StoreError(message=message, code=code)
        if operation is None:
            self._table_errors[table] = error
        else:
            self._operation_errors[(table, operation)] = error

    def restore_table(self, table: str) -> None:
        self._table_errors.pop(table, None)
        for key in [k for k in self._operation_errors if k[0] == table]:
            del self._operation_errors[key]

    def disconnect(self) -> None:
        self._connected = False

    def reconnect(self) -> None:
        self._connected = True

    def calls_to(self, table: str, operation: QueryOperation | None = None) -> list[TableQuery]:
        return [
            q for q in self.calls if q.table == table and (operation is None or q.operation is operation)
        ]

    # --- Execution --- #

    async def execute(self, query: TableQuery) -> StoreResponse:
        self.calls.append(query)
        if self.latency:
            await asyncio.sleep(self.latency)
        if not self._connected:
            raise ConnectionError("Store is unreachable")

        error = self._operation_errors.get((query.table, query.operation)) or self._table_errors.get(query.table)
        if error is not None:
            logger.debug(f"Injected failure for {query.operation.value} on {query.table}: {error}")
            return StoreResponse(error=error)

        rows = self.tables.setdefault(query.table, [])
        handlers = {
            QueryOperation.SELECT: self._select,
            QueryOperation.INSERT: self._insert,
            QueryOperation.UPDATE: self._update,
            QueryOperation.DELETE: self._delete,
            QueryOperation.UPSERT: self._upsert,
        }
        try:
            result = handlers[query.operation](query, rows)
            if query.operation is not QueryOperation.SELECT and not query.returning:
                return StoreResponse(data=None)
            return self._shape(query, result)
        except _DuplicateKey as exc:
            return StoreResponse(
                error=StoreError(message=f"duplicate key value violates unique constraint ({exc})", code="23505")
            )
        except KeyError as exc:
            return StoreResponse(
                error=StoreError(message=f"column {query.table}.{exc.args[0]} does not exist", code="42703")
            )

    def _matching(self, query: TableQuery, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [row for row in rows if all(f.matches(row) for f in query.filters)]

    def _select(self, query: TableQuery, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        selected = self._matching(query, rows)
        # Stable sorts applied last key first give a multi-key ordering
        for column, descending in reversed(query.ordering):
            present = [r for r in selected if r.get(column) is not None]
            missing = [r for r in selected if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=descending)
            selected = present + missing
        start = query.row_offset or 0
        end = None if query.row_limit is None else start + query.row_limit
        return selected[start:end]

    def _insert(self, query: TableQuery, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        records = query.payload if isinstance(query.payload, list) else [query.payload or {}]
        inserted = []
        for record in records:
            row = self._new_row(record)
            if any(existing.get("id") == row["id"] for existing in rows):
                raise _DuplicateKey(row["id"])
            rows.append(row)
            inserted.append(row)
        return inserted

    def _update(self, query: TableQuery, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        changed = self._matching(query, rows)
        for row in changed:
            row.update(copy.deepcopy(query.payload or {}))
        return changed

    def _delete(self, query: TableQuery, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        removed = self._matching(query, rows)
        removed_ids = {id(row) for row in removed}
        self.tables[query.table] = [row for row in rows if id(row) not in removed_ids]
        return removed

    def _upsert(self, query: TableQuery, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        records = query.payload if isinstance(query.payload, list) else [query.payload or {}]
        key = query.on_conflict or "id"
        written = []
        for record in records:
            existing = next((r for r in rows if key in record and r.get(key) == record[key]), None)
            if existing is not None:
                existing.update(copy.deepcopy(record))
                written.append(existing)
            else:
                row = self._new_row(record)
                rows.append(row)
                written.append(row)
        return written

    def _new_row(self, record: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        row = copy.deepcopy(record)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", now)
        return row

    def _shape(self, query: TableQuery, rows: list[dict[str, Any]]) -> StoreResponse:
        projected = [self._project(row, query.columns, query.table) for row in rows]
        if query.cardinality is Cardinality.MANY:
            return StoreResponse(data=projected)
        if query.cardinality is Cardinality.MAYBE_SINGLE and not projected:
            return StoreResponse(data=None)
        if len(projected) != 1:
            return StoreResponse(error=StoreError(message=_MULTIPLE_OR_NONE, code="PGRST116"))
        return StoreResponse(data=projected[0])

    @staticmethod
    def _project(row: dict[str, Any], columns: str, table: str) -> dict[str, Any]:
        if columns.strip() == "*":
            return copy.deepcopy(row)
        wanted = [c.strip() for c in columns.split(",") if c.strip()]
        return {column: copy.deepcopy(row[column]) for column in wanted}


class _DuplicateKey(Exception):
    pass
