"""
Module: connectors.supabase_store

Remote store connector for a hosted Supabase project, backed by the
``supabase`` async client. Each ``TableQuery`` is replayed onto the client's
own request builder. Errors reported by PostgREST (``APIError``) come back as
``StoreError``; transport failures propagate.
"""

import logging
from typing import Any

from postgrest.exceptions import APIError
from postgrest.types import ReturnMethod
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from config.config import StoreConfig

from .remote_store import (
    Cardinality,
    Filter,
    QueryOperation,
    RemoteStore,
    StoreError,
    StoreResponse,
    TableQuery,
)

logger = logging.getLogger(__name__)

_MULTIPLE_OR_NONE = "JSON object requested, multiple (or no) rows returned"


class SupabaseStore(RemoteStore):
    def __init__(self, client: AsyncClient):
        self.client = client

    @classmethod
    async def connect(cls, config: StoreConfig) -> "SupabaseStore":
        """Create the async Supabase client described by ``config``."""
        if not config.is_configured:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must both be set")
        options = None
        if config.timeout_seconds is not None:
            options = AsyncClientOptions(postgrest_client_timeout=config.timeout_seconds)
        client = await acreate_client(config.url, config.anon_key, options=options)
        logger.info(f"Supabase client created for {config.url}")
        return cls(client)

    async def execute(self, query: TableQuery) -> StoreResponse:
        builder = self._build(query)
        try:
            response = await builder.execute()
        except APIError as e:
            error = StoreError(message=e.message or str(e), code=e.code, details=e.details, hint=e.hint)
            logger.debug(f"Store error for {query.operation.value} on {query.table}: {error}")
            return StoreResponse(error=error)

        if query.operation is not QueryOperation.SELECT and not query.returning:
            return StoreResponse(data=None)
        rows = response.data if response is not None else None
        return self._shape(query, rows or [])

    def _build(self, query: TableQuery) -> Any:
        table = self.client.table(query.table)
        returning = ReturnMethod.representation if query.returning else ReturnMethod.minimal
        operation = query.operation

        if operation is QueryOperation.SELECT:
            builder = table.select(query.columns)
        elif operation is QueryOperation.INSERT:
            builder = table.insert(query.payload, returning=returning)
        elif operation is QueryOperation.UPDATE:
            builder = table.update(query.payload, returning=returning)
        elif operation is QueryOperation.DELETE:
            builder = table.delete(returning=returning)
        else:
            builder = table.upsert(query.payload, returning=returning, on_conflict=query.on_conflict or "")

        for f in query.filters:
            builder = _apply_filter(builder, f)
        for column, descending in query.ordering:
            builder = builder.order(column, desc=descending)
        if query.row_limit is not None and query.row_offset:
            builder = builder.range(query.row_offset, query.row_offset + query.row_limit - 1)
        elif query.row_limit is not None:
            builder = builder.limit(query.row_limit)
        elif query.row_offset:
            builder = builder.offset(query.row_offset)
        return builder

    @staticmethod
    def _shape(query: TableQuery, rows: list[dict[str, Any]]) -> StoreResponse:
        # Cardinality is applied to the returned rows, not through the client's single()/maybe_single()
        if query.cardinality is Cardinality.MANY:
            return StoreResponse(data=rows)
        if query.cardinality is Cardinality.MAYBE_SINGLE and not rows:
            return StoreResponse(data=None)
        if len(rows) != 1:
            return StoreResponse(
                error=StoreError(
                    message=_MULTIPLE_OR_NONE,
                    code="PGRST116",
                    details=f"Results contain {len(rows)} rows",
                )
            )
        return StoreResponse(data=rows[0])


def _apply_filter(builder: Any, f: Filter) -> Any:
    if f.operator == "eq" and f.value is None:
        return builder.is_(f.column, "null")
    if f.operator == "in":
        return builder.in_(f.column, f.value)
    return getattr(builder, f.operator)(f.column, f.value)
