"""Thin query client over Supabase.

Pages and the loader only ever talk to the store through QueryClient, which
keeps the surface to equality-filtered selects, inserts, updates and a single
storage upload. Embedded joins are written in the PostgREST column string, e.g.
``"*, round_summaries(*)"``.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from .config import Settings
from .exceptions import ConfigurationError, QueryError, StorageError

logger = logging.getLogger(__name__)

Filters = Optional[Dict[str, Any]]


class QueryClient:
    def __init__(self, client: Client):
        self._client = client

    @property
    def auth(self):
        return self._client.auth

    def select(self, table: str, columns: str = "*", filters: Filters = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = self._client.table(table).select(columns)
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        if limit is not None:
            query = query.limit(limit)
        try:
            response = query.execute()
        except Exception as e:
            logger.error(f"select on {table} failed: {e}")
            raise QueryError(str(e), table=table, operation="select") from e
        return list(response.data or [])

    def select_one(self, table: str, columns: str = "*", filters: Filters = None) -> Optional[Dict[str, Any]]:
        rows = self.select(table, columns, filters, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.table(table).insert(record).execute()
        except Exception as e:
            logger.error(f"insert into {table} failed: {e}")
            raise QueryError(str(e), table=table, operation="insert") from e
        if not response.data:
            raise QueryError(f"Insert into {table} returned no row", table=table, operation="insert")
        return response.data[0]

    def update(self, table: str, values: Dict[str, Any], filters: Dict[str, Any]) -> Dict[str, Any]:
        if not filters:
            raise QueryError(f"Refusing unfiltered update on {table}", table=table, operation="update")
        query = self._client.table(table).update(values)
        for column, value in filters.items():
            query = query.eq(column, value)
        try:
            response = query.execute()
        except Exception as e:
            logger.error(f"update on {table} failed: {e}")
            raise QueryError(str(e), table=table, operation="update") from e
        if not response.data:
            raise QueryError(f"No {table} row matched {filters}", table=table, operation="update")
        return response.data[0]

    def store(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        try:
            self._client.storage.from_(bucket).upload(
                key,
                data,
                {"content-type": content_type, "cache-control": "3600", "upsert": "false"},
            )
        except Exception as e:
            logger.error(f"upload of {key} to {bucket} failed: {e}")
            raise StorageError(str(e), bucket=bucket, key=key) from e
        logger.info(f"Stored {key} in bucket {bucket}")
        return key


def create_query_client(settings: Settings) -> QueryClient:
    if not settings.SUPABASE_URL:
        raise ConfigurationError("SUPABASE_URL is not configured", setting="SUPABASE_URL")
    if not settings.SUPABASE_ANON_KEY:
        raise ConfigurationError("SUPABASE_ANON_KEY is not configured", setting="SUPABASE_ANON_KEY")
    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    logger.info("Supabase client initialized")
    return QueryClient(client)
