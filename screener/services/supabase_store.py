# screener/services/supabase_store.py

import logging
from typing import Any, Dict, List

from fastapi.encoders import jsonable_encoder
from supabase import Client

from .store import IdentityError, IdentityService, ResourceStore, Row, StoreError

logger = logging.getLogger(__name__)


class SupabaseResourceStore(ResourceStore):
    """PostgREST-backed store. Each call is an independent HTTP write; no transactions."""

    transactional = False

    def __init__(self, client: Client):
        self.client = client

    def select(self, table: str, filters: Dict[str, Any], columns: str = "*") -> List[Row]:
        try:
            query = self.client.table(table).select(columns)
            for column, value in filters.items():
                query = query.eq(column, value)
            response = query.execute()
        except Exception as e:
            raise StoreError(f"select on {table} failed: {e}") from e
        return response.data or []

    def insert(self, table: str, record: Row) -> Row:
        try:
            response = self.client.table(table).insert(jsonable_encoder(record)).execute()
        except Exception as e:
            raise StoreError(f"insert into {table} failed: {e}") from e
        return response.data[0] if response.data else dict(record)

    def update(self, table: str, filters: Dict[str, Any], values: Row) -> int:
        if not filters:
            raise StoreError(f"refusing unfiltered update on {table}")
        try:
            query = self.client.table(table).update(jsonable_encoder(values))
            for column, value in filters.items():
                query = query.eq(column, value)
            response = query.execute()
        except Exception as e:
            raise StoreError(f"update of {table} failed: {e}") from e
        return len(response.data or [])

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        if not filters:
            # PostgREST refuses unfiltered deletes; fail here with a clearer message.
            raise StoreError(f"refusing unfiltered delete on {table}")
        try:
            query = self.client.table(table).delete()
            for column, value in filters.items():
                query = query.eq(column, value)
            response = query.execute()
        except Exception as e:
            raise StoreError(f"delete from {table} failed: {e}") from e
        return len(response.data or [])


class SupabaseIdentityService(IdentityService):
    """Supabase Auth admin API. Needs a client built with the service-role key."""

    def __init__(self, client: Client):
        self.client = client

    def delete_user(self, user_id: str) -> bool:
        try:
            self.client.auth.admin.delete_user(user_id)
        except Exception as e:
            if getattr(e, "status", None) == 404:
                logger.info(f"Identity {user_id} already absent, nothing to delete")
                return False
            raise IdentityError(str(e) or e.__class__.__name__) from e
        return True
