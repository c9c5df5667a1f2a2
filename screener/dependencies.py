# screener/dependencies.py

from typing import Optional

from fastapi import Depends

from .config import Settings, settings
from .db.session import get_session_factory
from .services.account_deletion import AccountDeletionService
from .services.sql_store import SqlAlchemyResourceStore
from .services.store import IdentityService, ResourceStore
from .services.supabase_store import SupabaseIdentityService, SupabaseResourceStore
from .supabase import get_service_client


def get_settings() -> Settings:
    """Dependency to get the application settings."""
    return settings


def get_resource_store() -> Optional[ResourceStore]:
    """
    Dependency to get the privileged resource store.

    A direct DATABASE_URL wins because it gives real transactions; otherwise
    the service-role Supabase client is used. None when neither is configured.
    """
    session_factory = get_session_factory()
    if session_factory is not None:
        return SqlAlchemyResourceStore(session_factory)

    client = get_service_client()
    if client is None:
        return None
    return SupabaseResourceStore(client)


def get_identity_service() -> Optional[IdentityService]:
    """Dependency to get the auth admin API, None without the service-role key."""
    client = get_service_client()
    if client is None:
        return None
    return SupabaseIdentityService(client)


def get_account_deletion_service(
    store: Optional[ResourceStore] = Depends(get_resource_store),
    identity: Optional[IdentityService] = Depends(get_identity_service),
) -> AccountDeletionService:
    return AccountDeletionService(store, identity)
