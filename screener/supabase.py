# screener/supabase.py

import logging
from functools import lru_cache
from typing import Optional

from supabase import Client, create_client
from supabase.client import ClientOptions

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_service_client() -> Optional[Client]:
    """
    Admin client built with the service-role key, or None when the key is not
    configured. The admin client bypasses row-level security, so it never
    refreshes or persists a user session.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        logger.critical("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is not set. Privileged endpoints will not work.")
        return None

    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
