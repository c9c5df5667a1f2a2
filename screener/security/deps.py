# screener/security/deps.py

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from ..dependencies import get_settings
from ..config import Settings
from .jwt import verify_access_token

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - No authentication token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_header[len("Bearer "):]


def get_optional_claims(request: Request, settings: Settings = Depends(get_settings)) -> Optional[dict]:
    """
    Claims of the calling user when token verification is configured, else None.

    With no JWT secret the endpoint trusts whatever layer sits in front of it.
    """
    if not settings.SUPABASE_JWT_SECRET:
        logger.warning("SUPABASE_JWT_SECRET not set; caller identity is not verified")
        return None
    return verify_access_token(_bearer_token(request), settings)


def require_claims(request: Request, settings: Settings = Depends(get_settings)) -> dict:
    if not settings.SUPABASE_JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Token verification is not configured",
        )
    return verify_access_token(_bearer_token(request), settings)
