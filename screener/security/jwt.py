# screener/security/jwt.py

import jwt
from fastapi import HTTPException, status

from ..config import Settings

ALGO = "HS256"


def verify_access_token(token: str, settings: Settings) -> dict:
    """
    Verifies a Supabase access token and returns its claims.
    Raises HTTPException if the token is invalid or expired.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[ALGO],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized - Invalid or expired token")

    if not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized - Invalid or expired token")
    return payload
