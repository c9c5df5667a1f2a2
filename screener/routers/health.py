from fastapi import APIRouter, Depends

from ..config import Settings
from ..dependencies import get_settings

router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/check-env")
def check_env(settings: Settings = Depends(get_settings)):
    """Reports whether the privileged key is present without revealing it."""
    key = settings.SUPABASE_SERVICE_ROLE_KEY or ""
    return {
        "hasServiceKey": settings.has_service_key,
        "serviceKeyLength": len(key),
        "serviceKeyPreview": settings.service_key_preview(),
    }
