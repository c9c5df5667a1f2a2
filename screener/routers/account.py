# screener/routers/account.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_account_deletion_service
from ..schemas.account import DeleteAccountRequest, DeleteAccountResponse
from ..security.deps import get_optional_claims
from ..services.account_deletion import AccountDeletionService, DeletionError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Account"])


@router.post("/delete-account", response_model=DeleteAccountResponse, status_code=status.HTTP_200_OK)
def delete_account(
    body: Optional[DeleteAccountRequest] = None,
    service: AccountDeletionService = Depends(get_account_deletion_service),
    claims: Optional[dict] = Depends(get_optional_claims),
):
    """
    Permanently delete the caller's account, every organization they are the
    sole owner of, and all data under those organizations.
    """
    user_id = body.user_id if body else None

    # When tokens are verified, an account can only be deleted by its owner.
    # A blank id falls through to the service, which rejects it with a 400.
    if claims is not None and user_id and user_id.strip() and claims["sub"] != user_id:
        logger.warning(f"User {claims['sub']} attempted to delete account {user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own account",
        )

    try:
        report = service.delete_account(user_id)
    except DeletionError:
        raise
    except Exception as e:
        logger.exception("Unexpected error in delete account")
        raise DeletionError(str(e)) from e

    return DeleteAccountResponse(message="Account deleted successfully", report=report)
