# screener/routers/organization.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, ValidationError

from ..dependencies import get_resource_store
from ..security.deps import require_claims
from ..services.memberships import ROLES, MembershipError, add_member, remove_member, update_member
from ..services.store import ResourceStore

router = APIRouter(prefix="/api/organization", tags=["Organizations"])

_email_adapter = TypeAdapter(EmailStr)


# Pydantic models for the member management request bodies
class AddMemberRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    role: Optional[str] = None
    organization_id: Optional[str] = Field(default=None, alias="organizationId")


class UpdateMemberRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    member_id: Optional[str] = Field(default=None, alias="memberId")
    role: Optional[str] = None
    organization_id: Optional[str] = Field(default=None, alias="organizationId")


class DeleteMemberRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    member_id: Optional[str] = Field(default=None, alias="memberId")
    organization_id: Optional[str] = Field(default=None, alias="organizationId")


def _configured(store: Optional[ResourceStore]) -> ResourceStore:
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Member management is not configured. Please contact administrator.",
        )
    return store


@router.post("/add-member")
def add_organization_member(
    body: AddMemberRequest,
    claims: dict = Depends(require_claims),
    store: Optional[ResourceStore] = Depends(get_resource_store),
):
    """
    Owner/admin endpoint to invite someone into an organization by email.
    """
    if not body.email or not body.role or not body.organization_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email, role, and organization ID are required",
        )

    try:
        _email_adapter.validate_python(body.email.strip())
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

    if body.role not in ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")

    try:
        member = add_member(_configured(store), claims["sub"], body.email, body.role, body.organization_id)
    except MembershipError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return {
        "success": True,
        "member": member,
        "message": f"Successfully invited {body.email} to the organization",
    }


@router.patch("/update-member")
def update_organization_member(
    body: UpdateMemberRequest,
    claims: dict = Depends(require_claims),
    store: Optional[ResourceStore] = Depends(get_resource_store),
):
    """
    Owner/admin endpoint to change a member's role.
    """
    if not body.member_id or not body.role or not body.organization_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Member ID, role, and organization ID are required",
        )

    if body.role not in ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")

    try:
        member = update_member(_configured(store), claims["sub"], body.member_id, body.role, body.organization_id)
    except MembershipError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return {
        "success": True,
        "member": member,
        "message": f"Successfully updated role to {body.role}",
    }


@router.delete("/delete-member")
def delete_member(
    body: DeleteMemberRequest,
    claims: dict = Depends(require_claims),
    store: Optional[ResourceStore] = Depends(get_resource_store),
):
    """
    Owner/admin endpoint to remove another member from an organization.
    """
    if not body.member_id or not body.organization_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Member ID and organization ID are required",
        )

    try:
        remove_member(_configured(store), claims["sub"], body.member_id, body.organization_id)
    except MembershipError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return {"success": True, "message": "Member removed successfully"}
