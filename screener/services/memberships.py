# screener/services/memberships.py

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import status

from .store import ResourceStore, Row, StoreError

logger = logging.getLogger(__name__)

MEMBERS_TABLE = "organization_members"
MANAGER_ROLES = ("owner", "admin")
ROLES = ("owner", "admin", "member", "viewer")


class MembershipError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


def _require_manager(store: ResourceStore, organization_id: str, caller_id: str, action: str) -> Row:
    """Return the caller's active membership, or refuse unless they are an owner or admin."""
    callers = store.select(
        MEMBERS_TABLE,
        {"organization_id": organization_id, "user_id": caller_id, "status": "active"},
    )
    if not callers:
        raise MembershipError(status.HTTP_403_FORBIDDEN, "You are not a member of this organization")

    caller = callers[0]
    if caller["role"] not in MANAGER_ROLES:
        raise MembershipError(status.HTTP_403_FORBIDDEN, f"Only organization owners and admins can {action}")
    return caller


def _find_member(store: ResourceStore, member_id: str, organization_id: str) -> Row:
    targets = store.select(MEMBERS_TABLE, {"id": member_id, "organization_id": organization_id})
    if not targets:
        raise MembershipError(status.HTTP_404_NOT_FOUND, "Member not found")
    return targets[0]


def add_member(store: ResourceStore, caller_id: str, email: str, role: str, organization_id: str) -> Row:
    """
    Invite ``email`` into ``organization_id`` with ``role``.

    The membership starts out ``pending`` with no user id; it is linked to an
    identity when the invitee signs up. The email is expected to be validated
    by the caller already.
    """
    email = email.strip().lower()
    try:
        caller = _require_manager(store, organization_id, caller_id, "add members")

        if role == "owner" and caller["role"] != "owner":
            raise MembershipError(status.HTTP_403_FORBIDDEN, "Only owners can invite members as owner")

        existing = store.select(MEMBERS_TABLE, {"organization_id": organization_id}, columns="id, user_email")
        if any((m.get("user_email") or "").lower() == email for m in existing):
            raise MembershipError(
                status.HTTP_400_BAD_REQUEST,
                "This email is already a member of this organization",
            )

        member = store.insert(MEMBERS_TABLE, {
            "organization_id": organization_id,
            "user_id": "",
            "user_email": email,
            "role": role,
            "invited_by": caller_id,
            "status": "pending",
            "invited_at": datetime.now(timezone.utc),
        })
    except StoreError as e:
        logger.error(f"Error adding {email} to organization {organization_id}: {e}")
        raise MembershipError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to add member to organization",
        ) from e

    logger.info(f"{email} invited to organization {organization_id} as {role} by {caller_id}")
    return member


def update_member(store: ResourceStore, caller_id: str, member_id: str, role: str, organization_id: str) -> Optional[Row]:
    """
    Change the role of ``member_id`` on behalf of ``caller_id``.

    Owners and admins may change roles, but only owners may touch another
    owner or hand out the owner role, and nobody changes their own role.
    """
    try:
        caller = _require_manager(store, organization_id, caller_id, "update member roles")
        target = _find_member(store, member_id, organization_id)

        if target["role"] == "owner" and caller["role"] != "owner":
            raise MembershipError(status.HTTP_403_FORBIDDEN, "Only owners can modify other owners")

        if role == "owner" and caller["role"] != "owner":
            raise MembershipError(status.HTTP_403_FORBIDDEN, "Only owners can promote members to owner")

        if target["user_id"] == caller_id:
            raise MembershipError(status.HTTP_403_FORBIDDEN, "You cannot change your own role")

        store.update(MEMBERS_TABLE, {"id": member_id}, {"role": role, "updated_at": datetime.now(timezone.utc)})
        updated = store.select(MEMBERS_TABLE, {"id": member_id})
    except StoreError as e:
        logger.error(f"Error updating member {member_id} in {organization_id}: {e}")
        raise MembershipError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update member role") from e

    logger.info(f"Member {member_id} of organization {organization_id} set to {role} by {caller_id}")
    return updated[0] if updated else None


def remove_member(store: ResourceStore, caller_id: str, member_id: str, organization_id: str) -> None:
    """
    Remove ``member_id`` from ``organization_id`` on behalf of ``caller_id``.

    Only active owners and admins may remove members, only owners may remove
    owners, nobody removes themselves, and an organization never loses its
    last active owner this way.
    """
    try:
        caller = _require_manager(store, organization_id, caller_id, "remove members")
        target = _find_member(store, member_id, organization_id)

        if target["role"] == "owner" and caller["role"] != "owner":
            raise MembershipError(status.HTTP_403_FORBIDDEN, "Only owners can remove other owners")

        if target["user_id"] == caller_id:
            raise MembershipError(
                status.HTTP_403_FORBIDDEN,
                "You cannot remove yourself from the organization",
            )

        if target["role"] == "owner":
            owners = store.select(
                MEMBERS_TABLE,
                {"organization_id": organization_id, "role": "owner", "status": "active"},
                columns="id",
            )
            if len(owners) <= 1:
                raise MembershipError(
                    status.HTTP_403_FORBIDDEN,
                    "Cannot remove the last owner of the organization",
                )

        store.delete(MEMBERS_TABLE, {"id": member_id})
    except StoreError as e:
        logger.error(f"Error removing member {member_id} from {organization_id}: {e}")
        raise MembershipError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to remove member") from e

    logger.info(f"Member {member_id} removed from organization {organization_id} by {caller_id}")
