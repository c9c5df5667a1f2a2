# screener/services/account_deletion.py

"""
Cascading account deletion.

Deleting an account removes every organization the user is the sole active
owner of, children first, then the user's leftover memberships, and finally
the identity record in the auth service. Organizations with another active
owner are left alone; ownership falls to the remaining owner(s).
"""

import logging
from typing import Any, Dict, List, Optional

from ..schemas.account import DeletionReport, OrganizationOutcome, StepResult
from .store import IdentityError, IdentityService, ResourceStore, StoreError

logger = logging.getLogger(__name__)

MEMBERS_TABLE = "organization_members"

# Children before parents. Applications are removed per listing, so they sit
# between candidates and the listings they point at.
CASCADE_ORDER = (
    "candidates",
    "job_applications",
    "job_listings",
    MEMBERS_TABLE,
    "organizations",
)


# ----------------------------
# Errors
# ----------------------------
class DeletionError(Exception):
    """Base for every way an account deletion can fail."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, details: Optional[str] = None, report: Optional[DeletionReport] = None):
        super().__init__(details or self.error)
        self.details = details
        self.report = report

    def to_content(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {"error": self.error}
        if self.details:
            content["details"] = self.details
        if self.report is not None:
            content["report"] = self.report.model_dump()
        return content


class DeletionUnconfigured(DeletionError):
    status_code = 503
    error = "Delete account feature is not configured. Please contact administrator."


class DeletionBadRequest(DeletionError):
    status_code = 400
    error = "User ID is required"


class MembershipLookupFailed(DeletionError):
    error = "Failed to fetch user data"


class CleanupIncomplete(DeletionError):
    """Some organization data could not be removed; the identity was kept so a retry can finish."""
    error = "Failed to remove account data"


class IdentityDeletionFailed(DeletionError):
    """
    Every data delete went through but the identity record survived. Nothing
    is rolled back, so this state needs manual remediation.
    """
    error = "Failed to delete user account"

    def to_content(self) -> Dict[str, Any]:
        content = super().to_content()
        content["inconsistent"] = True
        return content


# ----------------------------
# Orchestrator
# ----------------------------
class AccountDeletionService:
    def __init__(self, store: Optional[ResourceStore], identity: Optional[IdentityService]):
        self.store = store
        self.identity = identity

    def delete_account(self, user_id: Optional[str]) -> DeletionReport:
        """
        Delete a user's account and everything only they own.

        Raises a DeletionError subclass on failure. The caller is expected to
        have authenticated the request for ``user_id`` already.
        """
        if self.store is None or self.identity is None:
            logger.error("Service role key not configured, refusing to delete account")
            raise DeletionUnconfigured("Service role key is missing")

        if not user_id or not str(user_id).strip():
            raise DeletionBadRequest()

        logger.info(f"Starting account deletion for user {user_id}")
        report = DeletionReport(user_id=user_id)

        try:
            owned_org_ids = self._owned_organization_ids(user_id)
        except StoreError as e:
            logger.error(f"Could not fetch owner memberships for {user_id}: {e}")
            raise MembershipLookupFailed(str(e)) from e

        logger.info(f"User {user_id} owns {len(owned_org_ids)} organization(s)")

        for org_id in owned_org_ids:
            report.organizations.append(self._process_organization(user_id, org_id))

        failed = report.failed_organizations
        if failed:
            failed_ids = ", ".join(o.organization_id for o in failed)
            logger.error(f"Account deletion for {user_id} stopped; cleanup failed for: {failed_ids}")
            raise CleanupIncomplete(
                f"Could not remove data for organization(s): {failed_ids}. "
                "The account was not deleted and the request can be retried.",
                report=report,
            )

        try:
            report.memberships_removed = self.store.delete(MEMBERS_TABLE, {"user_id": user_id})
        except StoreError as e:
            logger.error(f"Could not delete remaining memberships for {user_id}: {e}")
            raise CleanupIncomplete(
                f"Could not remove remaining memberships: {e}. "
                "The account was not deleted and the request can be retried.",
                report=report,
            ) from e

        try:
            report.identity_deleted = self.identity.delete_user(user_id)
        except IdentityError as e:
            logger.error(f"Identity deletion failed for {user_id} after data cleanup: {e}")
            raise IdentityDeletionFailed(
                f"{e}. Account data has already been removed but the login identity "
                "still exists; it must be deleted manually.",
                report=report,
            ) from e

        logger.info(
            f"Account {user_id} deleted: "
            f"{sum(o.outcome == 'deleted' for o in report.organizations)} organization(s) removed, "
            f"{sum(o.outcome == 'preserved' for o in report.organizations)} preserved, "
            f"{report.memberships_removed} membership(s) removed"
        )
        return report

    def _owned_organization_ids(self, user_id: str) -> List[str]:
        """
        Organizations to process: every one the user holds an owner membership
        in, plus any they created that has no members left. The latter is what
        an earlier attempt leaves behind when it removed the memberships but
        failed on the organization row itself.
        """
        memberships = self.store.select(
            MEMBERS_TABLE,
            {"user_id": user_id, "role": "owner"},
            columns="organization_id, role",
        )
        org_ids = [m["organization_id"] for m in memberships]

        created = self.store.select("organizations", {"created_by": user_id}, columns="id")
        for org in created:
            if org["id"] in org_ids:
                continue
            if not self.store.select(MEMBERS_TABLE, {"organization_id": org["id"]}, columns="id"):
                logger.info(f"Organization {org['id']} created by {user_id} has no members left, resuming its deletion")
                org_ids.append(org["id"])

        return list(dict.fromkeys(org_ids))

    def _process_organization(self, user_id: str, org_id: str) -> OrganizationOutcome:
        try:
            owners = self.store.select(
                MEMBERS_TABLE,
                {"organization_id": org_id, "role": "owner", "status": "active"},
                columns="user_id",
            )
        except StoreError as e:
            logger.error(f"Could not check co-owners of organization {org_id}: {e}")
            return OrganizationOutcome(
                organization_id=org_id,
                outcome="failed",
                steps=self._skipped_steps([]),
                error=str(e),
            )

        if any(owner["user_id"] != user_id for owner in owners):
            logger.info(f"Organization {org_id} has other owners, keeping it")
            return OrganizationOutcome(organization_id=org_id, outcome="preserved")

        logger.info(f"User {user_id} is sole owner of organization {org_id}, deleting it")
        return self._purge_organization(org_id)

    def _purge_organization(self, org_id: str) -> OrganizationOutcome:
        steps: List[StepResult] = []
        try:
            with self.store.transaction():
                self._delete_step(steps, "candidates", {"organization_id": org_id})

                try:
                    listings = self.store.select("job_listings", {"organization_id": org_id}, columns="id")
                except StoreError as e:
                    steps.append(StepResult(
                        resource="job_applications",
                        filters={"organization_id": org_id},
                        status="failed",
                        error=f"could not list job listings: {e}",
                    ))
                    raise

                for listing in listings:
                    self._delete_step(steps, "job_applications", {"job_id": listing["id"]})

                self._delete_step(steps, "job_listings", {"organization_id": org_id})
                self._delete_step(steps, MEMBERS_TABLE, {"organization_id": org_id})
                self._delete_step(steps, "organizations", {"id": org_id})
        except StoreError as e:
            if self.store.transactional:
                for step in steps:
                    if step.status == "deleted":
                        step.status = "rolled_back"
            steps.extend(self._skipped_steps(steps))
            return OrganizationOutcome(
                organization_id=org_id,
                outcome="failed",
                steps=steps,
                error=str(e),
            )

        return OrganizationOutcome(organization_id=org_id, outcome="deleted", steps=steps)

    def _delete_step(self, steps: List[StepResult], resource: str, filters: Dict[str, Any]) -> None:
        try:
            count = self.store.delete(resource, filters)
        except StoreError as e:
            logger.error(f"Error deleting {resource} where {filters}: {e}")
            steps.append(StepResult(resource=resource, filters=filters, status="failed", error=str(e)))
            raise
        steps.append(StepResult(resource=resource, filters=filters, status="deleted", count=count))

    @staticmethod
    def _skipped_steps(steps: List[StepResult]) -> List[StepResult]:
        reached = {step.resource for step in steps}
        return [
            StepResult(resource=resource, status="skipped")
            for resource in CASCADE_ORDER
            if resource not in reached
        ]
