# screener/schemas/account.py

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

StepStatus = Literal["deleted", "failed", "skipped", "rolled_back"]
OrganizationOutcomeKind = Literal["deleted", "preserved", "failed"]


class DeleteAccountRequest(BaseModel):
    """
    Request body for account deletion. ``userId`` is optional at the schema
    level so a missing value is answered with the service's own 400, not a 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")


class StepResult(BaseModel):
    """One delete in an organization's cascade."""
    resource: str
    filters: Dict[str, Any] = Field(default_factory=dict)
    status: StepStatus
    count: Optional[int] = None
    error: Optional[str] = None


class OrganizationOutcome(BaseModel):
    organization_id: str
    outcome: OrganizationOutcomeKind
    steps: List[StepResult] = Field(default_factory=list)
    error: Optional[str] = None


class DeletionReport(BaseModel):
    """What an account deletion did, organization by organization."""
    user_id: str
    organizations: List[OrganizationOutcome] = Field(default_factory=list)
    memberships_removed: int = 0
    identity_deleted: bool = False

    @property
    def failed_organizations(self) -> List[OrganizationOutcome]:
        return [o for o in self.organizations if o.outcome == "failed"]


class DeleteAccountResponse(BaseModel):
    message: str
    report: DeletionReport
