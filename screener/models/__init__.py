# screener/models/__init__.py

# Importing every model registers its table on Base.metadata, which the
# SQL store resolves tables from by name.

from .organization import Organization, OrganizationMember
from .candidate import Candidate
from .job import JobListing, JobApplication

__all__ = [
    "Organization",
    "OrganizationMember",
    "Candidate",
    "JobListing",
    "JobApplication",
]
