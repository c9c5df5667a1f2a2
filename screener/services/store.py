"""
Interfaces the privileged services are written against.

The orchestrators never talk to supabase-py or SQLAlchemy directly; they get a
``ResourceStore`` and an ``IdentityService`` injected, which keeps the hosted
backend swappable for a fake in tests.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

Row = Dict[str, Any]


class StoreError(Exception):
    """A select, insert, update or delete against the resource store failed."""


class IdentityError(Exception):
    """The identity-management service rejected or failed a request."""


class ResourceStore(ABC):
    """Row storage addressed by table name and equality filters."""

    # True when transaction() gives commit/rollback semantics.
    transactional: bool = False

    @abstractmethod
    def select(self, table: str, filters: Dict[str, Any], columns: str = "*") -> List[Row]:
        ...

    @abstractmethod
    def insert(self, table: str, record: Row) -> Row:
        ...

    @abstractmethod
    def update(self, table: str, filters: Dict[str, Any], values: Row) -> int:
        """Set ``values`` on matching rows and return how many were changed."""

    @abstractmethod
    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        """Delete matching rows and return how many went away. Zero matches is not an error."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        yield


class IdentityService(ABC):
    """The authentication provider's user administration API."""

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        """
        Delete the identity record. Returns False when it was already gone,
        raises IdentityError on any other failure.
        """
