import uuid
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from screener.config import Settings
from screener.db.base import Base
from screener.dependencies import get_identity_service, get_resource_store, get_settings
from screener.main import app
from screener.services.sql_store import SqlAlchemyResourceStore
from screener.services.store import IdentityError, IdentityService, ResourceStore, StoreError


class FakeStore(ResourceStore):
    """In-memory store that records every call and can be told to fail."""

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.calls: List[tuple] = []
        self._failures: List[tuple] = []

    def fail(self, op: str, table: str, when: Optional[Dict[str, Any]] = None, message: str = "boom"):
        """Make ``op`` on ``table`` raise StoreError, optionally only when filters include ``when``."""
        self._failures.append((op, table, when or {}, message))

    def _record(self, op: str, table: str, filters: Dict[str, Any]):
        self.calls.append((op, table, dict(filters)))
        for f_op, f_table, when, message in self._failures:
            if f_op == op and f_table == table and all(filters.get(k) == v for k, v in when.items()):
                raise StoreError(message)

    @staticmethod
    def _matches(row: dict, filters: Dict[str, Any]) -> bool:
        return all(row.get(k) == v for k, v in filters.items())

    def select(self, table, filters, columns="*"):
        self._record("select", table, filters)
        rows = [r for r in self.tables.get(table, []) if self._matches(r, filters)]
        if columns.strip() == "*":
            return [dict(r) for r in rows]
        names = [c.strip() for c in columns.split(",")]
        return [{n: r.get(n) for n in names} for r in rows]

    def insert(self, table, record):
        row = dict(record)
        row.setdefault("id", str(uuid.uuid4()))
        self.tables.setdefault(table, []).append(row)
        return dict(row)

    def update(self, table, filters, values):
        self._record("update", table, filters)
        changed = 0
        for row in self.tables.get(table, []):
            if self._matches(row, filters):
                row.update(values)
                changed += 1
        return changed

    def delete(self, table, filters):
        self._record("delete", table, filters)
        rows = self.tables.get(table, [])
        kept = [r for r in rows if not self._matches(r, filters)]
        self.tables[table] = kept
        return len(rows) - len(kept)

    def rows(self, table: str, **filters) -> List[dict]:
        return [r for r in self.tables.get(table, []) if self._matches(r, filters)]

    @property
    def deletes(self) -> List[tuple]:
        return [(table, filters) for op, table, filters in self.calls if op == "delete"]


class FakeIdentity(IdentityService):
    def __init__(self, users=()):
        self.users = set(users)
        self.calls: List[str] = []
        self.error: Optional[str] = None

    def delete_user(self, user_id):
        self.calls.append(user_id)
        if self.error:
            raise IdentityError(self.error)
        if user_id not in self.users:
            return False
        self.users.remove(user_id)
        return True


def seed_organization(store, org_id, members=(), listings=None, candidates=0):
    """
    Create an organization with memberships, listings and candidates.

    ``members`` holds (user_id, role, status) tuples; ``listings`` maps a
    listing id to how many applications it has.
    """
    creator = next((user_id for user_id, role, _ in members if role == "owner"), None)
    store.insert("organizations", {"id": org_id, "name": f"Org {org_id}", "created_by": creator})
    for user_id, role, member_status in members:
        store.insert("organization_members", {
            "organization_id": org_id,
            "user_id": user_id,
            "user_email": f"{user_id}@example.com",
            "role": role,
            "status": member_status,
        })
    candidate_ids = [
        store.insert("candidates", {"organization_id": org_id, "first_name": f"Cand {i}"})["id"]
        for i in range(candidates)
    ]
    for listing_id, app_count in (listings or {}).items():
        store.insert("job_listings", {"id": listing_id, "organization_id": org_id, "title": f"Role {listing_id}"})
        for i in range(app_count):
            store.insert("job_applications", {
                "job_id": listing_id,
                "candidate_id": candidate_ids[i % len(candidate_ids)] if candidate_ids else None,
            })


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def identity():
    return FakeIdentity(users={"user-x", "user-y", "user-z"})


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    return SqlAlchemyResourceStore(session_factory)


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        SUPABASE_URL="https://example.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="service-role-key-1234",
    )


@pytest.fixture
def client(store, identity, test_settings):
    app.dependency_overrides[get_resource_store] = lambda: store
    app.dependency_overrides[get_identity_service] = lambda: identity
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seed():
    return seed_organization
