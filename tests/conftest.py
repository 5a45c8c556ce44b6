"""Shared fixtures.

The app runs against an in-memory FakeSupabase injected through
``app.dependency_overrides``. Two tenants are seeded:

- org-a "Acme Realty" (public): admin-a (super_admin), manager-a, employee-a
- org-b "Beta Homes" (private): admin-b (super_admin), employee-b

plus a platform admin without an organization and a freshly signed-up user
("newbie") who has not onboarded yet. Every user authenticates with the
bearer token ``token-<name>``.
"""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient

from app.database.supabase_client import get_auth_client, get_admin_supabase
from app.main import app
from tests.fakes import FakeSupabase

ORG_A = "org-a"
ORG_B = "org-b"

USERS = {
    "admin-a": {"organization_id": ORG_A, "role": "super_admin", "full_name": "Alice Admin"},
    "manager-a": {"organization_id": ORG_A, "role": "manager", "full_name": "Mark Manager"},
    "employee-a": {"organization_id": ORG_A, "role": "employee", "full_name": "Eve Employee"},
    "admin-b": {"organization_id": ORG_B, "role": "super_admin", "full_name": "Bob Admin"},
    "employee-b": {"organization_id": ORG_B, "role": "employee", "full_name": "Ben Employee"},
    "platform": {"organization_id": None, "role": "platform_admin", "full_name": "Pat Platform",
                 "is_platform_admin": True},
    "newbie": {"organization_id": None, "role": "employee", "full_name": "Nina New"},
}


def seed_tenants(db: FakeSupabase):
    db.seed(
        "organizations",
        {"id": ORG_A, "name": "Acme Realty", "slug": "acme", "onboarding_status": "completed",
         "tier": "pro", "is_public": True, "tagline": "Homes that fit",
         "created_at": "2026-01-01T00:00:00+00:00"},
        {"id": ORG_B, "name": "Beta Homes", "slug": "beta", "onboarding_status": "completed",
         "tier": "free", "is_public": False, "created_at": "2026-01-02T00:00:00+00:00"},
    )
    for index, (name, attrs) in enumerate(USERS.items()):
        email = f"{name}@acme.com"
        db.auth.add_user(email, user_id=name, password="Secret123!", token=f"token-{name}")
        db.seed("profiles", {
            "id": name,
            "email": email,
            "is_platform_admin": False,
            "created_at": f"2026-02-0{index + 1}T00:00:00+00:00",
            **attrs,
        })

    db.seed(
        "leads",
        {"id": "lead-a1", "organization_id": ORG_A, "name": "Rahul Sharma", "email": "rahul@mail.com",
         "phone": "+911234567890", "status": "new", "assigned_to": "employee-a",
         "created_by": "employee-a", "created_at": "2026-03-01T00:00:00+00:00"},
        {"id": "lead-a2", "organization_id": ORG_A, "name": "Priya Patel", "email": "priya@mail.com",
         "status": "qualified", "assigned_to": "manager-a",
         "created_by": "manager-a", "created_at": "2026-03-02T00:00:00+00:00"},
        {"id": "lead-a3", "organization_id": ORG_A, "name": "Vikram Rao", "status": "converted",
         "assigned_to": "employee-a", "created_by": "employee-a",
         "created_at": "2026-03-03T00:00:00+00:00"},
        {"id": "lead-b1", "organization_id": ORG_B, "name": "Beta Lead", "status": "new",
         "assigned_to": "employee-b", "created_by": "employee-b",
         "created_at": "2026-03-04T00:00:00+00:00"},
    )
    db.seed(
        "properties",
        {"id": "prop-a1", "organization_id": ORG_A, "title": "Tower A 1201", "status": "available",
         "project_id": "proj-a", "created_at": "2026-03-01T00:00:00+00:00"},
        {"id": "prop-a2", "organization_id": ORG_A, "title": "Tower A 1202", "status": "reserved",
         "project_id": "proj-a", "created_at": "2026-03-02T00:00:00+00:00"},
        {"id": "prop-b1", "organization_id": ORG_B, "title": "Beta Villa 7", "status": "available",
         "created_at": "2026-03-03T00:00:00+00:00"},
    )
    db.seed(
        "call_logs",
        {"id": "call-a1", "organization_id": ORG_A, "lead_id": "lead-a1", "call_sid": "CA-100",
         "call_status": "ringing", "duration": 0, "created_at": "2026-03-05T00:00:00+00:00"},
        {"id": "call-a2", "organization_id": ORG_A, "lead_id": "lead-a3", "call_sid": "CA-101",
         "call_status": "in_progress", "duration": 0, "created_at": "2026-03-06T00:00:00+00:00"},
        {"id": "call-b1", "organization_id": ORG_B, "lead_id": "lead-b1", "call_sid": "CB-200",
         "call_status": "completed", "duration": 42, "created_at": "2026-03-07T00:00:00+00:00"},
    )
    db.seed(
        "audit_logs",
        {"id": "audit-a1", "organization_id": ORG_A, "user_id": "admin-a", "user_name": "Alice Admin",
         "action": "lead.create", "entity_type": "lead", "entity_id": "lead-a1", "metadata": {},
         "created_at": "2026-03-01T00:00:00+00:00"},
        {"id": "audit-a2", "organization_id": ORG_A, "user_id": "admin-a", "user_name": "Alice Admin",
         "action": "user.role_change", "entity_type": "user", "entity_id": "employee-a", "metadata": {},
         "created_at": "2026-03-08T00:00:00+00:00"},
        {"id": "audit-b1", "organization_id": ORG_B, "user_id": "admin-b", "user_name": "Bob Admin",
         "action": "lead.create", "entity_type": "lead", "entity_id": "lead-b1", "metadata": {},
         "created_at": "2026-03-04T00:00:00+00:00"},
    )


@pytest.fixture
def db():
    fake = FakeSupabase()
    seed_tenants(fake)
    return fake


@pytest.fixture
def client(db):
    """TestClient wired to the fake store."""
    app.dependency_overrides[get_auth_client] = lambda: db
    app.dependency_overrides[get_admin_supabase] = lambda: db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    """Authorization headers for a seeded user: ``as_user("employee-a")``."""
    def headers(name: str):
        return {"Authorization": f"Bearer token-{name}"}
    return headers
