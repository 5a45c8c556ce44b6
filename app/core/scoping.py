"""Tenant isolation helpers. Every tenant-scoped query goes through scope_query."""

from typing import Any, Dict, Optional

from app.core.errors import Forbidden, NotFound
from app.modules.auth.schemas import Profile


def scope_query(query, profile: Profile, column: str = "organization_id"):
    """Filter `query` to the caller's organization. Platform admins see every tenant."""
    if profile.platform_admin:
        return query
    if not profile.organization_id:
        raise Forbidden("Organization not found")
    return query.eq(column, profile.organization_id)


def ensure_same_organization(
    profile: Profile,
    row: Optional[Dict[str, Any]],
    resource: str = "Resource",
    column: str = "organization_id",
) -> Dict[str, Any]:
    """Return `row` if the caller may see it; rows from other tenants look absent."""
    if not row:
        raise NotFound(resource)
    if profile.platform_admin:
        return row
    if not profile.organization_id or row.get(column) != profile.organization_id:
        raise NotFound(resource)
    return row
