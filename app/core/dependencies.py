"""
Core dependencies for route protection and permission checking.

Chain: resolve session -> load profile -> evaluate permission. Each step is a
FastAPI dependency returning an explicit value that handlers pass on to
services; nothing is stashed on the request.
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.settings import settings
from app.core.errors import Forbidden, NotFound, ServerError, Unauthorized
from app.core.permissions import CallerContext, role_feature_set
from app.database.supabase_client import get_auth_client, get_admin_supabase, first_row
from app.modules.auth.schemas import Identity, Profile
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

PROFILE_COLUMNS = "id, email, full_name, organization_id, role, is_platform_admin"


def get_auth_service(
    supabase: Client = Depends(get_auth_client),
    admin: Client = Depends(get_admin_supabase)
) -> AuthService:
    return AuthService(supabase, admin)


def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Bearer header first, then the session cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    raise Unauthorized()


def get_current_identity(
    token: str = Depends(get_access_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Identity:
    return auth_service.get_identity(token)


def load_profile(user_id: str, admin: Client) -> Profile:
    """Fetch the profile row for a user. Missing -> 404, store failure -> 500."""
    try:
        row = first_row(
            admin.table("profiles").select(PROFILE_COLUMNS).eq("id", user_id)
        )
    except Exception as e:
        logger.error(f"Error loading profile for {user_id}: {e}")
        raise ServerError()
    if not row:
        raise NotFound("Profile")
    return Profile(**row)


def load_overrides(user_id: str, admin: Client) -> Dict[str, bool]:
    """Per-user feature overrides: feature_key -> is_enabled"""
    result = admin.table("dashboard_user_permissions")\
        .select("feature_key, is_enabled")\
        .eq("user_id", user_id)\
        .execute()
    return {row["feature_key"]: bool(row["is_enabled"]) for row in result.data or []}


def load_org_role_rows(organization_id: Optional[str], role: str, admin: Client) -> Dict[str, bool]:
    """Organization-level adjustments to a role's default feature set"""
    if not organization_id:
        return {}
    result = admin.table("dashboard_role_permissions")\
        .select("feature_key, is_enabled")\
        .eq("organization_id", organization_id)\
        .eq("role", role)\
        .execute()
    return {row["feature_key"]: bool(row["is_enabled"]) for row in result.data or []}


def build_caller_context(identity: Identity, admin: Client) -> CallerContext:
    profile = load_profile(identity.id, admin)
    if profile.platform_admin:
        return CallerContext(identity=identity, profile=profile)
    try:
        overrides = load_overrides(identity.id, admin)
        org_rows = load_org_role_rows(profile.organization_id, profile.role, admin)
    except Exception as e:
        logger.error(f"Error loading permissions for {identity.id}: {e}")
        raise ServerError()
    return CallerContext(
        identity=identity,
        profile=profile,
        overrides=overrides,
        role_permissions=role_feature_set(profile.role, org_rows),
    )


def get_caller(
    identity: Identity = Depends(get_current_identity),
    admin: Client = Depends(get_admin_supabase)
) -> CallerContext:
    return build_caller_context(identity, admin)


def require_org_caller(caller: CallerContext = Depends(get_caller)) -> CallerContext:
    """Caller must belong to an organization (platform admins excepted)"""
    if not caller.organization_id and not caller.is_platform_admin:
        raise Forbidden("Organization not found")
    return caller


def require_permission(*feature_keys: str):
    """Factory for a dependency that allows the caller when any of `feature_keys` evaluates true"""
    def check_permission(caller: CallerContext = Depends(get_caller)) -> CallerContext:
        if caller.can_any(*feature_keys):
            return caller
        raise Forbidden(
            f"You don't have permission to perform this action. Required: {' or '.join(feature_keys)}"
        )
    return check_permission


def require_role(*roles: str):
    """Factory for a dependency that compares the caller's role string"""
    def check_role(caller: CallerContext = Depends(get_caller)) -> CallerContext:
        if caller.profile.role in roles or (caller.is_platform_admin and "platform_admin" in roles):
            return caller
        raise Forbidden(f"This action requires one of the following roles: {', '.join(roles)}")
    return check_role
