from fastapi import APIRouter, Depends
from app.core.dependencies import get_caller, require_permission, require_role
from app.core.permissions import CallerContext
from app.database.supabase_client import get_admin_supabase
from app.modules.permissions.schemas import (
    FeatureResponse, MyPermissionsResponse, RolePermissionsResponse, RolePermissionUpdate,
    UserPermissionsResponse, UserPermissionsUpdate, UserPermissionsUpdateResponse
)
from app.modules.permissions.service import PermissionService
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/permissions", tags=["permissions"])
admin_router = APIRouter(prefix="/admin/users", tags=["permissions"])


def get_permission_service(supabase: Client = Depends(get_admin_supabase)) -> PermissionService:
    return PermissionService(supabase)


@router.get("/my-permissions", response_model=MyPermissionsResponse)
async def my_permissions(caller: CallerContext = Depends(get_caller)):
    """Effective feature keys for the current user"""
    return MyPermissionsResponse(user_id=caller.user_id, permissions=caller.permissions())


@router.get("/features", response_model=Dict[str, List[FeatureResponse]])
async def list_features(
    caller: CallerContext = Depends(get_caller),
    service: PermissionService = Depends(get_permission_service)
):
    """Feature catalogue grouped by category"""
    return service.get_features()


@router.get("/roles", response_model=RolePermissionsResponse)
async def list_role_permissions(
    caller: CallerContext = Depends(require_role("super_admin", "platform_admin")),
    service: PermissionService = Depends(get_permission_service)
):
    """All configurable roles and their feature maps (admin only)"""
    return service.get_role_permissions(caller)


@router.put("/roles/{role}")
async def update_role_permission(
    role: str,
    body: RolePermissionUpdate,
    caller: CallerContext = Depends(require_role("super_admin", "platform_admin")),
    service: PermissionService = Depends(get_permission_service)
):
    """Enable or disable one feature for a role in the caller's organization"""
    return service.update_role_permission(caller, role, body.feature_key, body.is_enabled)


@admin_router.get("/{user_id}/permissions", response_model=UserPermissionsResponse)
async def get_user_permissions(
    user_id: str,
    caller: CallerContext = Depends(require_permission("manage_permissions")),
    service: PermissionService = Depends(get_permission_service)
):
    return service.get_user_permissions(caller, user_id)


@admin_router.put("/{user_id}/permissions", response_model=UserPermissionsUpdateResponse)
async def update_user_permissions(
    user_id: str,
    body: UserPermissionsUpdate,
    caller: CallerContext = Depends(require_permission("manage_permissions")),
    service: PermissionService = Depends(get_permission_service)
):
    """Replace the user's per-feature overrides"""
    return service.update_user_permissions(caller, user_id, body.permissions)


@admin_router.post("/{user_id}/permissions/reset")
async def reset_user_permissions(
    user_id: str,
    caller: CallerContext = Depends(require_permission("manage_permissions")),
    service: PermissionService = Depends(get_permission_service)
):
    """Reset user to role-based permissions"""
    return service.reset_user_permissions(caller, user_id)
