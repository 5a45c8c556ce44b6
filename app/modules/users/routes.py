from fastapi import APIRouter, Depends, Query
from app.core.dependencies import require_permission
from app.core.permissions import CallerContext
from app.database.supabase_client import get_admin_supabase
from app.modules.users.schemas import UserUpdate, UserInvite, UserResponse
from app.modules.users.service import UserService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/users", tags=["users"])
admin_router = APIRouter(prefix="/admin/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_admin_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=List[UserResponse])
async def list_users(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    role: Optional[str] = None,
    caller: CallerContext = Depends(require_permission("view_users", "manage_users")),
    service: UserService = Depends(get_user_service)
):
    """List members of the caller's organization"""
    return service.list_users(caller, limit=limit, offset=offset, role=role)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    caller: CallerContext = Depends(require_permission("view_users", "manage_users")),
    service: UserService = Depends(get_user_service)
):
    return service.get_user(caller, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    caller: CallerContext = Depends(require_permission("manage_users")),
    service: UserService = Depends(get_user_service)
):
    """Update a member's name or role"""
    return service.update_user(caller, user_id, user_data)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    caller: CallerContext = Depends(require_permission("manage_users")),
    service: UserService = Depends(get_user_service)
):
    service.delete_user(caller, user_id)
    return None


@admin_router.post("/invite", response_model=UserResponse, status_code=201)
async def invite_user(
    invite: UserInvite,
    caller: CallerContext = Depends(require_permission("manage_users")),
    service: UserService = Depends(get_user_service)
):
    """Invite a new member into the caller's organization"""
    return service.invite_user(caller, invite)
