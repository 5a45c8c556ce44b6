import logging
from datetime import datetime, timezone
from supabase import Client
from app.config.permissions_config import ROLES
from app.core.audit import log_audit
from app.core.compensation import CompensatingSequence
from app.core.errors import Forbidden, ServerError, ValidationError
from app.core.permissions import CallerContext
from app.core.scoping import scope_query, ensure_same_organization
from app.database.supabase_client import first_row
from app.modules.users.schemas import UserUpdate, UserInvite, UserResponse
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _check_assignable_role(self, caller: CallerContext, role: str):
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role}")
        if role == "platform_admin" and not caller.is_platform_admin:
            raise Forbidden("Only platform admins can grant platform_admin")
        if role == "super_admin" and not (caller.is_platform_admin or caller.profile.role == "super_admin"):
            raise Forbidden("Only super admins can grant super_admin")

    def _get_row(self, caller: CallerContext, user_id: str) -> dict:
        try:
            row = first_row(self.supabase.table("profiles").select("*").eq("id", user_id))
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            raise ServerError("Failed to fetch user")
        return ensure_same_organization(caller.profile, row, "User")

    def _get_managed_row(self, caller: CallerContext, user_id: str) -> dict:
        """Target of an update or delete; platform admin profiles are only managed by platform admins"""
        row = self._get_row(caller, user_id)
        if (row.get("is_platform_admin") or row.get("role") == "platform_admin") and not caller.is_platform_admin:
            raise Forbidden("Cannot modify a platform admin")
        return row

    def list_users(
        self,
        caller: CallerContext,
        limit: int = 20,
        offset: int = 0,
        role: Optional[str] = None
    ) -> List[UserResponse]:
        """Members of the caller's organization (every profile for platform admins)"""
        try:
            query = scope_query(self.supabase.table("profiles").select("*"), caller.profile)
            if role:
                query = query.eq("role", role)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return [UserResponse(**user) for user in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise ServerError("Failed to list users")

    def get_user(self, caller: CallerContext, user_id: str) -> UserResponse:
        return UserResponse(**self._get_row(caller, user_id))

    def update_user(self, caller: CallerContext, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update name and/or role of an organization member"""
        current = self._get_managed_row(caller, user_id)
        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if user_data.full_name is not None:
            update_data["full_name"] = user_data.full_name
        if user_data.role is not None and user_data.role != current.get("role"):
            self._check_assignable_role(caller, user_data.role)
            if user_id == caller.user_id:
                raise ValidationError("You cannot change your own role")
            update_data["role"] = user_data.role

        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating user {user_id}: {e}")
            raise ServerError("Failed to update user")
        if not result.data:
            raise ServerError("Failed to update user")

        if "role" in update_data:
            log_audit(self.supabase, caller, "user.role_change", "user", user_id,
                      {"from": current.get("role"), "to": update_data["role"]})
        return UserResponse(**result.data[0])

    def delete_user(self, caller: CallerContext, user_id: str) -> bool:
        """Remove a member: profile, overrides, then the auth identity"""
        if user_id == caller.user_id:
            raise ValidationError("You cannot delete your own account")
        current = self._get_managed_row(caller, user_id)

        try:
            with CompensatingSequence("delete-user") as seq:
                seq.step(
                    "delete profile",
                    lambda: self.supabase.table("profiles").delete().eq("id", user_id).execute(),
                    undo=lambda: self.supabase.table("profiles").insert(current).execute(),
                )
                seq.step("delete auth user", lambda: self.supabase.auth.admin.delete_user(user_id))
        except Exception as e:
            logger.error(f"Error deleting user {user_id}: {e}")
            raise ServerError("Failed to delete user")

        # Overrides are orphaned data at this point; leftovers are harmless
        try:
            self.supabase.table("dashboard_user_permissions").delete().eq("user_id", user_id).execute()
        except Exception as e:
            logger.warning(f"Could not clear overrides for deleted user {user_id}: {e}")

        log_audit(self.supabase, caller, "user.delete", "user", user_id, {"email": current.get("email")})
        return True

    def invite_user(self, caller: CallerContext, invite: UserInvite) -> UserResponse:
        """Invite by email through the Admin API and create the profile in the caller's organization"""
        self._check_assignable_role(caller, invite.role)
        if not caller.organization_id:
            raise Forbidden("Organization not found")

        try:
            with CompensatingSequence("invite-user") as seq:
                response = seq.step(
                    "invite",
                    lambda: self.supabase.auth.admin.invite_user_by_email(
                        invite.email,
                        {"data": {"full_name": invite.full_name, "organization_id": caller.organization_id}},
                    ),
                )
                if not response or not response.user:
                    raise ServerError("Failed to invite user")
                new_user_id = response.user.id
                seq.on_rollback("invite", lambda: self.supabase.auth.admin.delete_user(new_user_id))
                result = seq.step(
                    "create profile",
                    lambda: self.supabase.table("profiles").upsert({
                        "id": new_user_id,
                        "email": invite.email,
                        "full_name": invite.full_name,
                        "organization_id": caller.organization_id,
                        "role": invite.role,
                        "is_platform_admin": False,
                    }, on_conflict="id").execute(),
                )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already" in error_message.lower():
                raise ValidationError("User already exists")
            logger.error(f"Error inviting {invite.email}: {error_message}")
            raise ServerError("Failed to invite user")

        log_audit(self.supabase, caller, "user.invite", "user", new_user_id,
                  {"email": invite.email, "role": invite.role})
        return UserResponse(**result.data[0])
