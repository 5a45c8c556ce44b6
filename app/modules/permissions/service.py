import logging
from datetime import datetime, timezone
from supabase import Client
from app.config.permissions_config import FEATURES, CONFIGURABLE_ROLES, get_features_by_category
from app.core.audit import log_audit
from app.core.compensation import CompensatingSequence
from app.core.dependencies import PROFILE_COLUMNS, load_org_role_rows, load_overrides
from app.core.errors import Forbidden, NotFound, ServerError, ValidationError
from app.core.permissions import CallerContext, role_feature_set, effective_permissions
from app.database.supabase_client import first_row
from app.modules.auth.schemas import Profile
from app.modules.permissions.schemas import (
    FeatureResponse, RolePermissionsResponse, TargetUser,
    UserPermissionsResponse, UserPermissionsUpdateResponse
)
from fastapi import HTTPException
from typing import Dict, List

logger = logging.getLogger(__name__)


def _feature_list() -> List[FeatureResponse]:
    return [
        FeatureResponse(feature_key=key, name=meta["name"], category=meta["category"])
        for key, meta in FEATURES.items()
    ]


class PermissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_features(self) -> Dict[str, List[FeatureResponse]]:
        return {
            category: [
                FeatureResponse(feature_key=f["feature_key"], name=f["name"], category=f["category"])
                for f in features
            ]
            for category, features in get_features_by_category().items()
        }

    def get_role_permissions(self, caller: CallerContext) -> RolePermissionsResponse:
        """Per-role feature maps for the caller's organization"""
        try:
            role_permissions = {}
            for role in CONFIGURABLE_ROLES:
                granted = role_feature_set(role, load_org_role_rows(caller.organization_id, role, self.supabase))
                role_permissions[role] = {key: key in granted for key in FEATURES}
            return RolePermissionsResponse(
                roles=list(CONFIGURABLE_ROLES),
                features=self.get_features(),
                role_permissions=role_permissions,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching role permissions: {e}")
            raise ServerError("Failed to fetch role permissions")

    def update_role_permission(self, caller: CallerContext, role: str, feature_key: str, is_enabled: bool) -> dict:
        if role not in CONFIGURABLE_ROLES:
            raise ValidationError(f"Unknown role: {role}")
        if feature_key not in FEATURES:
            raise ValidationError(f"Unknown feature: {feature_key}")
        if not caller.organization_id:
            raise Forbidden("Organization not found")
        try:
            self.supabase.table("dashboard_role_permissions").upsert({
                "organization_id": caller.organization_id,
                "role": role,
                "feature_key": feature_key,
                "is_enabled": is_enabled,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }, on_conflict="organization_id,role,feature_key").execute()
        except Exception as e:
            logger.error(f"Error updating role permission: {e}")
            raise ServerError("Failed to update permission")

        log_audit(self.supabase, caller, "role_permission.update", "role", role,
                  {"feature_key": feature_key, "is_enabled": is_enabled})
        return {
            "success": True,
            "message": f"Permission {feature_key} {'enabled' if is_enabled else 'disabled'} for {role}",
        }

    def _get_target_profile(self, caller: CallerContext, user_id: str) -> Profile:
        try:
            row = first_row(self.supabase.table("profiles").select(PROFILE_COLUMNS).eq("id", user_id))
        except Exception as e:
            logger.error(f"Error loading target profile {user_id}: {e}")
            raise ServerError()
        if not row:
            raise NotFound("User")
        target = Profile(**row)
        if not caller.is_platform_admin and target.organization_id != caller.organization_id:
            raise Forbidden("Forbidden - Different organization")
        return target

    def get_user_permissions(self, caller: CallerContext, user_id: str) -> UserPermissionsResponse:
        """Role defaults, overrides and the resulting effective set for one user"""
        target = self._get_target_profile(caller, user_id)
        try:
            role_set = role_feature_set(
                target.role, load_org_role_rows(target.organization_id, target.role, self.supabase)
            )
            overrides = load_overrides(user_id, self.supabase)
        except Exception as e:
            logger.error(f"Error fetching permissions for {user_id}: {e}")
            raise ServerError("Failed to fetch user permissions")
        return UserPermissionsResponse(
            user=TargetUser(id=target.id, role=target.role, organization_id=target.organization_id),
            all_features=_feature_list(),
            role_permissions=sorted(role_set),
            user_permissions=overrides,
            effective_permissions=effective_permissions(target, overrides, role_set),
        )

    def update_user_permissions(
        self, caller: CallerContext, user_id: str, permissions: Dict[str, bool]
    ) -> UserPermissionsUpdateResponse:
        """Replace a user's overrides. Only entries that differ from the role default are stored."""
        unknown = sorted(key for key in permissions if key not in FEATURES)
        if unknown:
            raise ValidationError(
                "Unknown feature keys",
                details=[{"field": key, "message": "Unknown feature"} for key in unknown],
            )
        target = self._get_target_profile(caller, user_id)
        if target.role == "super_admin" or target.platform_admin:
            raise Forbidden("Cannot modify super admin permissions")

        try:
            role_set = role_feature_set(
                target.role, load_org_role_rows(target.organization_id, target.role, self.supabase)
            )
            previous = self.supabase.table("dashboard_user_permissions")\
                .select("*")\
                .eq("user_id", user_id)\
                .execute().data or []
        except Exception as e:
            logger.error(f"Error preparing permission update for {user_id}: {e}")
            raise ServerError("Failed to update permissions")

        rows = [
            {
                "user_id": user_id,
                "organization_id": target.organization_id,
                "feature_key": key,
                "is_enabled": enabled,
                "granted_by": caller.user_id,
            }
            for key, enabled in sorted(permissions.items())
            if enabled != (key in role_set)
        ]

        def clear():
            self.supabase.table("dashboard_user_permissions").delete().eq("user_id", user_id).execute()

        def restore():
            clear()
            if previous:
                self.supabase.table("dashboard_user_permissions").insert(previous).execute()

        try:
            with CompensatingSequence("user-permissions") as seq:
                seq.step("clear overrides", clear, undo=restore)
                if rows:
                    seq.step("insert overrides",
                             lambda: self.supabase.table("dashboard_user_permissions").insert(rows).execute())
        except Exception as e:
            logger.error(f"Error updating permissions for {user_id}: {e}")
            raise ServerError("Failed to update permissions")

        log_audit(self.supabase, caller, "user_permissions.update", "user", user_id,
                  {"overrides": {row["feature_key"]: row["is_enabled"] for row in rows}})
        return UserPermissionsUpdateResponse(
            message="Permissions updated successfully",
            override_count=len(rows),
        )

    def reset_user_permissions(self, caller: CallerContext, user_id: str) -> dict:
        """Drop every override so the user falls back to role defaults"""
        self._get_target_profile(caller, user_id)
        try:
            self.supabase.table("dashboard_user_permissions")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error resetting permissions for {user_id}: {e}")
            raise ServerError("Failed to reset permissions")
        log_audit(self.supabase, caller, "user_permissions.reset", "user", user_id)
        return {"success": True, "message": "User permissions reset to role defaults"}
