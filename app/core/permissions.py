"""
Permission evaluation.

Priority for a single feature key:
1. platform admin -> allow
2. per-user override -> its value
3. role default (static set for the role, adjusted by the organization's
   dashboard_role_permissions rows)
Feature keys that belong to no set are denied.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from app.config.permissions_config import ALL_FEATURE_KEYS, get_default_role_permissions
from app.modules.auth.schemas import Identity, Profile


def role_feature_set(role: str, org_role_rows: Optional[Mapping[str, bool]] = None) -> frozenset:
    """Static defaults for `role` with the organization's enabled/disabled rows applied."""
    granted = set(get_default_role_permissions(role))
    for feature_key, is_enabled in (org_role_rows or {}).items():
        if is_enabled:
            granted.add(feature_key)
        else:
            granted.discard(feature_key)
    return frozenset(granted)


def evaluate(
    profile: Profile,
    feature_key: str,
    overrides: Optional[Mapping[str, bool]] = None,
    role_permissions: Optional[Iterable[str]] = None,
) -> bool:
    """Decide whether `profile` may use `feature_key`.

    `role_permissions` is the resolved feature set for the profile's role; when
    omitted the static default for the role is used.
    """
    if profile.platform_admin:
        return True
    if overrides and feature_key in overrides:
        return bool(overrides[feature_key])
    if role_permissions is None:
        role_permissions = get_default_role_permissions(profile.role)
    return feature_key in role_permissions


def effective_permissions(
    profile: Profile,
    overrides: Optional[Mapping[str, bool]] = None,
    role_permissions: Optional[Iterable[str]] = None,
) -> List[str]:
    if profile.platform_admin:
        return sorted(ALL_FEATURE_KEYS)
    if role_permissions is None:
        role_permissions = get_default_role_permissions(profile.role)
    granted = set(role_permissions)
    for feature_key, is_enabled in (overrides or {}).items():
        if is_enabled:
            granted.add(feature_key)
        else:
            granted.discard(feature_key)
    return sorted(granted)


class CallerContext(BaseModel):
    """Everything a handler knows about the caller. Passed explicitly to services."""
    identity: Identity
    profile: Profile
    overrides: Dict[str, bool] = Field(default_factory=dict)
    role_permissions: frozenset = Field(default_factory=frozenset)

    @property
    def user_id(self) -> str:
        return self.identity.id

    @property
    def organization_id(self) -> Optional[str]:
        return self.profile.organization_id

    @property
    def is_platform_admin(self) -> bool:
        return self.profile.platform_admin

    def can(self, feature_key: str) -> bool:
        return evaluate(self.profile, feature_key, self.overrides, self.role_permissions)

    def can_any(self, *feature_keys: str) -> bool:
        return any(self.can(key) for key in feature_keys)

    def permissions(self) -> List[str]:
        return effective_permissions(self.profile, self.overrides, self.role_permissions)
