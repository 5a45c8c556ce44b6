from pydantic import BaseModel
from typing import Optional, List, Dict


class FeatureResponse(BaseModel):
    feature_key: str
    name: str
    category: str


class MyPermissionsResponse(BaseModel):
    user_id: str
    permissions: List[str]


class RolePermissionsResponse(BaseModel):
    roles: List[str]
    features: Dict[str, List[FeatureResponse]]
    role_permissions: Dict[str, Dict[str, bool]]


class RolePermissionUpdate(BaseModel):
    feature_key: str
    is_enabled: bool


class TargetUser(BaseModel):
    id: str
    role: str
    organization_id: Optional[str] = None


class UserPermissionsResponse(BaseModel):
    user: TargetUser
    all_features: List[FeatureResponse]
    role_permissions: List[str]
    user_permissions: Dict[str, bool]
    effective_permissions: List[str]


class UserPermissionsUpdate(BaseModel):
    permissions: Dict[str, bool]


class UserPermissionsUpdateResponse(BaseModel):
    success: bool = True
    message: str
    override_count: int
