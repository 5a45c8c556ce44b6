from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime

ProjectStatus = Literal["planning", "under_construction", "ready", "completed"]


class ProjectCreate(BaseModel):
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    project_type: Optional[str] = None
    project_status: ProjectStatus = "planning"
    total_units: int = 0
    price_range: Optional[str] = None
    show_in_inventory: bool = True
    public_visibility: bool = False


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    project_type: Optional[str] = None
    project_status: Optional[ProjectStatus] = None
    total_units: Optional[int] = None
    price_range: Optional[str] = None
    show_in_inventory: Optional[bool] = None
    public_visibility: Optional[bool] = None


class ProjectResponse(BaseModel):
    id: str
    organization_id: str
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    project_type: Optional[str] = None
    project_status: Optional[str] = "planning"
    total_units: Optional[int] = 0
    price_range: Optional[str] = None
    show_in_inventory: bool = True
    public_visibility: bool = False
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectListMetadata(BaseModel):
    total: int
    page: int
    limit: int
    has_more: bool


class ProjectListResponse(BaseModel):
    projects: List[ProjectResponse]
    metadata: ProjectListMetadata
