from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime

LeadStatus = Literal["new", "contacted", "qualified", "transferred", "converted", "lost"]


class LeadCreate(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    project_id: Optional[str] = None
    notes: Optional[str] = None
    assigned_to: Optional[str] = None


class LeadUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[LeadStatus] = None
    notes: Optional[str] = None
    assigned_to: Optional[str] = None


class LeadResponse(BaseModel):
    id: str
    organization_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = "new"
    call_status: Optional[str] = None
    project_id: Optional[str] = None
    property_id: Optional[str] = None
    notes: Optional[str] = None
    source: Optional[str] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LeadListMetadata(BaseModel):
    page: int
    limit: int
    has_more: bool


class LeadListResponse(BaseModel):
    leads: List[LeadResponse]
    metadata: LeadListMetadata


class BulkDeleteRequest(BaseModel):
    lead_ids: List[str]


class LeadBulkUpdate(BaseModel):
    status: Optional[LeadStatus] = None
    assigned_to: Optional[str] = None


class BulkUpdateRequest(BaseModel):
    lead_ids: List[str]
    updates: LeadBulkUpdate


class BulkActionResponse(BaseModel):
    success: bool = True
    count: int


class LinkPropertyRequest(BaseModel):
    property_id: str
