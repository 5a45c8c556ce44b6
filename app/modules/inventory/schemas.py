from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

PropertyStatus = Literal["available", "reserved", "sold", "blocked"]


class PropertyCreate(BaseModel):
    title: str
    project_id: Optional[str] = None
    unit_type: Optional[str] = None
    price: Optional[float] = None
    status: PropertyStatus = "available"


class PropertyStatusUpdate(BaseModel):
    status: PropertyStatus


class PropertyResponse(BaseModel):
    id: str
    organization_id: str
    project_id: Optional[str] = None
    title: str
    unit_type: Optional[str] = None
    price: Optional[float] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
