from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class OnboardRequest(BaseModel):
    organization_name: Optional[str] = None
    slug: Optional[str] = None
    full_name: Optional[str] = None


class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    onboarding_status: Optional[str] = None
    is_public: Optional[bool] = None
    tagline: Optional[str] = None
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None


class OrganizationResponse(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None
    onboarding_status: str = "pending"
    tier: Optional[str] = None
    is_public: bool = False
    tagline: Optional[str] = None
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicOrganizationResponse(BaseModel):
    name: str
    slug: str
    tagline: Optional[str] = None
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None


class OnboardResponse(BaseModel):
    message: str
    already_onboarded: bool = False
    organization: Optional[OrganizationResponse] = None
    onboarding_status: Optional[str] = None
