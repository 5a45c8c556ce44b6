from fastapi import APIRouter, Depends
from app.core.dependencies import get_caller, require_org_caller, require_permission
from app.core.permissions import CallerContext
from app.database.supabase_client import get_admin_supabase
from app.modules.organizations.schemas import (
    OnboardRequest, OnboardResponse, OrganizationUpdate,
    OrganizationResponse, PublicOrganizationResponse
)
from app.modules.organizations.service import OrganizationService
from supabase import Client

router = APIRouter(tags=["organizations"])


def get_organization_service(supabase: Client = Depends(get_admin_supabase)) -> OrganizationService:
    return OrganizationService(supabase)


@router.post("/onboard", response_model=OnboardResponse)
async def onboard(
    request: OnboardRequest,
    caller: CallerContext = Depends(get_caller),
    service: OrganizationService = Depends(get_organization_service)
):
    """Create the caller's organization"""
    return service.onboard(caller, request)


@router.get("/organization", response_model=OrganizationResponse)
async def get_organization(
    caller: CallerContext = Depends(require_org_caller),
    service: OrganizationService = Depends(get_organization_service)
):
    return service.get_organization(caller.organization_id)


@router.put("/organization", response_model=OrganizationResponse)
async def update_organization(
    data: OrganizationUpdate,
    caller: CallerContext = Depends(require_permission("manage_settings")),
    service: OrganizationService = Depends(get_organization_service)
):
    """Update settings and public profile of the caller's organization"""
    return service.update_organization(caller, data)


@router.get("/organization/public/{slug}", response_model=PublicOrganizationResponse)
async def get_public_organization(
    slug: str,
    service: OrganizationService = Depends(get_organization_service)
):
    """Unauthenticated public profile"""
    return service.get_public_profile(slug)
