from fastapi import APIRouter, Depends, Query
from app.config.settings import settings
from app.core.dependencies import require_permission
from app.core.permissions import CallerContext
from app.database.supabase_client import get_admin_supabase
from app.modules.leads.schemas import (
    LeadCreate, LeadUpdate, LeadResponse, LeadListResponse,
    BulkDeleteRequest, BulkUpdateRequest, BulkActionResponse, LinkPropertyRequest
)
from app.modules.leads.service import LeadService, VIEW_SCOPES
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/leads", tags=["leads"])


def get_lead_service(supabase: Client = Depends(get_admin_supabase)) -> LeadService:
    return LeadService(supabase)


@router.get("", response_model=LeadListResponse)
async def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=100),
    status: Optional[str] = None,
    project_id: Optional[str] = None,
    search: Optional[str] = None,
    caller: CallerContext = Depends(require_permission(*VIEW_SCOPES)),
    service: LeadService = Depends(get_lead_service)
):
    """Leads for the organization, narrowed to own leads when that is all the caller may see"""
    return service.list_leads(caller, page=page, limit=limit, status=status, project_id=project_id, search=search)


@router.post("", response_model=LeadResponse, status_code=201)
async def create_lead(
    data: LeadCreate,
    caller: CallerContext = Depends(require_permission("create_leads")),
    service: LeadService = Depends(get_lead_service)
):
    return service.create_lead(caller, data)


@router.post("/bulk-delete", response_model=BulkActionResponse)
async def bulk_delete_leads(
    body: BulkDeleteRequest,
    caller: CallerContext = Depends(require_permission("delete_leads")),
    service: LeadService = Depends(get_lead_service)
):
    return BulkActionResponse(count=service.bulk_delete(caller, body.lead_ids))


@router.post("/bulk-update", response_model=BulkActionResponse)
async def bulk_update_leads(
    body: BulkUpdateRequest,
    caller: CallerContext = Depends(require_permission("edit_all_leads", "edit_team_leads", "edit_own_leads")),
    service: LeadService = Depends(get_lead_service)
):
    """Apply the same status / assignee change to several leads"""
    return BulkActionResponse(count=service.bulk_update(caller, body.lead_ids, body.updates))


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: str,
    caller: CallerContext = Depends(require_permission(*VIEW_SCOPES)),
    service: LeadService = Depends(get_lead_service)
):
    return service.get_lead(caller, lead_id)


@router.put("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: str,
    data: LeadUpdate,
    caller: CallerContext = Depends(require_permission("edit_all_leads", "edit_team_leads", "edit_own_leads")),
    service: LeadService = Depends(get_lead_service)
):
    return service.update_lead(caller, lead_id, data)


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: str,
    caller: CallerContext = Depends(require_permission("delete_leads")),
    service: LeadService = Depends(get_lead_service)
):
    service.delete_lead(caller, lead_id)
    return {"success": True}


@router.post("/{lead_id}/link-property", response_model=LeadResponse)
async def link_property(
    lead_id: str,
    body: LinkPropertyRequest,
    caller: CallerContext = Depends(require_permission("edit_all_leads", "edit_team_leads", "edit_own_leads")),
    service: LeadService = Depends(get_lead_service)
):
    """Link a property to the lead and reserve it"""
    return service.link_property(caller, lead_id, body.property_id)


@router.post("/{lead_id}/unlink-property", response_model=LeadResponse)
async def unlink_property(
    lead_id: str,
    caller: CallerContext = Depends(require_permission("edit_all_leads", "edit_team_leads", "edit_own_leads")),
    service: LeadService = Depends(get_lead_service)
):
    return service.unlink_property(caller, lead_id)
