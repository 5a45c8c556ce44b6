from fastapi import APIRouter, Depends, Query
from app.core.dependencies import require_permission
from app.core.permissions import CallerContext
from app.database.supabase_client import get_admin_supabase
from app.modules.inventory.schemas import PropertyCreate, PropertyStatusUpdate, PropertyResponse
from app.modules.inventory.service import PropertyService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/inventory", tags=["inventory"])


def get_property_service(supabase: Client = Depends(get_admin_supabase)) -> PropertyService:
    return PropertyService(supabase)


@router.get("/properties", response_model=List[PropertyResponse])
async def list_properties(
    status: Optional[str] = None,
    project_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    caller: CallerContext = Depends(require_permission("view_inventory", "manage_inventory")),
    service: PropertyService = Depends(get_property_service)
):
    return service.list_properties(caller, status=status, project_id=project_id, limit=limit, offset=offset)


@router.post("/properties", response_model=PropertyResponse, status_code=201)
async def create_property(
    data: PropertyCreate,
    caller: CallerContext = Depends(require_permission("manage_inventory")),
    service: PropertyService = Depends(get_property_service)
):
    return service.create_property(caller, data)


@router.get("/properties/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: str,
    caller: CallerContext = Depends(require_permission("view_inventory", "manage_inventory")),
    service: PropertyService = Depends(get_property_service)
):
    return service.get_property(caller, property_id)


@router.put("/properties/{property_id}/status", response_model=PropertyResponse)
async def update_property_status(
    property_id: str,
    body: PropertyStatusUpdate,
    caller: CallerContext = Depends(require_permission("manage_inventory")),
    service: PropertyService = Depends(get_property_service)
):
    """Move a unit between available / reserved / sold / blocked"""
    return service.update_status(caller, property_id, body.status)
