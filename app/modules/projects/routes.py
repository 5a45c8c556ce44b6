from fastapi import APIRouter, Depends, Query
from app.config.settings import settings
from app.core.dependencies import require_permission
from app.core.permissions import CallerContext
from app.database.supabase_client import get_admin_supabase
from app.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListResponse
from app.modules.projects.service import ProjectService
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(supabase: Client = Depends(get_admin_supabase)) -> ProjectService:
    return ProjectService(supabase)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=100),
    project_status: Optional[str] = None,
    project_type: Optional[str] = None,
    in_inventory: Optional[bool] = None,
    caller: CallerContext = Depends(require_permission("view_projects")),
    service: ProjectService = Depends(get_project_service)
):
    """List projects; in_inventory=true narrows to projects shown on the inventory board"""
    return service.list_projects(
        caller,
        page=page,
        limit=limit,
        project_status=project_status,
        project_type=project_type,
        in_inventory=in_inventory,
    )


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    caller: CallerContext = Depends(require_permission("create_projects")),
    service: ProjectService = Depends(get_project_service)
):
    return service.create_project(caller, data)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    caller: CallerContext = Depends(require_permission("view_projects")),
    service: ProjectService = Depends(get_project_service)
):
    return service.get_project(caller, project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    caller: CallerContext = Depends(require_permission("view_projects")),
    service: ProjectService = Depends(get_project_service)
):
    return service.update_project(caller, project_id, data)
