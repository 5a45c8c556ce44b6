from fastapi import APIRouter, Depends, Query
from app.config.settings import settings
from app.core.dependencies import require_permission
from app.core.permissions import CallerContext
from app.database.supabase_client import get_admin_supabase
from app.modules.audit.schemas import AuditLogPage, AuditStats
from app.modules.audit.service import AuditService
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/audit", tags=["audit"])


def get_audit_service(supabase: Client = Depends(get_admin_supabase)) -> AuditService:
    return AuditService(supabase)


@router.get("", response_model=AuditLogPage)
async def list_audit_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1),
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    caller: CallerContext = Depends(require_permission("view_audit_logs")),
    service: AuditService = Depends(get_audit_service)
):
    """Audit trail for the caller's organization"""
    return service.list_logs(
        caller,
        page=page,
        page_size=min(page_size, settings.audit_page_size_max),
        action=action,
        entity_type=entity_type,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/stats", response_model=AuditStats)
async def audit_stats(
    caller: CallerContext = Depends(require_permission("view_audit_logs")),
    service: AuditService = Depends(get_audit_service)
):
    return service.stats(caller)
