from fastapi import APIRouter, Depends, Query
from app.core.dependencies import require_permission
from app.core.permissions import CallerContext
from app.database.supabase_client import get_admin_supabase
from app.modules.call_logs.schemas import CallLogResponse
from app.modules.call_logs.service import CallLogService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/call-logs", tags=["call-logs"])


def get_call_log_service(supabase: Client = Depends(get_admin_supabase)) -> CallLogService:
    return CallLogService(supabase)


@router.get("", response_model=List[CallLogResponse])
async def list_call_logs(
    lead_id: Optional[str] = None,
    call_status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    caller: CallerContext = Depends(require_permission("view_call_logs")),
    service: CallLogService = Depends(get_call_log_service)
):
    """Call history for the caller's organization"""
    return service.list_call_logs(caller, lead_id=lead_id, call_status=call_status, limit=limit, offset=offset)
