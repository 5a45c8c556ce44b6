import logging
from supabase import Client
from app.core.errors import ServerError
from app.core.permissions import CallerContext
from app.core.scoping import scope_query
from app.modules.call_logs.schemas import CallLogResponse
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class CallLogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_call_logs(
        self,
        caller: CallerContext,
        lead_id: Optional[str] = None,
        call_status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[CallLogResponse]:
        try:
            query = scope_query(self.supabase.table("call_logs").select("*"), caller.profile)
            if lead_id:
                query = query.eq("lead_id", lead_id)
            if call_status:
                query = query.eq("call_status", call_status)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return [CallLogResponse(**row) for row in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing call logs: {e}")
            raise ServerError("Failed to list call logs")
