import logging
from collections import Counter
from supabase import Client
from app.core.errors import ServerError
from app.core.permissions import CallerContext
from app.core.scoping import scope_query
from app.modules.audit.schemas import AuditLogResponse, AuditLogPage, AuditStats
from fastapi import HTTPException
from typing import Optional

logger = logging.getLogger(__name__)

STATS_WINDOW = 5000


class AuditService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_logs(
        self,
        caller: CallerContext,
        page: int = 1,
        page_size: int = 50,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> AuditLogPage:
        """Newest-first audit entries for the caller's organization"""
        try:
            offset = (page - 1) * page_size
            query = self.supabase.table("audit_logs").select("*", count="exact")
            query = scope_query(query, caller.profile)
            if action:
                query = query.eq("action", action)
            if entity_type:
                query = query.eq("entity_type", entity_type)
            if start_date:
                query = query.gte("created_at", start_date)
            if end_date:
                query = query.lte("created_at", end_date)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + page_size - 1)\
                .execute()
            return AuditLogPage(
                logs=[AuditLogResponse(**row) for row in result.data or []],
                total=result.count or 0,
                page=page,
                page_size=page_size,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing audit logs: {e}")
            raise ServerError("Failed to fetch audit logs")

    def stats(self, caller: CallerContext) -> AuditStats:
        """Counts by action and entity type over the most recent STATS_WINDOW entries"""
        try:
            query = scope_query(self.supabase.table("audit_logs").select("action, entity_type"), caller.profile)
            result = query.order("created_at", desc=True).limit(STATS_WINDOW).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error computing audit stats: {e}")
            raise ServerError("Failed to fetch audit stats")
        rows = result.data or []
        return AuditStats(
            total=len(rows),
            by_action=dict(Counter(row.get("action") for row in rows)),
            by_entity_type=dict(Counter(row.get("entity_type") or "unknown" for row in rows)),
        )
