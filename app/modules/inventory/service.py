import logging
from datetime import datetime, timezone
from supabase import Client
from app.core.audit import log_audit
from app.core.errors import Forbidden, ServerError, ValidationError
from app.core.permissions import CallerContext
from app.core.scoping import scope_query, ensure_same_organization
from app.database.supabase_client import first_row
from app.modules.inventory.schemas import PropertyCreate, PropertyResponse
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class PropertyService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_property_row(self, caller: CallerContext, property_id: str) -> dict:
        try:
            row = first_row(self.supabase.table("properties").select("*").eq("id", property_id))
        except Exception as e:
            logger.error(f"Error fetching property {property_id}: {e}")
            raise ServerError("Failed to fetch property")
        return ensure_same_organization(caller.profile, row, "Property")

    def list_properties(
        self,
        caller: CallerContext,
        status: Optional[str] = None,
        project_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[PropertyResponse]:
        try:
            query = scope_query(self.supabase.table("properties").select("*"), caller.profile)
            if status:
                query = query.eq("status", status)
            if project_id:
                query = query.eq("project_id", project_id)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return [PropertyResponse(**row) for row in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing properties: {e}")
            raise ServerError("Failed to list properties")

    def get_property(self, caller: CallerContext, property_id: str) -> PropertyResponse:
        return PropertyResponse(**self.get_property_row(caller, property_id))

    def create_property(self, caller: CallerContext, data: PropertyCreate) -> PropertyResponse:
        if not data.title.strip():
            raise ValidationError("Title is required")
        if not caller.organization_id:
            raise Forbidden("Organization not found")
        try:
            result = self.supabase.table("properties").insert({
                "organization_id": caller.organization_id,
                "project_id": data.project_id,
                "title": data.title.strip(),
                "unit_type": data.unit_type,
                "price": data.price,
                "status": data.status,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating property: {e}")
            raise ServerError("Failed to create property")
        if not result.data:
            raise ServerError("Failed to create property")
        created = result.data[0]
        log_audit(self.supabase, caller, "property.create", "property", created["id"], {"title": created["title"]})
        return PropertyResponse(**created)

    def update_status(self, caller: CallerContext, property_id: str, status: str) -> PropertyResponse:
        current = self.get_property_row(caller, property_id)
        try:
            result = self.supabase.table("properties")\
                .update({"status": status, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", property_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating property {property_id}: {e}")
            raise ServerError("Failed to update property status")
        if not result.data:
            raise ServerError("Failed to update property status")
        log_audit(self.supabase, caller, "property.status_change", "property", property_id,
                  {"from": current.get("status"), "to": status})
        return PropertyResponse(**result.data[0])
