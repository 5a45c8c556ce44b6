import logging
import re
from datetime import datetime, timezone
from supabase import Client
from app.core.audit import log_audit
from app.core.compensation import CompensatingSequence
from app.core.errors import Forbidden, ServerError, ValidationError
from app.core.permissions import CallerContext
from app.core.scoping import scope_query, ensure_same_organization
from app.database.supabase_client import first_row
from app.modules.inventory.service import PropertyService
from app.modules.leads.schemas import (
    LeadCreate, LeadUpdate, LeadBulkUpdate, LeadResponse, LeadListResponse, LeadListMetadata
)
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

VIEW_SCOPES = ("view_all_leads", "view_team_leads", "view_own_leads")

# Characters with meaning inside a PostgREST or= filter
_FILTER_RESERVED = re.compile(r"[,()\"\\:]")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _search_term(value: str) -> str:
    return " ".join(_FILTER_RESERVED.sub(" ", value).split())


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class LeadService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_row(self, caller: CallerContext, lead_id: str) -> dict:
        try:
            row = first_row(self.supabase.table("leads").select("*").eq("id", lead_id))
        except Exception as e:
            logger.error(f"Error fetching lead {lead_id}: {e}")
            raise ServerError("Failed to fetch lead")
        row = ensure_same_organization(caller.profile, row, "Lead")
        if not caller.can_any("view_all_leads", "view_team_leads") and row.get("assigned_to") != caller.user_id:
            raise Forbidden("You don't have permission to view this lead")
        return row

    def _check_can_edit(self, caller: CallerContext, row: dict):
        owns_lead = row.get("assigned_to") == caller.user_id
        if not (caller.can_any("edit_all_leads", "edit_team_leads") or (owns_lead and caller.can("edit_own_leads"))):
            raise Forbidden("You don't have permission to edit this lead")

    def list_leads(
        self,
        caller: CallerContext,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        project_id: Optional[str] = None,
        search: Optional[str] = None
    ) -> LeadListResponse:
        """Leads visible to the caller. Callers holding only view_own_leads see their assigned leads."""
        try:
            query = scope_query(self.supabase.table("leads").select("*"), caller.profile)
            if not caller.can_any("view_all_leads", "view_team_leads"):
                query = query.eq("assigned_to", caller.user_id)
            if status:
                query = query.eq("status", status)
            if project_id:
                query = query.eq("project_id", project_id)
            term = _search_term(search) if search else ""
            if term:
                query = query.or_(f"name.ilike.%{term}%,email.ilike.%{term}%,phone.ilike.%{term}%")
            offset = (page - 1) * limit
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            leads = [LeadResponse(**row) for row in result.data or []]
            return LeadListResponse(
                leads=leads,
                metadata=LeadListMetadata(page=page, limit=limit, has_more=len(leads) == limit),
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing leads: {e}")
            raise ServerError("Failed to list leads")

    def get_lead(self, caller: CallerContext, lead_id: str) -> LeadResponse:
        return LeadResponse(**self._get_row(caller, lead_id))

    def create_lead(self, caller: CallerContext, data: LeadCreate) -> LeadResponse:
        name = _clean(data.name)
        if not name:
            raise ValidationError("Name is required", details=[{"field": "name", "message": "Name is required"}])
        if not caller.organization_id:
            raise Forbidden("Organization not found")

        # Creator owns the lead unless they may assign it elsewhere
        assigned_to = caller.user_id
        if caller.can("assign_leads") and "assigned_to" in data.model_fields_set:
            assigned_to = data.assigned_to

        try:
            result = self.supabase.table("leads").insert({
                "organization_id": caller.organization_id,
                "name": name,
                "email": _clean(data.email),
                "phone": _clean(data.phone),
                "project_id": data.project_id,
                "notes": _clean(data.notes),
                "status": "new",
                "source": "manual",
                "assigned_to": assigned_to,
                "created_by": caller.user_id,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating lead: {e}")
            raise ServerError("Failed to create lead")
        if not result.data:
            raise ServerError("Failed to create lead")

        lead = result.data[0]
        log_audit(self.supabase, caller, "lead.create", "lead", lead["id"], {"name": name})
        return LeadResponse(**lead)

    def update_lead(self, caller: CallerContext, lead_id: str, data: LeadUpdate) -> LeadResponse:
        current = self._get_row(caller, lead_id)
        self._check_can_edit(caller, current)

        update_data = {}
        for field in ("name", "email", "phone", "notes"):
            if field in data.model_fields_set:
                update_data[field] = _clean(getattr(data, field))
        if "name" in update_data and not update_data["name"]:
            raise ValidationError("Name is required")
        if data.status is not None:
            update_data["status"] = data.status
        if "assigned_to" in data.model_fields_set and data.assigned_to != current.get("assigned_to"):
            if not caller.can("assign_leads"):
                raise Forbidden("You don't have permission to assign leads")
            update_data["assigned_to"] = data.assigned_to
        if not update_data:
            return LeadResponse(**current)
        update_data["updated_at"] = _now()

        try:
            result = self.supabase.table("leads")\
                .update(update_data)\
                .eq("id", lead_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating lead {lead_id}: {e}")
            raise ServerError("Failed to update lead")
        if not result.data:
            raise ServerError("Failed to update lead")

        log_audit(self.supabase, caller, "lead.update", "lead", lead_id,
                  {"fields": sorted(k for k in update_data if k != "updated_at")})
        return LeadResponse(**result.data[0])

    def delete_lead(self, caller: CallerContext, lead_id: str) -> bool:
        current = self._get_row(caller, lead_id)
        try:
            self.supabase.table("leads").delete().eq("id", lead_id).execute()
        except Exception as e:
            logger.error(f"Error deleting lead {lead_id}: {e}")
            raise ServerError("Failed to delete lead")
        log_audit(self.supabase, caller, "lead.delete", "lead", lead_id, {"name": current.get("name")})
        return True

    def bulk_delete(self, caller: CallerContext, lead_ids: List[str]) -> int:
        """Delete the given leads that belong to the caller's organization; returns how many went"""
        if not lead_ids:
            raise ValidationError("lead_ids array is required")
        try:
            query = scope_query(self.supabase.table("leads").delete().in_("id", lead_ids), caller.profile)
            if not caller.can_any("view_all_leads", "view_team_leads"):
                query = query.eq("assigned_to", caller.user_id)
            result = query.execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error bulk deleting leads: {e}")
            raise ServerError("Failed to delete leads")
        count = len(result.data or [])
        log_audit(self.supabase, caller, "lead.bulk_delete", "lead", None,
                  {"requested": len(lead_ids), "deleted": count})
        return count

    def bulk_update(self, caller: CallerContext, lead_ids: List[str], updates: LeadBulkUpdate) -> int:
        """Set status and/or assignee on many leads. Callers limited to edit_own_leads only touch their own."""
        if not lead_ids:
            raise ValidationError("lead_ids array is required")

        update_data = {}
        if updates.status is not None:
            update_data["status"] = updates.status
        if "assigned_to" in updates.model_fields_set:
            if not caller.can("assign_leads"):
                raise Forbidden("You don't have permission to assign leads")
            update_data["assigned_to"] = updates.assigned_to
        if not update_data:
            raise ValidationError("updates object is required")
        update_data["updated_at"] = _now()

        try:
            query = self.supabase.table("leads").update(update_data).in_("id", lead_ids)
            query = scope_query(query, caller.profile)
            if not caller.can_any("edit_all_leads", "edit_team_leads"):
                query = query.eq("assigned_to", caller.user_id)
            result = query.execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error bulk updating leads: {e}")
            raise ServerError("Failed to update leads")
        count = len(result.data or [])
        log_audit(self.supabase, caller, "lead.bulk_update", "lead", None, {
            "requested": len(lead_ids),
            "updated": count,
            "fields": sorted(k for k in update_data if k != "updated_at"),
        })
        return count

    def link_property(self, caller: CallerContext, lead_id: str, property_id: str) -> LeadResponse:
        """
        Attach a property to a lead and reserve it.

        A property the lead held before is released back to available if it
        was only reserved. Any failed step reverts the earlier ones.
        """
        lead = self._get_row(caller, lead_id)
        self._check_can_edit(caller, lead)
        prop = PropertyService(self.supabase).get_property_row(caller, property_id)
        if prop.get("status") != "available":
            raise ValidationError("Property is not available")

        previous_property_id = lead.get("property_id")
        previous = {"property_id": previous_property_id, "project_id": lead.get("project_id")}
        link = {"property_id": property_id, "updated_at": _now()}
        if prop.get("project_id"):
            link["project_id"] = prop["project_id"]

        def set_status(target_id: str, status: str, expected: str):
            return self.supabase.table("properties")\
                .update({"status": status, "updated_at": _now()})\
                .eq("id", target_id)\
                .eq("status", expected)\
                .execute()

        def reserve():
            result = set_status(property_id, "reserved", "available")
            if not result.data:
                raise ValidationError("Property is not available")
            return result

        try:
            with CompensatingSequence("link-property") as seq:
                result = seq.step(
                    "link lead",
                    lambda: self.supabase.table("leads").update(link).eq("id", lead_id).execute(),
                    undo=lambda: self.supabase.table("leads").update(previous).eq("id", lead_id).execute(),
                )
                seq.step(
                    "reserve property",
                    reserve,
                    undo=lambda: set_status(property_id, "available", "reserved"),
                )
                if previous_property_id and previous_property_id != property_id:
                    released = seq.step(
                        "release previous property",
                        lambda: set_status(previous_property_id, "available", "reserved"),
                    )
                    if released.data:
                        seq.on_rollback(
                            "release previous property",
                            lambda: set_status(previous_property_id, "reserved", "available"),
                        )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error linking property {property_id} to lead {lead_id}: {e}")
            raise ServerError("Failed to link property")

        log_audit(self.supabase, caller, "lead.link_property", "lead", lead_id, {"property_id": property_id})
        return LeadResponse(**result.data[0]) if result.data else self.get_lead(caller, lead_id)

    def unlink_property(self, caller: CallerContext, lead_id: str) -> LeadResponse:
        """Detach the lead's property and release it if it was only reserved"""
        lead = self._get_row(caller, lead_id)
        self._check_can_edit(caller, lead)
        property_id = lead.get("property_id")
        if not property_id:
            return LeadResponse(**lead)

        try:
            prop = first_row(self.supabase.table("properties").select("id, status").eq("id", property_id))
        except Exception as e:
            logger.error(f"Error fetching property {property_id}: {e}")
            raise ServerError("Failed to unlink property")

        previous = {"property_id": property_id, "project_id": lead.get("project_id")}
        try:
            with CompensatingSequence("unlink-property") as seq:
                result = seq.step(
                    "unlink lead",
                    lambda: self.supabase.table("leads")
                        .update({"property_id": None, "project_id": None, "updated_at": _now()})
                        .eq("id", lead_id)
                        .execute(),
                    undo=lambda: self.supabase.table("leads").update(previous).eq("id", lead_id).execute(),
                )
                if prop and prop.get("status") == "reserved":
                    seq.step(
                        "release property",
                        lambda: self.supabase.table("properties")
                            .update({"status": "available", "updated_at": _now()})
                            .eq("id", property_id)
                            .execute(),
                    )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error unlinking property from lead {lead_id}: {e}")
            raise ServerError("Failed to unlink property")

        log_audit(self.supabase, caller, "lead.unlink_property", "lead", lead_id, {"property_id": property_id})
        return LeadResponse(**result.data[0]) if result.data else self.get_lead(caller, lead_id)
