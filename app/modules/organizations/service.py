import logging
from datetime import datetime, timezone
from supabase import Client
from app.core.audit import log_audit
from app.core.compensation import CompensatingSequence
from app.core.errors import NotFound, ServerError, ValidationError
from app.core.permissions import CallerContext
from app.database.supabase_client import first_row
from app.modules.organizations.schemas import (
    OnboardRequest, OnboardResponse, OrganizationUpdate,
    OrganizationResponse, PublicOrganizationResponse
)
from fastapi import HTTPException

logger = logging.getLogger(__name__)

ONBOARDING_STATUSES = ("pending", "completed")


class OrganizationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def onboard(self, caller: CallerContext, request: OnboardRequest) -> OnboardResponse:
        """Create an organization for a caller who has none; the caller becomes its super_admin"""
        if caller.organization_id:
            return OnboardResponse(message="User already onboarded", already_onboarded=True)

        org_row = {
            "name": (request.organization_name or "").strip() or "My Organization",
            "onboarding_status": "pending",
            "tier": "free",
            "is_public": False,
        }
        if request.slug:
            org_row["slug"] = request.slug.strip().lower()

        try:
            with CompensatingSequence("onboard") as seq:
                result = seq.step(
                    "create organization",
                    lambda: self.supabase.table("organizations").insert(org_row).execute(),
                )
                if not result.data:
                    raise ServerError("Failed to create organization")
                org = result.data[0]
                seq.on_rollback(
                    "create organization",
                    lambda: self.supabase.table("organizations").delete().eq("id", org["id"]).execute(),
                )
                profile_update = {"organization_id": org["id"], "role": "super_admin"}
                if request.full_name:
                    profile_update["full_name"] = request.full_name
                seq.step(
                    "assign profile",
                    lambda: self.supabase.table("profiles").update(profile_update).eq("id", caller.user_id).execute(),
                )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Onboarding failed for {caller.user_id}: {e}")
            raise ServerError("Onboarding failed")

        log_audit(self.supabase, caller, "organization.created", "organization", org["id"],
                  {"organization_name": org["name"], "user_role": "super_admin"},
                  organization_id=org["id"])
        logger.info(f"Organization {org['id']} created by {caller.user_id}")
        return OnboardResponse(
            message="Onboarding successful",
            organization=OrganizationResponse(**org),
            onboarding_status="pending",
        )

    def get_organization(self, organization_id: str) -> OrganizationResponse:
        if not organization_id:
            raise NotFound("Organization")
        try:
            row = first_row(self.supabase.table("organizations").select("*").eq("id", organization_id))
        except Exception as e:
            logger.error(f"Error fetching organization {organization_id}: {e}")
            raise ServerError("Failed to fetch organization")
        if not row:
            raise NotFound("Organization")
        return OrganizationResponse(**row)

    def update_organization(self, caller: CallerContext, data: OrganizationUpdate) -> OrganizationResponse:
        update_data = data.model_dump(exclude_none=True)
        if not update_data:
            raise ValidationError("No fields to update")
        if "onboarding_status" in update_data and update_data["onboarding_status"] not in ONBOARDING_STATUSES:
            raise ValidationError(f"Invalid onboarding status: {update_data['onboarding_status']}")
        if "slug" in update_data:
            update_data["slug"] = update_data["slug"].strip().lower()
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        self.get_organization(caller.organization_id)
        try:
            result = self.supabase.table("organizations")\
                .update(update_data)\
                .eq("id", caller.organization_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating organization {caller.organization_id}: {e}")
            raise ServerError("Failed to update organization")
        if not result.data:
            raise NotFound("Organization")

        log_audit(self.supabase, caller, "organization.update", "organization", caller.organization_id,
                  {"fields": sorted(k for k in update_data if k != "updated_at")})
        return OrganizationResponse(**result.data[0])

    def get_public_profile(self, slug: str) -> PublicOrganizationResponse:
        """Public subset of an organization; hidden organizations look absent"""
        try:
            row = first_row(self.supabase.table("organizations").select("*").eq("slug", slug.lower()))
        except Exception as e:
            logger.error(f"Error fetching public organization {slug}: {e}")
            raise ServerError()
        if not row or not row.get("is_public"):
            raise NotFound("Organization")
        return PublicOrganizationResponse(**row)
