import logging
from datetime import datetime, timezone
from supabase import Client
from app.core.audit import log_audit
from app.core.errors import Forbidden, ServerError, ValidationError
from app.core.permissions import CallerContext
from app.core.scoping import scope_query, ensure_same_organization
from app.database.supabase_client import first_row
from app.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListResponse, ProjectListMetadata
)
from typing import Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_row(self, caller: CallerContext, project_id: str) -> dict:
        try:
            row = first_row(self.supabase.table("projects").select("*").eq("id", project_id))
        except Exception as e:
            logger.error(f"Error fetching project {project_id}: {e}")
            raise ServerError("Failed to fetch project")
        return ensure_same_organization(caller.profile, row, "Project")

    def list_projects(
        self,
        caller: CallerContext,
        page: int = 1,
        limit: int = 20,
        project_status: Optional[str] = None,
        project_type: Optional[str] = None,
        in_inventory: Optional[bool] = None
    ) -> ProjectListResponse:
        """Projects of the caller's organization, newest first, with an exact total"""
        try:
            offset = (page - 1) * limit
            query = scope_query(self.supabase.table("projects").select("*", count="exact"), caller.profile)
            if project_status:
                query = query.eq("project_status", project_status)
            if project_type:
                query = query.eq("project_type", project_type)
            if in_inventory is not None:
                query = query.eq("show_in_inventory", in_inventory)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            total = result.count or 0
            return ProjectListResponse(
                projects=[ProjectResponse(**row) for row in result.data or []],
                metadata=ProjectListMetadata(total=total, page=page, limit=limit, has_more=offset + limit < total),
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing projects: {e}")
            raise ServerError("Failed to list projects")

    def get_project(self, caller: CallerContext, project_id: str) -> ProjectResponse:
        return ProjectResponse(**self._get_row(caller, project_id))

    def create_project(self, caller: CallerContext, data: ProjectCreate) -> ProjectResponse:
        name = data.name.strip()
        if not name:
            raise ValidationError("Project name is required",
                                  details=[{"field": "name", "message": "Project name is required"}])
        if not caller.organization_id:
            raise Forbidden("Organization not found")

        payload = data.model_dump()
        payload.update({
            "name": name,
            "organization_id": caller.organization_id,
            "created_by": caller.user_id,
        })
        try:
            result = self.supabase.table("projects").insert(payload).execute()
        except Exception as e:
            logger.error(f"Error creating project: {e}")
            raise ServerError("Failed to create project")
        if not result.data:
            raise ServerError("Failed to create project")

        project = result.data[0]
        log_audit(self.supabase, caller, "project.create", "project", project["id"], {"name": name})
        return ProjectResponse(**project)

    def update_project(self, caller: CallerContext, project_id: str, data: ProjectUpdate) -> ProjectResponse:
        """Creators may edit their own projects; everyone else needs create_projects"""
        current = self._get_row(caller, project_id)
        if not (caller.can("create_projects") or current.get("created_by") == caller.user_id):
            raise Forbidden("You don't have permission to edit this project")

        update_data = data.model_dump(exclude_none=True)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
            if not update_data["name"]:
                raise ValidationError("Project name is required")
        if not update_data:
            raise ValidationError("No fields to update")
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating project {project_id}: {e}")
            raise ServerError("Failed to update project")
        if not result.data:
            raise ServerError("Failed to update project")

        log_audit(self.supabase, caller, "project.edit", "project", project_id,
                  {"fields": sorted(k for k in update_data if k != "updated_at")})
        return ProjectResponse(**result.data[0])
