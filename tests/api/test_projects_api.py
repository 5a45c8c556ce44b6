"""API tests for /api/projects."""

import pytest


@pytest.fixture
def projects(db):
    db.seed(
        "projects",
        {"id": "proj-a", "organization_id": "org-a", "name": "Acme Heights", "project_type": "residential",
         "project_status": "under_construction", "show_in_inventory": True, "public_visibility": False,
         "created_by": "manager-a", "created_at": "2026-02-10T00:00:00+00:00"},
        {"id": "proj-a-hidden", "organization_id": "org-a", "name": "Acme Plaza", "project_type": "commercial",
         "project_status": "planning", "show_in_inventory": False, "public_visibility": False,
         "created_by": "admin-a", "created_at": "2026-02-11T00:00:00+00:00"},
        {"id": "proj-b", "organization_id": "org-b", "name": "Beta Gardens", "project_status": "ready",
         "show_in_inventory": True, "public_visibility": True,
         "created_by": "admin-b", "created_at": "2026-02-12T00:00:00+00:00"},
    )
    return db


class TestListProjects:
    def test_employee_lists_own_organization(self, client, projects, as_user):
        response = client.get("/api/projects", headers=as_user("employee-a"))

        assert response.status_code == 200
        data = response.json()
        assert [p["id"] for p in data["projects"]] == ["proj-a-hidden", "proj-a"]
        assert data["metadata"] == {"total": 2, "page": 1, "limit": 20, "has_more": False}

    def test_filters(self, client, projects, as_user):
        by_type = client.get("/api/projects?project_type=residential", headers=as_user("employee-a")).json()
        in_inventory = client.get("/api/projects?in_inventory=true", headers=as_user("employee-a")).json()

        assert [p["id"] for p in by_type["projects"]] == ["proj-a"]
        assert [p["id"] for p in in_inventory["projects"]] == ["proj-a"]

    def test_override_can_hide_projects(self, client, projects, as_user):
        projects.seed("dashboard_user_permissions", {
            "user_id": "employee-a", "organization_id": "org-a", "feature_key": "view_projects", "is_enabled": False,
        })

        response = client.get("/api/projects", headers=as_user("employee-a"))

        assert response.status_code == 403


class TestCreateProject:
    def test_employee_cannot_create(self, client, as_user):
        response = client.post("/api/projects", json={"name": "Tower C"}, headers=as_user("employee-a"))

        assert response.status_code == 403

    def test_manager_creates_in_own_organization(self, client, db, as_user):
        response = client.post(
            "/api/projects", json={"name": "  Tower C ", "total_units": 120}, headers=as_user("manager-a")
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Tower C"
        assert data["organization_id"] == "org-a"
        assert data["project_status"] == "planning"
        assert data["created_by"] == "manager-a"
        assert db.rows("audit_logs", action="project.create", entity_id=data["id"])

    def test_blank_name_is_400(self, client, as_user):
        response = client.post("/api/projects", json={"name": " "}, headers=as_user("manager-a"))

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["field"] == "name"


class TestGetAndUpdateProject:
    def test_foreign_project_looks_absent(self, client, projects, as_user):
        response = client.get("/api/projects/proj-b", headers=as_user("employee-a"))

        assert response.status_code == 404

    def test_creator_edits_own_project(self, client, projects, as_user):
        projects.seed("dashboard_user_permissions", {
            "user_id": "manager-a", "organization_id": "org-a", "feature_key": "create_projects", "is_enabled": False,
        })

        response = client.put(
            "/api/projects/proj-a", json={"project_status": "ready"}, headers=as_user("manager-a")
        )

        assert response.status_code == 200
        assert response.json()["project_status"] == "ready"
        assert projects.rows("audit_logs", action="project.edit", entity_id="proj-a")

    def test_employee_cannot_edit_others_project(self, client, projects, as_user):
        response = client.put("/api/projects/proj-a", json={"name": "Mine"}, headers=as_user("employee-a"))

        assert response.status_code == 403
        assert projects.rows("projects", id="proj-a")[0]["name"] == "Acme Heights"

    def test_invalid_status_is_400(self, client, projects, as_user):
        response = client.put(
            "/api/projects/proj-a", json={"project_status": "finished"}, headers=as_user("admin-a")
        )

        assert response.status_code == 400
