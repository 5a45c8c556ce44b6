"""API tests for /api/leads.

Covers feature-key gating (including per-user overrides), organization
isolation, own-lead visibility and the compensated property link/unlink.
"""


def grant(db, user_id, feature_key, is_enabled=True):
    db.seed("dashboard_user_permissions", {
        "user_id": user_id,
        "organization_id": "org-a",
        "feature_key": feature_key,
        "is_enabled": is_enabled,
    })


# =============================================================================
# Permission gating
# =============================================================================


class TestDeletePermission:
    def test_employee_without_override_is_denied(self, client, db, as_user):
        response = client.delete("/api/leads/lead-a1", headers=as_user("employee-a"))

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "AUTHORIZATION_ERROR"
        assert "delete_leads" in error["message"]
        assert db.rows("leads", id="lead-a1")

    def test_employee_with_override_is_allowed(self, client, db, as_user):
        grant(db, "employee-a", "delete_leads")

        response = client.delete("/api/leads/lead-a1", headers=as_user("employee-a"))

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert not db.rows("leads", id="lead-a1")
        assert db.rows("audit_logs", action="lead.delete", entity_id="lead-a1")

    def test_override_can_revoke_a_role_feature(self, client, db, as_user):
        grant(db, "employee-a", "view_own_leads", is_enabled=False)

        response = client.get("/api/leads", headers=as_user("employee-a"))

        assert response.status_code == 403

    def test_organization_role_row_enables_feature(self, client, db, as_user):
        db.seed("dashboard_role_permissions", {
            "organization_id": "org-a", "role": "employee", "feature_key": "delete_leads", "is_enabled": True,
        })

        response = client.delete("/api/leads/lead-a1", headers=as_user("employee-a"))

        assert response.status_code == 200


# =============================================================================
# Listing and isolation
# =============================================================================


class TestListLeads:
    def test_employee_sees_only_assigned_leads(self, client, as_user):
        response = client.get("/api/leads", headers=as_user("employee-a"))

        assert response.status_code == 200
        ids = {lead["id"] for lead in response.json()["leads"]}
        assert ids == {"lead-a1", "lead-a3"}

    def test_manager_sees_whole_organization(self, client, as_user):
        response = client.get("/api/leads", headers=as_user("manager-a"))

        ids = [lead["id"] for lead in response.json()["leads"]]
        assert ids == ["lead-a3", "lead-a2", "lead-a1"]

    def test_other_tenant_never_sees_org_a_leads(self, client, as_user):
        response = client.get("/api/leads", headers=as_user("admin-b"))

        ids = {lead["id"] for lead in response.json()["leads"]}
        assert ids == {"lead-b1"}

    def test_platform_admin_sees_every_tenant(self, client, as_user):
        response = client.get("/api/leads", headers=as_user("platform"))

        ids = {lead["id"] for lead in response.json()["leads"]}
        assert {"lead-a1", "lead-b1"} <= ids

    def test_search_and_status_filters(self, client, as_user):
        response = client.get("/api/leads?search=priya", headers=as_user("admin-a"))
        assert [lead["id"] for lead in response.json()["leads"]] == ["lead-a2"]

        response = client.get("/api/leads?status=converted", headers=as_user("admin-a"))
        assert [lead["id"] for lead in response.json()["leads"]] == ["lead-a3"]

    def test_search_with_filter_syntax_characters(self, client, as_user):
        by_email = client.get("/api/leads?search=rahul@mail.com", headers=as_user("admin-a"))
        assert [lead["id"] for lead in by_email.json()["leads"]] == ["lead-a1"]

        wrapped = client.get("/api/leads", params={"search": "(priya),"}, headers=as_user("admin-a"))
        assert wrapped.status_code == 200
        assert [lead["id"] for lead in wrapped.json()["leads"]] == ["lead-a2"]

        only_syntax = client.get("/api/leads", params={"search": "(),"}, headers=as_user("admin-a"))
        assert len(only_syntax.json()["leads"]) == 3

    def test_paging_metadata(self, client, as_user):
        response = client.get("/api/leads?page=1&limit=2", headers=as_user("admin-a"))

        data = response.json()
        assert len(data["leads"]) == 2
        assert data["metadata"] == {"page": 1, "limit": 2, "has_more": True}

    def test_caller_without_organization_is_forbidden(self, client, as_user):
        response = client.get("/api/leads", headers=as_user("newbie"))

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Organization not found"


class TestGetLead:
    def test_foreign_lead_looks_absent(self, client, as_user):
        response = client.get("/api/leads/lead-a1", headers=as_user("admin-b"))

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Lead not found"

    def test_employee_cannot_open_colleagues_lead(self, client, as_user):
        response = client.get("/api/leads/lead-a2", headers=as_user("employee-a"))

        assert response.status_code == 403


# =============================================================================
# Create / update / bulk delete
# =============================================================================


class TestCreateLead:
    def test_employee_lead_is_assigned_to_creator(self, client, db, as_user):
        response = client.post(
            "/api/leads",
            json={"name": "  Anil Kumar ", "phone": "+919999999999", "assigned_to": "manager-a"},
            headers=as_user("employee-a"),
        )

        assert response.status_code == 201
        lead = response.json()
        assert lead["name"] == "Anil Kumar"
        assert lead["assigned_to"] == "employee-a"
        assert lead["organization_id"] == "org-a"
        assert lead["status"] == "new"

    def test_manager_can_assign_on_create(self, client, as_user):
        response = client.post(
            "/api/leads", json={"name": "Anil Kumar", "assigned_to": "employee-a"}, headers=as_user("manager-a")
        )

        assert response.json()["assigned_to"] == "employee-a"

    def test_blank_name_is_rejected(self, client, as_user):
        response = client.post("/api/leads", json={"name": "   "}, headers=as_user("employee-a"))

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["field"] == "name"

    def test_audit_failure_does_not_undo_create(self, client, db, as_user):
        db.fail("audit_logs", "insert")

        response = client.post("/api/leads", json={"name": "Anil Kumar"}, headers=as_user("employee-a"))

        assert response.status_code == 201
        assert db.rows("leads", name="Anil Kumar")


class TestUpdateLead:
    def test_owner_updates_status(self, client, as_user):
        response = client.put("/api/leads/lead-a1", json={"status": "qualified"}, headers=as_user("employee-a"))

        assert response.status_code == 200
        assert response.json()["status"] == "qualified"

    def test_employee_cannot_reassign(self, client, as_user):
        response = client.put("/api/leads/lead-a1", json={"assigned_to": "manager-a"}, headers=as_user("employee-a"))

        assert response.status_code == 403

    def test_invalid_status_is_400(self, client, as_user):
        response = client.put("/api/leads/lead-a1", json={"status": "bogus"}, headers=as_user("manager-a"))

        assert response.status_code == 400


class TestBulkDelete:
    def test_only_own_organization_rows_are_deleted(self, client, db, as_user):
        response = client.post(
            "/api/leads/bulk-delete",
            json={"lead_ids": ["lead-b1", "lead-a1", "lead-missing"]},
            headers=as_user("admin-b"),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 1}
        assert not db.rows("leads", id="lead-b1")
        assert db.rows("leads", id="lead-a1")

    def test_empty_list_is_400(self, client, as_user):
        response = client.post("/api/leads/bulk-delete", json={"lead_ids": []}, headers=as_user("admin-a"))

        assert response.status_code == 400

    def test_own_only_caller_cannot_delete_colleagues_leads(self, client, db, as_user):
        grant(db, "employee-a", "delete_leads")

        single = client.delete("/api/leads/lead-a2", headers=as_user("employee-a"))
        bulk = client.post(
            "/api/leads/bulk-delete", json={"lead_ids": ["lead-a1", "lead-a2"]}, headers=as_user("employee-a")
        )

        assert single.status_code == 403
        assert bulk.json()["count"] == 1
        assert not db.rows("leads", id="lead-a1")
        assert db.rows("leads", id="lead-a2")


class TestBulkUpdate:
    def test_updates_only_own_organization(self, client, db, as_user):
        response = client.post(
            "/api/leads/bulk-update",
            json={"lead_ids": ["lead-a1", "lead-a2", "lead-b1"], "updates": {"status": "contacted"}},
            headers=as_user("manager-a"),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 2}
        assert db.rows("leads", id="lead-a2")[0]["status"] == "contacted"
        assert db.rows("leads", id="lead-b1")[0]["status"] == "new"
        assert db.rows("audit_logs", action="lead.bulk_update")

    def test_own_only_caller_touches_only_assigned_leads(self, client, db, as_user):
        response = client.post(
            "/api/leads/bulk-update",
            json={"lead_ids": ["lead-a1", "lead-a2"], "updates": {"status": "lost"}},
            headers=as_user("employee-a"),
        )

        assert response.json()["count"] == 1
        assert db.rows("leads", id="lead-a1")[0]["status"] == "lost"
        assert db.rows("leads", id="lead-a2")[0]["status"] == "qualified"

    def test_reassigning_needs_assign_leads(self, client, as_user):
        response = client.post(
            "/api/leads/bulk-update",
            json={"lead_ids": ["lead-a1"], "updates": {"assigned_to": "manager-a"}},
            headers=as_user("employee-a"),
        )

        assert response.status_code == 403

    def test_empty_updates_is_400(self, client, as_user):
        response = client.post(
            "/api/leads/bulk-update", json={"lead_ids": ["lead-a1"], "updates": {}}, headers=as_user("manager-a")
        )

        assert response.status_code == 400


# =============================================================================
# Property linkage
# =============================================================================


class TestLinkProperty:
    def test_link_reserves_property(self, client, db, as_user):
        response = client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-a1"}, headers=as_user("employee-a")
        )

        assert response.status_code == 200
        assert response.json()["property_id"] == "prop-a1"
        assert db.rows("properties", id="prop-a1")[0]["status"] == "reserved"
        assert db.rows("leads", id="lead-a1")[0]["project_id"] == "proj-a"

    def test_unavailable_property_is_400(self, client, db, as_user):
        response = client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-a2"}, headers=as_user("employee-a")
        )

        assert response.status_code == 400
        assert db.rows("leads", id="lead-a1")[0].get("property_id") is None

    def test_foreign_property_looks_absent(self, client, as_user):
        response = client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-b1"}, headers=as_user("admin-a")
        )

        assert response.status_code == 404

    def test_failed_reservation_reverts_lead(self, client, db, as_user):
        db.fail("properties", "update")

        response = client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-a1"}, headers=as_user("employee-a")
        )

        assert response.status_code == 500
        lead = db.rows("leads", id="lead-a1")[0]
        assert lead["property_id"] is None
        assert lead["project_id"] is None
        assert db.rows("properties", id="prop-a1")[0]["status"] == "available"

    def test_unlink_releases_reserved_property(self, client, db, as_user):
        client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-a1"}, headers=as_user("employee-a")
        )

        response = client.post("/api/leads/lead-a1/unlink-property", headers=as_user("employee-a"))

        assert response.status_code == 200
        assert response.json()["property_id"] is None
        assert db.rows("properties", id="prop-a1")[0]["status"] == "available"

    def test_relinking_releases_previous_property(self, client, db, as_user):
        db.seed("properties", {
            "id": "prop-a3", "organization_id": "org-a", "title": "Tower A 1203", "status": "available",
            "project_id": "proj-a", "created_at": "2026-03-04T00:00:00+00:00",
        })
        client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-a1"}, headers=as_user("employee-a")
        )

        response = client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-a3"}, headers=as_user("employee-a")
        )

        assert response.status_code == 200
        assert response.json()["property_id"] == "prop-a3"
        assert db.rows("properties", id="prop-a1")[0]["status"] == "available"
        assert db.rows("properties", id="prop-a3")[0]["status"] == "reserved"

    def test_relinking_keeps_previous_property_when_it_was_sold(self, client, db, as_user):
        db.seed("properties", {
            "id": "prop-a3", "organization_id": "org-a", "title": "Tower A 1203", "status": "available",
            "created_at": "2026-03-04T00:00:00+00:00",
        })
        client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-a1"}, headers=as_user("employee-a")
        )
        client.put("/api/inventory/properties/prop-a1/status", json={"status": "sold"}, headers=as_user("manager-a"))

        response = client.post(
            "/api/leads/lead-a1/link-property", json={"property_id": "prop-a3"}, headers=as_user("employee-a")
        )

        assert response.status_code == 200
        assert db.rows("properties", id="prop-a1")[0]["status"] == "sold"
