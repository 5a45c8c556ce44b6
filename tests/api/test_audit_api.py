"""API tests for /api/audit."""


class TestAuditLogs:
    def test_requires_view_audit_logs(self, client, as_user):
        response = client.get("/api/audit", headers=as_user("employee-a"))

        assert response.status_code == 403

    def test_newest_first_and_scoped(self, client, as_user):
        response = client.get("/api/audit", headers=as_user("manager-a"))

        assert response.status_code == 200
        data = response.json()
        assert [log["id"] for log in data["logs"]] == ["audit-a2", "audit-a1"]
        assert data["total"] == 2

    def test_filters_and_paging(self, client, as_user):
        by_action = client.get("/api/audit?action=lead.create", headers=as_user("admin-a")).json()
        assert [log["id"] for log in by_action["logs"]] == ["audit-a1"]

        since = client.get("/api/audit?start_date=2026-03-05", headers=as_user("admin-a")).json()
        assert [log["id"] for log in since["logs"]] == ["audit-a2"]

        paged = client.get("/api/audit?page=2&page_size=1", headers=as_user("admin-a")).json()
        assert [log["id"] for log in paged["logs"]] == ["audit-a1"]
        assert paged["total"] == 2

    def test_page_size_is_capped(self, client, as_user):
        response = client.get("/api/audit?page_size=5000", headers=as_user("admin-a"))

        assert response.json()["page_size"] == 200

    def test_actions_are_recorded(self, client, as_user):
        client.post("/api/leads", json={"name": "Audit Me"}, headers=as_user("manager-a"))

        logs = client.get("/api/audit?action=lead.create", headers=as_user("manager-a")).json()["logs"]
        assert any(log["user_id"] == "manager-a" and log["user_name"] == "Mark Manager" for log in logs)


class TestAuditStats:
    def test_counts_are_scoped(self, client, as_user):
        response = client.get("/api/audit/stats", headers=as_user("manager-a"))

        assert response.status_code == 200
        assert response.json() == {
            "total": 2,
            "by_action": {"user.role_change": 1, "lead.create": 1},
            "by_entity_type": {"user": 1, "lead": 1},
        }

    def test_platform_admin_counts_every_tenant(self, client, as_user):
        response = client.get("/api/audit/stats", headers=as_user("platform"))

        assert response.json()["by_action"]["lead.create"] == 2

    def test_requires_view_audit_logs(self, client, as_user):
        response = client.get("/api/audit/stats", headers=as_user("employee-a"))

        assert response.status_code == 403
