"""Tests for audit logging and the admin audit endpoint."""

from datetime import datetime, timedelta, timezone

from dms.models import AuditLog
from dms.services import audit_service
from tests.conftest import headers_for


class TestAuditApi:

    def test_state_changes_are_recorded(self, client, admin):
        h = headers_for(admin)
        category_id = client.post("/api/categories", json={"name": "Finance"}, headers=h).json()["id"]

        entries = client.get("/api/audit", headers=h).json()
        assert entries[0]["action"] == "create"
        assert entries[0]["resource_type"] == "category"
        assert entries[0]["resource_id"] == category_id
        assert entries[0]["user_id"] == admin.id

    def test_filter_by_resource(self, client, admin):
        h = headers_for(admin)
        client.post("/api/categories", json={"name": "Finance"}, headers=h)
        client.post("/api/users", json={"name": "Eve", "email": "eve@example.test", "password": "secret1"}, headers=h)

        entries = client.get("/api/audit?resource_type=user", headers=h).json()
        assert [e["resource_type"] for e in entries] == ["user"]

    def test_admin_only(self, client, alice):
        assert client.get("/api/audit", headers=headers_for(alice)).status_code == 403


class TestPurge:

    def test_old_entries_removed(self, db):
        audit_service.log(db, None, "login", "user")
        old = AuditLog(action="login", resource_type="user", created_at=datetime.now(timezone.utc) - timedelta(days=400))
        db.add(old)
        db.commit()

        assert audit_service.purge_old_entries(db, days=365) == 1
        assert db.query(AuditLog).count() == 1

    def test_zero_days_keeps_everything(self, db):
        audit_service.log(db, None, "login", "user")
        assert audit_service.purge_old_entries(db, days=0) == 0
