"""API tests for categories, access grants and user administration."""

from dms.models import AccessGrant, Category, Folder
from tests.conftest import grant, headers_for, make_category, make_document, make_folder


class TestCategories:

    def test_admin_creates_and_lists(self, client, admin):
        h = headers_for(admin)
        resp = client.post("/api/categories", json={"name": "  Finance "}, headers=h)
        assert resp.status_code == 201
        assert resp.json()["name"] == "Finance"

        listed = client.get("/api/categories", headers=h).json()
        assert [c["name"] for c in listed] == ["Finance"]
        assert listed[0]["access_level"] == "full"

    def test_user_cannot_create(self, client, alice):
        resp = client.post("/api/categories", json={"name": "Finance"}, headers=headers_for(alice))
        assert resp.status_code == 403

    def test_empty_name_rejected(self, client, admin):
        resp = client.post("/api/categories", json={"name": "   "}, headers=headers_for(admin))
        assert resp.status_code == 422

    def test_user_lists_only_granted(self, client, db, admin, alice):
        finance = make_category(db, admin, "Finance")
        make_category(db, admin, "Legal")
        grant(db, alice, finance, "full")

        listed = client.get("/api/categories", headers=headers_for(alice)).json()
        assert [(c["name"], c["access_level"]) for c in listed] == [("Finance", "full")]

    def test_user_without_grant_gets_403(self, client, db, admin, alice):
        legal = make_category(db, admin, "Legal")
        resp = client.get(f"/api/categories/{legal.id}", headers=headers_for(alice))
        assert resp.status_code == 403

    def test_unknown_category_is_404(self, client, admin):
        resp = client.get("/api/categories/missing", headers=headers_for(admin))
        assert resp.status_code == 404
        assert resp.json()["error"] == "CATEGORY_NOT_FOUND"

    def test_unknown_and_ungranted_look_alike_to_users(self, client, db, admin, alice):
        legal = make_category(db, admin, "Legal")
        h = headers_for(alice)
        existing = client.get(f"/api/categories/{legal.id}", headers=h)
        unknown = client.get("/api/categories/missing", headers=h)
        assert existing.status_code == unknown.status_code == 403

    def test_rename(self, client, db, admin):
        finance = make_category(db, admin, "Finance")
        resp = client.put(f"/api/categories/{finance.id}", json={"name": "Accounting"}, headers=headers_for(admin))
        assert resp.status_code == 200
        assert resp.json()["name"] == "Accounting"

    def test_delete_cascades_and_releases_files(self, client, db, storage, admin, alice):
        finance = make_category(db, admin, "Finance")
        grant(db, alice, finance)
        folder = make_folder(db, admin, finance, "Reports")
        doc = make_document(db, admin, folder, versions=2)

        resp = client.delete(f"/api/categories/{finance.id}", headers=headers_for(admin))
        assert resp.status_code == 204
        db.expire_all()
        assert db.query(Category).count() == 0
        assert db.query(Folder).count() == 0
        assert db.query(AccessGrant).count() == 0
        assert sorted(storage.deleted) == sorted([f"{doc.id}/v1", f"{doc.id}/v2"])


class TestAccessGrants:

    def test_grant_then_overwrite(self, client, db, admin, alice):
        finance = make_category(db, admin, "Finance")
        h = headers_for(admin)

        resp = client.put(f"/api/categories/{finance.id}/access/{alice.id}", json={"access_level": "read"}, headers=h)
        assert resp.status_code == 200
        assert resp.json()["access_level"] == "read"
        assert resp.json()["granted_by"] == admin.id

        client.put(f"/api/categories/{finance.id}/access/{alice.id}", json={"access_level": "full"}, headers=h)
        listed = client.get(f"/api/categories/{finance.id}/access", headers=h).json()
        assert len(listed) == 1
        assert listed[0]["access_level"] == "full"
        assert listed[0]["user_email"] == alice.email

    def test_invalid_level_rejected(self, client, db, admin, alice):
        finance = make_category(db, admin, "Finance")
        resp = client.put(
            f"/api/categories/{finance.id}/access/{alice.id}",
            json={"access_level": "owner"},
            headers=headers_for(admin),
        )
        assert resp.status_code == 422

    def test_grant_to_unknown_user_is_404(self, client, db, admin):
        finance = make_category(db, admin, "Finance")
        resp = client.put(
            f"/api/categories/{finance.id}/access/nobody",
            json={"access_level": "read"},
            headers=headers_for(admin),
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "USER_NOT_FOUND"

    def test_revoke_removes_visibility(self, client, db, admin, alice):
        finance = make_category(db, admin, "Finance")
        grant(db, alice, finance)
        resp = client.delete(f"/api/categories/{finance.id}/access/{alice.id}", headers=headers_for(admin))
        assert resp.status_code == 204
        assert client.get(f"/api/categories/{finance.id}", headers=headers_for(alice)).status_code == 403

    def test_revoke_is_idempotent(self, client, db, admin, alice):
        finance = make_category(db, admin, "Finance")
        resp = client.delete(f"/api/categories/{finance.id}/access/{alice.id}", headers=headers_for(admin))
        assert resp.status_code == 204

    def test_users_cannot_manage_grants(self, client, db, admin, alice, bob):
        finance = make_category(db, admin, "Finance")
        grant(db, alice, finance, "full")
        resp = client.put(
            f"/api/categories/{finance.id}/access/{bob.id}",
            json={"access_level": "read"},
            headers=headers_for(alice),
        )
        assert resp.status_code == 403


class TestUsers:

    def test_admin_creates_user(self, client, admin):
        resp = client.post(
            "/api/users",
            json={"name": "Carol", "email": "Carol@Example.test", "password": "secret1"},
            headers=headers_for(admin),
        )
        assert resp.status_code == 201
        assert resp.json()["email"] == "carol@example.test"
        assert resp.json()["role"] == "user"
        assert "password_hash" not in resp.json()

    def test_duplicate_email_is_conflict(self, client, admin, alice):
        resp = client.post(
            "/api/users",
            json={"name": "Alice 2", "email": alice.email, "password": "secret1"},
            headers=headers_for(admin),
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "CONFLICT"

    def test_short_password_rejected(self, client, admin):
        resp = client.post(
            "/api/users",
            json={"name": "Dan", "email": "dan@example.test", "password": "123"},
            headers=headers_for(admin),
        )
        assert resp.status_code == 422

    def test_delete_user(self, client, db, admin, alice):
        resp = client.delete(f"/api/users/{alice.id}", headers=headers_for(admin))
        assert resp.status_code == 204

    def test_cannot_delete_self(self, client, admin):
        resp = client.delete(f"/api/users/{admin.id}", headers=headers_for(admin))
        assert resp.status_code == 400

    def test_cannot_delete_user_owning_content(self, client, db, admin, alice):
        finance = make_category(db, admin, "Finance")
        grant(db, alice, finance)
        make_folder(db, alice, finance, "Mine", personal=True)
        resp = client.delete(f"/api/users/{alice.id}", headers=headers_for(admin))
        assert resp.status_code == 409
        assert resp.json()["details"] == {"folders": 1}
