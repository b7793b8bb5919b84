"""Tests for session tokens, login/logout and the auth dependencies."""

from dms.core.config import settings
from dms.core.token_factory import create_token, decode_token
from dms.models import AuditLog
from tests.conftest import TEST_PASSWORD, headers_for, make_category, grant


class TestTokenFactory:

    def test_create_and_decode(self):
        token = create_token("user-1", "user", "test-secret")
        payload = decode_token(token, "test-secret")
        assert payload is not None
        assert payload.sub == "user-1"
        assert payload.role == "user"
        assert (payload.expires_at - payload.issued_at).total_seconds() == 24 * 3600

    def test_wrong_secret_returns_none(self):
        token = create_token("user-1", "user", "correct-secret")
        assert decode_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_token("user-1", "user", "secret", expires_hours=-1)
        assert decode_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_token("not.a.token", "secret") is None
        assert decode_token("", "secret") is None

    def test_empty_subject_rejected(self):
        token = create_token("", "user", "secret")
        assert decode_token(token, "secret") is None


class TestLogin:

    def test_login_returns_token_and_sets_cookie(self, client, alice):
        resp = client.post("/api/auth/login", json={"email": alice.email, "password": TEST_PASSWORD})
        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["id"] == alice.id
        assert data["user"]["role"] == "user"
        assert decode_token(data["token"], settings.jwt_secret_key).sub == alice.id
        assert resp.cookies.get(settings.session_cookie_name) == data["token"]

    def test_email_is_case_insensitive(self, client, alice):
        resp = client.post("/api/auth/login", json={"email": alice.email.upper(), "password": TEST_PASSWORD})
        assert resp.status_code == 200

    def test_wrong_password_is_401_and_audited(self, client, db, alice):
        resp = client.post("/api/auth/login", json={"email": alice.email, "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"
        assert db.query(AuditLog).filter(AuditLog.action == "login_failed").count() == 1

    def test_unknown_email_is_401(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.test", "password": TEST_PASSWORD})
        assert resp.status_code == 401

    def test_cookie_session_authenticates(self, client, alice):
        client.post("/api/auth/login", json={"email": alice.email, "password": TEST_PASSWORD})
        resp = client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == alice.email

    def test_logout_clears_cookie(self, client, alice):
        client.post("/api/auth/login", json={"email": alice.email, "password": TEST_PASSWORD})
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 204
        assert client.get("/api/auth/me").status_code == 401


class TestRequireAuth:

    def test_missing_token_is_401(self, client):
        resp = client.get("/api/categories")
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    def test_invalid_token_is_401(self, client):
        resp = client.get("/api/categories", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    def test_token_for_deleted_user_is_401(self, client, db, alice):
        headers = headers_for(alice)
        db.delete(alice)
        db.commit()
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_non_admin_gets_403_on_admin_routes(self, client, alice):
        resp = client.get("/api/users", headers=headers_for(alice))
        assert resp.status_code == 403
        assert resp.json()["error"] == "FORBIDDEN"


class TestMe:

    def test_user_sees_granted_categories(self, client, db, admin, alice):
        finance = make_category(db, admin, "Finance")
        make_category(db, admin, "Legal")
        grant(db, alice, finance, "read")

        resp = client.get("/api/auth/me", headers=headers_for(alice))
        assert resp.status_code == 200
        access = resp.json()["access"]
        assert access == [{"category_id": finance.id, "category_name": "Finance", "access_level": "read"}]

    def test_admin_sees_all_categories_as_full(self, client, db, admin):
        make_category(db, admin, "Finance")
        make_category(db, admin, "Legal")
        resp = client.get("/api/auth/me", headers=headers_for(admin))
        levels = {a["category_name"]: a["access_level"] for a in resp.json()["access"]}
        assert levels == {"Finance": "full", "Legal": "full"}
