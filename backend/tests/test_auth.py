"""
Tests for registration, login, logout and token handling.
"""
from models.log import Log
from models.users import User

from conftest import bearer, register


class TestRegister:
    """POST /register"""

    def test_register_returns_token_and_user(self, client):
        body = register(client, email="Alice@Example.com")
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["name"] == "Alice"
        assert "password_hash" not in body["user"]

    def test_password_is_stored_hashed(self, client, db):
        register(client)
        user = db.query(User).filter(User.email == "alice@example.com").one()
        assert user.password_hash != "secret123"
        assert user.password_hash.startswith("$2")

    def test_duplicate_email_is_a_validation_error(self, client, db):
        register(client)
        resp = client.post("/register", json={
            "name": "Other Alice",
            "email": "ALICE@example.com",
            "password": "another123",
            "password_confirmation": "another123",
        })
        assert resp.status_code == 422
        assert resp.json()["ok"] is False
        assert db.query(User).count() == 1

    def test_short_password_rejected(self, client, db):
        resp = client.post("/register", json={
            "name": "Alice", "email": "alice@example.com",
            "password": "short", "password_confirmation": "short",
        })
        assert resp.status_code == 422
        assert db.query(User).count() == 0

    def test_confirmation_must_match(self, client, db):
        resp = client.post("/register", json={
            "name": "Alice", "email": "alice@example.com",
            "password": "secret123", "password_confirmation": "secret124",
        })
        assert resp.status_code == 422
        assert resp.json()["message"] == "The given data was invalid."
        assert db.query(User).count() == 0

    def test_invalid_email_rejected(self, client):
        resp = client.post("/register", json={
            "name": "Alice", "email": "not-an-email",
            "password": "secret123", "password_confirmation": "secret123",
        })
        assert resp.status_code == 422

    def test_register_is_audited(self, client, db):
        register(client)
        entry = db.query(Log).filter(Log.action == "REGISTER").one()
        assert entry.status == "SUCCESS"
        assert entry.resource == "auth"


class TestLogin:
    """POST /login"""

    def test_login_with_valid_credentials(self, client):
        register(client)
        resp = client.post("/login", json={"email": "alice@example.com", "password": "secret123"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["access_token"]
        assert body["user"]["email"] == "alice@example.com"

    def test_wrong_password_never_returns_token(self, client, db):
        register(client)
        resp = client.post("/login", json={"email": "alice@example.com", "password": "wrong-password"})
        assert resp.status_code == 401
        body = resp.json()
        assert body == {"ok": False, "message": "Invalid credentials"}
        assert "access_token" not in body
        failed = db.query(Log).filter(Log.action == "LOGIN", Log.status == "FAIL").count()
        assert failed == 1

    def test_unknown_email_is_unauthorized(self, client):
        resp = client.post("/login", json={"email": "ghost@example.com", "password": "secret123"})
        assert resp.status_code == 401


class TestTokens:
    """Bearer tokens, /user and /logout"""

    def test_current_user(self, client):
        token = register(client)["access_token"]
        resp = client.get("/user", headers=bearer(token))
        assert resp.status_code == 200
        assert resp.json()["email"] == "alice@example.com"

    def test_missing_token_is_unauthorized(self, client):
        resp = client.get("/user")
        assert resp.status_code == 401
        assert resp.json()["ok"] is False
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_garbage_token_is_unauthorized(self, client):
        resp = client.get("/user", headers=bearer("not.a.jwt"))
        assert resp.status_code == 401

    def test_logout_revokes_all_tokens(self, client):
        first = register(client)["access_token"]
        second = client.post(
            "/login", json={"email": "alice@example.com", "password": "secret123"}
        ).json()["access_token"]

        resp = client.post("/logout", headers=bearer(first))
        assert resp.status_code == 204

        assert client.get("/user", headers=bearer(first)).status_code == 401
        assert client.get("/user", headers=bearer(second)).status_code == 401

    def test_login_after_logout_issues_working_token(self, client):
        token = register(client)["access_token"]
        client.post("/logout", headers=bearer(token))
        fresh = client.post(
            "/login", json={"email": "alice@example.com", "password": "secret123"}
        ).json()["access_token"]
        assert client.get("/user", headers=bearer(fresh)).status_code == 200

    def test_logout_requires_authentication(self, client):
        assert client.post("/logout").status_code == 401
