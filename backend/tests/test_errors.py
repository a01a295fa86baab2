"""
Tests for the error envelope.
"""
from fastapi.testclient import TestClient

from main import app
import routes.cart


class TestErrorEnvelope:

    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["ok"] is True

    def test_unknown_route_uses_envelope(self, client):
        resp = client.get("/nowhere")
        assert resp.status_code == 404
        assert resp.json() == {"ok": False, "message": "Not Found"}

    def test_validation_errors_carry_field_details(self, client):
        resp = client.post("/login", json={"email": "alice@example.com"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["ok"] is False
        assert body["errors"][0]["loc"] == ["body", "password"]

    def test_internal_errors_are_opaque(self, auth_headers, monkeypatch):
        def explode(db, user_id):
            raise RuntimeError("sqlite3.OperationalError: secret table details")

        monkeypatch.setattr(routes.cart, "_find_cart", explode)
        client = TestClient(app, raise_server_exceptions=False)

        resp = client.get("/cart", headers=auth_headers)
        assert resp.status_code == 500
        assert resp.json() == {"ok": False, "message": "Internal server error"}
        assert "secret" not in resp.text
