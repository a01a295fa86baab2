"""
Pytest configuration and fixtures for the Storefront API tests.
"""
import os
import tempfile

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-only"
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="storefront-storage-")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture(autouse=True)
def fresh_schema():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def register(client, email="alice@example.com", name="Alice", password="secret123"):
    resp = client.post("/register", json={
        "name": name,
        "email": email,
        "password": password,
        "password_confirmation": password,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client) -> dict:
    return bearer(register(client)["access_token"])


@pytest.fixture
def other_headers(client) -> dict:
    return bearer(register(client, email="bob@example.com", name="Bob")["access_token"])


@pytest.fixture
def category(client, auth_headers) -> dict:
    resp = client.post("/categories", json={"name": "Books"}, headers=auth_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["category"]


def create_product(client, headers, category_id, name="Notebook", price=10.0, stock=5,
                   description="A plain lined notebook", filename="pic.png"):
    resp = client.post(
        "/products",
        data={
            "name": name,
            "description": description,
            "price": str(price),
            "stock": str(stock),
            "category_id": str(category_id),
        },
        files={"img": (filename, PNG_BYTES, "image/png")},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["product"]


@pytest.fixture
def make_product(client, auth_headers, category):
    """Factory creating products owned by the default user in the default category."""
    def _make(**kwargs):
        return create_product(client, auth_headers, category["id"], **kwargs)
    return _make
