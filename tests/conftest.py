"""Shared fixtures: isolated data dir, fresh schema per test, user helpers."""

import os
import tempfile

# Setup environment for testing (before the app reads its settings)
_DATA_DIR = tempfile.mkdtemp()
os.environ["YEARBOOK_DATA_DIR"] = _DATA_DIR
os.environ["YEARBOOK_DB_PATH"] = os.path.join(_DATA_DIR, "test.db")
os.environ["YEARBOOK_JWT_SECRET"] = "test-secret-key-for-yearbook-tests-0123456789"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from yearbook.database import engine, reset_db
from yearbook.main import app
from yearbook.services.identity import Identity


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def fresh_db():
    reset_db()
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


class Account:
    def __init__(self, user_id: str, token: str, email: str, role: str):
        self.user_id = user_id
        self.token = token
        self.email = email
        self.role = role

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}

    @property
    def identity(self) -> Identity:
        return Identity(user_id=self.user_id, global_role=self.role, email=self.email)


def register(client: TestClient, email: str, password: str = "secret123", name: str = "") -> Account:
    r = client.post("/api/v1/auth/register", json={
        "email": email,
        "password": password,
        "name": name or email.split("@")[0],
    })
    assert r.status_code == 201, f"register failed: {r.status_code} {r.text}"
    data = r.json()
    return Account(data["user_id"], data["access_token"], email, data["role"])


@pytest.fixture
def users(client):
    """A platform admin (first account) followed by ordinary accounts."""
    return {
        "root": register(client, "root@example.com"),
        "owner": register(client, "owner@example.com"),
        "alice": register(client, "alice@example.com"),
        "bob": register(client, "bob@example.com"),
        "carol": register(client, "carol@example.com"),
    }


@pytest.fixture
def album(client, users):
    """An album owned by ``owner`` with two classes."""
    owner = users["owner"]
    r = client.post("/api/v1/albums", json={"name": "Class of 2026"}, headers=owner.headers)
    assert r.status_code == 201, r.text
    album_id = r.json()["id"]

    class_ids = []
    for name in ("12 IPA 1", "12 IPA 2"):
        r = client.post(f"/api/v1/albums/{album_id}/classes", json={"name": name}, headers=owner.headers)
        assert r.status_code == 201, r.text
        class_ids.append(r.json()["id"])

    return {"id": album_id, "classes": class_ids}
