"""
Shared pytest fixtures: an isolated SQLite database per test plus a few
registered users.

Run: pytest backend -v
"""

import pytest
from fastapi.testclient import TestClient

from backend import db
from backend.main import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    """TestClient bound to a fresh SQLite file."""
    monkeypatch.setattr(db, "DB_PATH", str(tmp_path / "test_project_manager.db"))
    db.init_db()
    return TestClient(app)


@pytest.fixture
def conn(client):
    """Raw connection to the same database the client uses."""
    connection = db.connect()
    yield connection
    connection.close()


def _register(client, name, email, password="secret123"):
    resp = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()
    return {
        "id": data["user"]["id"],
        "name": name,
        "email": email,
        "token": data["token"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
    }


@pytest.fixture
def owner(client):
    return _register(client, "Olivia Owner", "owner@example.com")


@pytest.fixture
def member(client):
    return _register(client, "Mark Member", "member@example.com")


@pytest.fixture
def outsider(client):
    return _register(client, "Nina Nobody", "outsider@example.com")


@pytest.fixture
def project(client, owner, member):
    """Project 'Launch' owned by owner with member invited."""
    resp = client.post(
        "/api/projects",
        json={"title": "Launch", "members": [member["id"]]},
        headers=owner["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
