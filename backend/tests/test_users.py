"""
Tests for user administration endpoints (/users/members).

Tests cover:
- Global owner role required (403 for members)
- Listing members sorted by name, without password hashes
- Deleting users (404, self-deletion 400)
"""

import logging

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import models
from tests.conftest import make_user

logger = logging.getLogger(__name__)


def test_member_cannot_list_members(client: TestClient, member_headers: dict):
    response = client.get("/users/members", headers=member_headers)

    assert response.status_code == 403, f"Expected 403, got {response.status_code}: {response.json()}"


def test_owner_lists_members_sorted_by_name(
    client: TestClient, test_db: Session, owner_headers: dict, member_user: models.User
):
    make_user(test_db, "Alice Able", "alice@example.com")

    response = client.get("/users/members", headers=owner_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [u["name"] for u in body["data"]] == ["Alice Able", "Max Member"]
    assert all("passwordHash" not in u for u in body["data"])


def test_owner_deletes_member(
    client: TestClient, test_db: Session, owner_headers: dict, member_user: models.User
):
    response = client.delete(f"/users/members/{member_user.id}", headers=owner_headers)

    assert response.status_code == 200
    test_db.expire_all()
    assert test_db.get(models.User, member_user.id) is None


def test_owner_cannot_delete_self(client: TestClient, owner_user: models.User, owner_headers: dict):
    response = client.delete(f"/users/members/{owner_user.id}", headers=owner_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "You cannot delete your own account"


def test_delete_unknown_user(client: TestClient, owner_headers: dict):
    response = client.delete(f"/users/members/{'0' * 24}", headers=owner_headers)

    assert response.status_code == 404


def test_deleted_member_leaves_projects(
    client: TestClient, test_db: Session, project: models.Project, member_user: models.User, owner_headers: dict
):
    client.delete(f"/users/members/{member_user.id}", headers=owner_headers)

    project_json = client.get(f"/projects/{project.id}", headers=owner_headers).json()["project"]
    assert [m["email"] for m in project_json["members"]] == ["owner@example.com"]
