"""
Tests for signup, login and credential handling.

Tests cover:
- Signup (201, duplicate email 409, email lowercased, member role)
- Login (valid, wrong password, unknown email)
- Authenticated access (missing, invalid, expired token; deleted user)
"""

import logging
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import models
from tests.conftest import create_auth_token

logger = logging.getLogger(__name__)


def signup(client: TestClient, email: str = "Ada@Example.com", password: str = "s3cretpass", name: str = "Ada"):
    return client.post("/auth/signup", json={"name": name, "email": email, "password": password})


# ============== Signup ==============


def test_signup_returns_user_and_token(client: TestClient, test_db: Session):
    response = signup(client)

    assert response.status_code == 201, f"Expected 201, got {response.status_code}: {response.json()}"
    data = response.json()
    assert data["user"]["email"] == "ada@example.com"
    assert data["token"]
    assert "passwordHash" not in data["user"]

    user = test_db.query(models.User).filter(models.User.email == "ada@example.com").one()
    assert user.role == models.UserRole.member
    assert user.password_hash != "s3cretpass"
    logger.info("✓ Signup creates a lowercase-email member account")


def test_signup_duplicate_email_is_case_insensitive(client: TestClient):
    assert signup(client, email="ada@example.com").status_code == 201

    response = signup(client, email="ADA@EXAMPLE.COM")

    assert response.status_code == 409, f"Expected 409, got {response.status_code}: {response.json()}"
    assert response.json() == {"success": False, "message": "Email already registered"}


def test_signup_missing_fields_is_rejected(client: TestClient):
    response = client.post("/auth/signup", json={"email": "ada@example.com"})

    assert response.status_code == 400, f"Expected 400, got {response.status_code}: {response.json()}"
    assert response.json()["success"] is False


# ============== Login ==============


def test_login_with_valid_credentials(client: TestClient):
    signup(client)

    response = client.post("/auth/login", json={"email": "ADA@example.com", "password": "s3cretpass"})

    assert response.status_code == 200, f"Expected 200, got {response.status_code}: {response.json()}"
    token = response.json()["token"]

    info = client.get("/auth/user-info", headers={"Authorization": f"Bearer {token}"})
    assert info.status_code == 200
    assert info.json()["user"]["email"] == "ada@example.com"
    assert info.json()["user"]["role"] == "member"
    logger.info("✓ Login token grants access to user-info")


def test_login_wrong_password(client: TestClient):
    signup(client)

    response = client.post("/auth/login", json={"email": "ada@example.com", "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_login_unknown_email(client: TestClient):
    response = client.post("/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


# ============== Authenticated Access ==============


def test_missing_token_is_rejected(client: TestClient):
    response = client.get("/auth/user-info")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Authorization token missing"}


def test_invalid_token_is_rejected(client: TestClient):
    response = client.get("/auth/user-info", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_expired_token_is_rejected(client: TestClient, member_user: models.User):
    token = create_auth_token(member_user, expires_delta=timedelta(minutes=-1))

    response = client.get("/auth/user-info", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_of_deleted_user_is_rejected(client: TestClient, test_db: Session, member_user: models.User):
    token = create_auth_token(member_user)
    test_db.delete(member_user)
    test_db.commit()

    response = client.get("/auth/user-info", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "User not found"


def test_health_does_not_require_auth(client: TestClient):
    assert client.get("/health").json() == {"status": "healthy"}


def test_app_serves_on_configured_host_and_port(monkeypatch):
    import main

    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    main.run()

    assert calls == [(main.app, {"host": "0.0.0.0", "port": 8000})]
