"""
Test configuration and fixtures for task board tests.

Provides:
- Test database with SQLite in-memory for speed
- FastAPI test client with database dependency override
- Authentication helpers (JWT credential generation)
- Common fixtures for users, projects, tasks and comments
"""

import os
import sys
import logging
from datetime import timedelta
from typing import Generator, Dict

# Settings are read once at import time; point them at throwaway resources first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("PROJECT_CREATION_REQUIRES_OWNER", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, get_db
from main import app
import models
from auth.security import hash_password, get_credential_service
from store import Store

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

# SQLite in-memory database for fast testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """
    Create a fresh in-memory SQLite database for each test.

    This ensures test isolation and fast execution.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        logger.debug("Test database cleaned up")


@pytest.fixture(scope="function")
def store(test_db: Session) -> Store:
    return Store(test_db)


@pytest.fixture(scope="function")
def client(test_db: Session) -> TestClient:
    """
    Create FastAPI test client with database dependency override.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_user(db: Session, name: str, email: str, role: models.UserRole = models.UserRole.member) -> models.User:
    user = models.User(
        name=name,
        email=email,
        password_hash=hash_password("password123"),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created {role.value} user {email} with ID: {user.id}")
    return user


@pytest.fixture(scope="function")
def owner_user(test_db: Session) -> models.User:
    """A user with the global owner role (may create projects)."""
    return make_user(test_db, "Olivia Owner", "owner@example.com", models.UserRole.owner)


@pytest.fixture(scope="function")
def member_user(test_db: Session) -> models.User:
    """A plain user who is added to the project fixture as a member."""
    return make_user(test_db, "Max Member", "member@example.com")


@pytest.fixture(scope="function")
def outsider_user(test_db: Session) -> models.User:
    """A plain user with no relation to the project fixture."""
    return make_user(test_db, "Oscar Outsider", "outsider@example.com")


def create_auth_token(user: models.User, expires_delta: timedelta = None) -> str:
    """
    Helper to create an access token for a user.
    """
    return get_credential_service().issue_credential(user.id, user.email, expires_delta)


def auth_headers_for(user: models.User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_auth_token(user)}"}


@pytest.fixture(scope="function")
def owner_headers(owner_user: models.User) -> Dict[str, str]:
    return auth_headers_for(owner_user)


@pytest.fixture(scope="function")
def member_headers(member_user: models.User) -> Dict[str, str]:
    return auth_headers_for(member_user)


@pytest.fixture(scope="function")
def outsider_headers(outsider_user: models.User) -> Dict[str, str]:
    return auth_headers_for(outsider_user)


def make_project(db: Session, creator: models.User, members=(), name: str = "Board") -> models.Project:
    project = models.Project(
        name=name,
        description=f"{name} description",
        created_by=creator.id,
        members=[creator, *members],
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture(scope="function")
def project(test_db: Session, owner_user: models.User, member_user: models.User) -> models.Project:
    """Project created by owner_user with member_user as a member."""
    return make_project(test_db, owner_user, [member_user], name="Launch")


def make_task(db: Session, project: models.Project, creator: models.User, title: str, **kwargs) -> models.Task:
    task = models.Task(project_id=project.id, title=title, created_by=creator.id, **kwargs)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@pytest.fixture(scope="function")
def task(test_db: Session, project: models.Project, owner_user: models.User) -> models.Task:
    return make_task(test_db, project, owner_user, "Write release notes")


def make_comment(db: Session, task: models.Task, author: models.User, content: str, parent=None) -> models.Comment:
    comment = models.Comment(
        task_id=task.id,
        user_id=author.id,
        content=content,
        parent_comment_id=parent.id if parent else None,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment
