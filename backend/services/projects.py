"""
Project service: CRUD for projects plus membership changes.

Every operation except creation and listing goes through the project guard
(auth.permissions.require_project_action). Deleting a project does not delete
its tasks or their comments.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from auth.permissions import ProjectAction, ProjectRole, member_ids, require_project_action, role_in_project, user_projects_predicate
from errors import Conflict, NotFound, ValidationError
from models import Project, User
from store import Store

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 6
MAX_PAGE = 100_000
MAX_PAGE_LIMIT = 100


def _normalize_emails(emails: Iterable[Any]) -> List[str]:
    normalized = []
    for email in emails or []:
        if not isinstance(email, str):
            continue
        email = email.strip().lower()
        if email and email not in normalized:
            normalized.append(email)
    return normalized


def create_project(
    store: Store,
    creator: User,
    name: Optional[str],
    description: Optional[str] = None,
    member_emails: Iterable[Any] = (),
) -> Project:
    """
    Create a project owned by ``creator``.

    Member emails are resolved to users; unknown emails are dropped silently.
    The creator is always included in the member list exactly once.

    Raises:
        ValidationError: if the name is empty
    """
    if not name or not name.strip():
        raise ValidationError("Project name is required")

    emails = _normalize_emails(member_emails)
    users = store.find_many(User, User.email.in_(emails)) if emails else []
    if len(users) < len(emails):
        logger.debug(f"Dropped {len(emails) - len(users)} unknown member emails for new project")

    members = []
    for user in users + [creator]:
        if user.id not in member_ids(members):
            members.append(user)

    project = Project(
        name=name.strip(),
        description=description or "",
        created_by=creator.id,
        members=members,
    )
    project = store.insert(project)

    logger.info(f"Project created: {project.name} (ID: {project.id}) by user {creator.id} with {len(members)} members")
    return project


def list_projects_for_user(
    store: Store, user_id: str, page: Optional[int] = None, limit: Optional[int] = None
) -> Tuple[List[Project], Dict[str, int]]:
    """
    Projects the user created or belongs to, newest first, one page at a time.

    Missing or non-positive page/limit fall back to 1 and 6.

    Returns:
        (projects, {"total", "page", "pages", "limit"})
    """
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_PAGE_LIMIT

    predicate = user_projects_predicate(user_id)
    total = store.count_matching(Project, predicate)
    projects = store.find_many(
        Project,
        predicate,
        sort=[Project.created_at.desc()],
        skip=(page - 1) * limit,
        limit=limit,
    )

    pagination = {"total": total, "page": page, "pages": math.ceil(total / limit), "limit": limit}
    logger.debug(f"User {user_id} retrieved {len(projects)} projects (page {page}/{pagination['pages']})")
    return projects, pagination


def get_project(store: Store, user: User, project_id: str) -> Project:
    return require_project_action(store, user, project_id, ProjectAction.view)


def update_project(store: Store, user: User, project_id: str, changes: Dict[str, Any]) -> Project:
    """
    Change name and/or description; fields not present in ``changes`` are kept.

    Raises:
        ValidationError: if a provided name is empty
    """
    require_project_action(store, user, project_id, ProjectAction.edit_project)

    patch = {}
    if "name" in changes:
        name = changes["name"]
        if not name or not name.strip():
            raise ValidationError("Project name is required")
        patch["name"] = name.strip()
    if "description" in changes:
        patch["description"] = changes["description"] or ""

    project = store.update_one(Project, project_id, patch)
    logger.info(f"Project updated: {project.name} (ID: {project_id}) fields={sorted(patch)}")
    return project


def delete_project(store: Store, user: User, project_id: str) -> None:
    """Delete a project (owner only). Its tasks and comments are left in place."""
    require_project_action(store, user, project_id, ProjectAction.delete_project)
    store.delete_one(Project, project_id)
    logger.info(f"Project deleted: {project_id} by user {user.id}")


def add_member(store: Store, user: User, project_id: str, member_email: Optional[str]) -> Project:
    """
    Add a user, looked up by email, to the project's members.

    Raises:
        ValidationError: if no email was given
        NotFound: if the project or the user does not exist
        Conflict: if the user already belongs to the project
    """
    if not member_email or not member_email.strip():
        raise ValidationError("memberEmail is required")

    project = require_project_action(store, user, project_id, ProjectAction.add_member)

    user_to_add = store.find_one(User, User.email == member_email.strip().lower())
    if user_to_add is None:
        raise NotFound("User not found")

    if role_in_project(project, user_to_add.id) != ProjectRole.none:
        logger.info(f"User {user_to_add.id} is already a member of project {project_id}")
        raise Conflict("User is already a member of this project")

    project = store.update_one(Project, project_id, {"members": list(project.members) + [user_to_add]})
    logger.info(f"User {user_to_add.id} added to project {project_id} by user {user.id}")
    return project
