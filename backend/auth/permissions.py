"""
Project-level permission checking utilities.

This module holds the single authorization model for projects, tasks and
comments:

- Membership resolution: a user's relationship to a project is one of
  none < member < owner. The project creator is always the owner, whether or
  not their id is literally present in the member list.
- Policy table: each project-scoped action has a minimum role. Owner implies
  member; structural project changes (edit, delete, add member) are owner-only.
- Comment edit/delete is decided by authorship, not by project role.

Non-members are told a project does not exist (404) instead of being denied
(403), so project ids cannot be probed. A member who lacks the owner role for
an owner-only action gets 403.
"""

import enum
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_, select

from errors import Forbidden, NotFound
from models import Comment, Project, User, project_members
from store import Store

logger = logging.getLogger(__name__)


class ProjectRole(str, enum.Enum):
    none = "none"
    member = "member"
    owner = "owner"


class ProjectAction(str, enum.Enum):
    view = "view"
    edit_project = "editProject"
    delete_project = "deleteProject"
    add_member = "addMember"
    create_task = "createTask"
    edit_task = "editTask"
    delete_task = "deleteTask"
    reorder_tasks = "reorderTasks"
    edit_comment = "editComment"
    delete_comment = "deleteComment"


# Role hierarchy for project permissions
ROLE_LEVELS = {ProjectRole.none: 0, ProjectRole.member: 1, ProjectRole.owner: 2}

# Minimum role per action
POLICY: Dict[ProjectAction, ProjectRole] = {
    ProjectAction.view: ProjectRole.member,
    ProjectAction.create_task: ProjectRole.member,
    ProjectAction.edit_task: ProjectRole.member,
    ProjectAction.delete_task: ProjectRole.member,
    ProjectAction.reorder_tasks: ProjectRole.member,
    ProjectAction.edit_project: ProjectRole.owner,
    ProjectAction.delete_project: ProjectRole.owner,
    ProjectAction.add_member: ProjectRole.owner,
}

# Decided by authorship (see require_comment_author)
AUTHOR_ONLY_ACTIONS = frozenset({ProjectAction.edit_comment, ProjectAction.delete_comment})


def normalize_id(value: Any) -> Optional[str]:
    """
    Reduce a member reference to a bare id string.

    Members may be held as plain ids or as expanded records (ORM objects with
    an ``id`` attribute, or dicts keyed by ``id``/``_id``).
    """
    if value is None:
        return None
    if isinstance(value, dict):
        inner = value.get("id", value.get("_id"))
        return normalize_id(inner)
    if hasattr(value, "id"):
        return normalize_id(value.id)
    return str(value)


def member_ids(members: Iterable[Any]) -> List[str]:
    """Normalized, de-duplicated member ids in their original order."""
    seen = []
    for member in members or []:
        member_id = normalize_id(member)
        if member_id is not None and member_id not in seen:
            seen.append(member_id)
    return seen


def role_in_project(project: Any, user_id: Any) -> ProjectRole:
    """
    Pure role computation for an already-loaded project.

    ``project`` only needs ``created_by`` and ``members`` attributes (or keys).
    """
    if isinstance(project, dict):
        creator, members = project.get("created_by"), project.get("members", [])
    else:
        creator, members = project.created_by, project.members

    uid = normalize_id(user_id)
    if uid is None:
        return ProjectRole.none
    if normalize_id(creator) == uid:
        return ProjectRole.owner
    if uid in member_ids(members):
        return ProjectRole.member
    return ProjectRole.none


def resolve_membership(store: Store, project_id: str, user_id: str) -> ProjectRole:
    """
    Determine a user's relationship to a project.

    Raises:
        NotFound: if the project does not exist
    """
    return role_in_project(_load_project(store, project_id), user_id)


def _load_project(store: Store, project_id: str) -> Project:
    project = store.find_by_id(Project, project_id)
    if project is None:
        logger.info(f"Project {project_id} not found")
        raise NotFound("Project not found")
    return project


def authorize(role: ProjectRole, action: ProjectAction) -> bool:
    """
    Evaluate the policy table.

    Raises:
        ValueError: for comment actions, which are decided by authorship
    """
    if action in AUTHOR_ONLY_ACTIONS:
        raise ValueError(f"{action.value} is decided by comment authorship, not project role")
    required = POLICY[action]
    return ROLE_LEVELS[role] >= ROLE_LEVELS[required]


def require_project_action(store: Store, user: User, project_id: str, action: ProjectAction) -> Project:
    """
    Require a user to be allowed an action on a project, or raise.

    Returns:
        The loaded project, so callers don't fetch it twice

    Raises:
        NotFound: 404 if project not found or the user has no relation to it
        Forbidden: 403 if the user is a member but the action is owner-only

    Example:
        >>> project = require_project_action(store, user, project_id, ProjectAction.delete_project)
        >>> # If we get here, user is the project owner
    """
    logger.debug(f"Requiring {action.value} for user {user.id} on project {project_id}")

    project = _load_project(store, project_id)
    role = role_in_project(project, user.id)
    if authorize(role, action):
        logger.debug(f"Permission check passed for user {user.id} ({role.value}) on project {project_id}")
        return project

    if role == ProjectRole.none:
        logger.warning(
            f"Authorization denied: user {user.id} has no access to project {project_id} "
            f"(action {action.value}), returning 404"
        )
        raise NotFound("Project not found")

    logger.warning(
        f"Authorization denied: user {user.id} has role '{role.value}' in project {project_id}, "
        f"but '{POLICY[action].value}' is required for {action.value}"
    )
    raise Forbidden(f"Only the project owner can perform this action ({action.value})")


def require_comment_author(user: User, comment: Comment, action: ProjectAction) -> None:
    """
    Require the user to be the comment's author.

    Raises:
        Forbidden: 403 if the user did not write the comment
    """
    if normalize_id(comment.user_id) != normalize_id(user.id):
        logger.warning(
            f"Authorization denied: user {user.id} is not the author of comment {comment.id} "
            f"(action {action.value})"
        )
        verb = "edit" if action == ProjectAction.edit_comment else "delete"
        raise Forbidden(f"Not authorized to {verb} this comment")


def user_projects_predicate(user_id: str):
    """Filter expression matching projects the user created or belongs to."""
    return or_(
        Project.created_by == user_id,
        Project.id.in_(
            select(project_members.c.project_id).where(project_members.c.user_id == user_id)
        ),
    )


def get_user_project_ids(store: Store, user_id: str) -> List[str]:
    """
    Get ids of all projects the user owns or is a member of.

    Example:
        >>> project_ids = get_user_project_ids(store, user.id)
        >>> tasks = store.find_many(Task, Task.project_id.in_(project_ids))
    """
    projects = store.find_many(Project, user_projects_predicate(user_id))
    logger.debug(f"User {user_id} has access to {len(projects)} projects")
    return [p.id for p in projects]
