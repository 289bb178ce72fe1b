"""
Task service: CRUD for tasks plus board reordering.

Authorization always derives from the task's parent project. A task's
project_id never changes after creation, and an assignee must be a current
member (or the owner) of that project.
"""

import logging
from typing import Any, Dict, List, Optional

from auth.permissions import ProjectAction, ProjectRole, get_user_project_ids, require_project_action, role_in_project
from errors import NotFound, ValidationError
from models import Project, Task, TaskStatus, User
from store import Store
from time_utils import parse_due_date

logger = logging.getLogger(__name__)


def parse_status(value: Any) -> Optional[TaskStatus]:
    """Map a raw status ("To Do", "In Progress", "Done") to TaskStatus, or None if invalid."""
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        return None


def _require_assignable(project: Project, assignee_id: str) -> None:
    if role_in_project(project, assignee_id) == ProjectRole.none:
        logger.info(f"Rejected assignee {assignee_id}: not a member of project {project.id}")
        raise ValidationError("Assignee must be a member of the project")


def _get_task(store: Store, task_id: str) -> Task:
    task = store.find_by_id(Task, task_id)
    if task is None:
        raise NotFound("Task not found")
    return task


def create_task(
    store: Store,
    user: User,
    project_id: Optional[str],
    title: Optional[str],
    description: Optional[str] = None,
    assignee: Optional[str] = None,
    due_date: Any = None,
    status: Any = None,
) -> Task:
    """
    Create a task in a project the user belongs to.

    An invalid or missing status becomes "To Do"; an unparseable due date is
    dropped. The task is appended to the end of the board.

    Raises:
        ValidationError: missing project id/title, or assignee not a member
        NotFound: project missing or user not related to it
    """
    if not project_id or not title or not title.strip():
        raise ValidationError("projectId and title required")

    project = require_project_action(store, user, project_id, ProjectAction.create_task)

    if assignee:
        _require_assignable(project, assignee)

    task = Task(
        project_id=project.id,
        title=title.strip(),
        description=description or "",
        assignee_id=assignee or None,
        due_date=parse_due_date(due_date),
        status=parse_status(status) or TaskStatus.todo,
        order=store.count_matching(Task, Task.project_id == project.id),
        created_by=user.id,
    )
    task = store.insert(task)

    logger.info(f"Task created: {task.title} (ID: {task.id}) in project {project.id} by user {user.id}")
    return task


def list_tasks_for_project(store: Store, user: User, project_id: str) -> List[Task]:
    """Tasks of one project in creation order."""
    require_project_action(store, user, project_id, ProjectAction.view)
    return store.find_many(Task, Task.project_id == project_id, sort=[Task.created_at.asc()])


def list_all_tasks_for_user(store: Store, user: User) -> List[Task]:
    """Tasks across every project the user belongs to, newest first."""
    project_ids = get_user_project_ids(store, user.id)
    if not project_ids:
        return []
    return store.find_many(Task, Task.project_id.in_(project_ids), sort=[Task.created_at.desc()])


def update_task(store: Store, user: User, task_id: str, changes: Dict[str, Any]) -> Task:
    """
    Apply a partial update.

    Only keys present in ``changes`` are touched; an explicit null clears
    description, assignee and due date. Title and status can't be cleared.

    Raises:
        NotFound: task missing, or user not related to its project
        ValidationError: empty title, unknown status, or non-member assignee
    """
    task = _get_task(store, task_id)
    project = require_project_action(store, user, task.project_id, ProjectAction.edit_task)

    patch: Dict[str, Any] = {}
    if "title" in changes:
        title = changes["title"]
        if not title or not title.strip():
            raise ValidationError("Task title cannot be empty")
        patch["title"] = title.strip()
    if "description" in changes:
        patch["description"] = changes["description"] or ""
    if "assignee" in changes:
        assignee = changes["assignee"] or None
        if assignee is not None:
            _require_assignable(project, assignee)
        patch["assignee_id"] = assignee
    if "due_date" in changes:
        raw = changes["due_date"]
        if raw is None or raw == "":
            patch["due_date"] = None
        else:
            parsed = parse_due_date(raw)
            if parsed is not None:
                patch["due_date"] = parsed
    if "status" in changes:
        status = parse_status(changes["status"])
        if status is None:
            raise ValidationError(f"Invalid status. Valid values: {', '.join(s.value for s in TaskStatus)}")
        patch["status"] = status

    task = store.update_one(Task, task_id, patch)
    logger.info(f"Task updated: {task_id} by user {user.id} fields={sorted(patch)}")
    return task


def delete_task(store: Store, user: User, task_id: str) -> None:
    task = _get_task(store, task_id)
    require_project_action(store, user, task.project_id, ProjectAction.delete_task)
    store.delete_one(Task, task_id)
    logger.info(f"Task deleted: {task_id} by user {user.id}")


def reorder_tasks(store: Store, user: User, entries: List[Dict[str, Any]]) -> List[Task]:
    """
    Persist a board reorder as one all-or-nothing batch.

    Each entry is {"id", "order", "status"?}. Every referenced task must exist
    and all of them must belong to the same project.

    Raises:
        ValidationError: no entries, entries spanning projects, or unknown status
        NotFound: a referenced task is missing, or user not related to the project
    """
    if not entries:
        raise ValidationError("No tasks to reorder")

    ids = [entry["id"] for entry in entries]
    tasks = store.find_many(Task, Task.id.in_(ids))
    if len({t.id for t in tasks}) != len(set(ids)):
        raise NotFound("Task not found")

    project_ids = {t.project_id for t in tasks}
    if len(project_ids) > 1:
        logger.info(f"Rejected reorder by user {user.id}: tasks span projects {sorted(project_ids)}")
        raise ValidationError("All tasks must belong to the same project")
    project_id = project_ids.pop()

    require_project_action(store, user, project_id, ProjectAction.reorder_tasks)

    updates = []
    for entry in entries:
        patch: Dict[str, Any] = {"order": entry["order"]}
        if entry.get("status") is not None:
            status = parse_status(entry["status"])
            if status is None:
                raise ValidationError(f"Invalid status. Valid values: {', '.join(s.value for s in TaskStatus)}")
            patch["status"] = status
        updates.append((entry["id"], patch))

    count = store.bulk_update(Task, updates)
    logger.info(f"Reordered {count} tasks in project {project_id} by user {user.id}")
    return store.find_many(Task, Task.id.in_(ids), sort=[Task.order.asc()])
