import logging

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_current_user
from models import User
from schemas import MessageResponse, ReorderRequest, ReorderResponse, TaskCreate, TaskListResponse, TaskResponse, TaskUpdate
from services import tasks as task_service
from store import Store, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


# Fixed paths are registered before /{task_id} so they aren't captured by it

@router.get("/all", response_model=TaskListResponse)
def list_all_tasks(
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Tasks from every project the current user belongs to, newest first."""
    return {"tasks": task_service.list_all_tasks_for_user(store, current_user)}


@router.put("/reorder", response_model=ReorderResponse)
def reorder_tasks(
    request: ReorderRequest,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Persist board positions (and optionally statuses) for tasks of one project."""
    logger.debug(f"User {current_user.id} reordering {len(request.tasks)} tasks")
    entries = [entry.model_dump() for entry in request.tasks]
    tasks = task_service.reorder_tasks(store, current_user, entries)
    return {"success": True, "message": "Task order updated", "tasks": tasks}


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Create a task in a project the current user belongs to."""
    created = task_service.create_task(
        store,
        current_user,
        project_id=task.project_id,
        title=task.title,
        description=task.description,
        assignee=task.assignee,
        due_date=task.due_date,
        status=task.status,
    )
    return {"task": created}


@router.get("/project/{project_id}", response_model=TaskListResponse)
def list_project_tasks(
    project_id: str,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Tasks of a project in creation order (requires membership)."""
    return {"tasks": task_service.list_tasks_for_project(store, current_user, project_id)}


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Partially update a task (requires membership in its project)."""
    changes = task_update.model_dump(exclude_unset=True)
    return {"task": task_service.update_task(store, current_user, task_id, changes)}


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Delete a task (requires membership in its project)."""
    task_service.delete_task(store, current_user, task_id)
    return {"success": True, "message": "Task deleted"}
