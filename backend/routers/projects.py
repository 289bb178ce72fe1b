import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from auth.dependencies import get_current_user, require_project_creator
from models import User
from schemas import (
    AddMemberRequest,
    AddMemberResponse,
    MessageResponse,
    ProjectCreate,
    ProjectEnvelope,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from services import projects as project_service
from store import Store, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
def create_project(
    project: ProjectCreate,
    current_user: User = Depends(require_project_creator),
    store: Store = Depends(get_store),
):
    """Create a project; the caller becomes its owner."""
    logger.debug(f"User {current_user.id} creating project: {project.name}")
    created = project_service.create_project(
        store, current_user, project.name, project.description, project.members
    )
    return {"success": True, "data": created}


@router.get("", response_model=ProjectListResponse)
def list_projects(
    # Non-positive values fall back to defaults in the service
    page: Optional[int] = Query(None, le=project_service.MAX_PAGE),
    limit: Optional[int] = Query(None, le=project_service.MAX_PAGE_LIMIT),
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """List projects the current user owns or belongs to, newest first."""
    projects, pagination = project_service.list_projects_for_user(store, current_user.id, page, limit)
    return {"success": True, "data": projects, "pagination": pagination}


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Get a project with its members expanded (requires membership)."""
    return {"project": project_service.get_project(store, current_user, project_id)}


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Update name/description (owner only)."""
    changes = project_update.model_dump(exclude_unset=True)
    return {"project": project_service.update_project(store, current_user, project_id, changes)}


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Delete a project (owner only). Tasks are not deleted with it."""
    project_service.delete_project(store, current_user, project_id)
    return {"success": True, "message": "Project deleted successfully"}


@router.post("/{project_id}/members", response_model=AddMemberResponse)
def add_project_member(
    project_id: str,
    member_data: AddMemberRequest,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Add a member by email (owner only)."""
    project = project_service.add_member(store, current_user, project_id, member_data.member_email)
    return {"success": True, "message": "Member added successfully", "project": project}
