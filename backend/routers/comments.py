import logging

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_current_user
from models import User
from schemas import CommentCreate, CommentListResponse, CommentResponse, CommentUpdate, MessageResponse
from services import comments as comment_service
from store import Store, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/task/{task_id}", response_model=CommentListResponse)
def list_comments(
    task_id: str,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """List comments for a task, newest first."""
    logger.debug(f"User {current_user.id} listing comments for task {task_id}")
    return {"comments": comment_service.list_comments(store, task_id)}


@router.post("/task/{task_id}", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    task_id: str,
    comment: CommentCreate,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Comment on a task, or reply to a comment via parentCommentId."""
    created = comment_service.create_comment(
        store, current_user, task_id, comment.content, comment.parent_comment_id
    )
    return {"comment": created}


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: str,
    comment_update: CommentUpdate,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Edit a comment (author only)."""
    return {"comment": comment_service.update_comment(store, current_user, comment_id, comment_update.content)}


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Delete a comment and its direct replies (author only)."""
    comment_service.delete_comment(store, current_user, comment_id)
    return {"success": True, "message": "Comment deleted successfully"}
