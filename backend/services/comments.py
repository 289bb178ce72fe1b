"""
Comment service: threaded comments on tasks.

Reading and posting only require the task to exist; project membership is
not checked. Editing and deleting are restricted to the comment's author.
Deleting a comment also deletes its direct replies, but not replies to those.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_

from auth.permissions import ProjectAction, require_comment_author
from errors import NotFound, ValidationError
from models import Comment, Task, User
from store import Store
from time_utils import utc_now

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


def _clean_content(content: Optional[str]) -> str:
    if not content or not content.strip():
        raise ValidationError("Comment content is required")
    content = content.strip()
    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment content cannot exceed {MAX_COMMENT_LENGTH} characters")
    return content


def _get_comment(store: Store, comment_id: str) -> Comment:
    comment = store.find_by_id(Comment, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    return comment


def list_comments(store: Store, task_id: str) -> List[Comment]:
    if store.find_by_id(Task, task_id) is None:
        raise NotFound("Task not found")
    return store.find_many(Comment, Comment.task_id == task_id, sort=[Comment.created_at.desc()])


def create_comment(
    store: Store, user: User, task_id: str, content: Optional[str], parent_comment_id: Optional[str] = None
) -> Comment:
    """
    Post a comment, optionally as a reply to another comment.

    Raises:
        ValidationError: empty or over-long content
        NotFound: task or parent comment missing
    """
    content = _clean_content(content)

    if store.find_by_id(Task, task_id) is None:
        raise NotFound("Task not found")

    if parent_comment_id and store.find_by_id(Comment, parent_comment_id) is None:
        raise NotFound("Parent comment not found")

    comment = store.insert(
        Comment(
            task_id=task_id,
            user_id=user.id,
            content=content,
            parent_comment_id=parent_comment_id or None,
        )
    )
    logger.info(f"Comment created: {comment.id} on task {task_id} by user {user.id}")
    return comment


def update_comment(store: Store, user: User, comment_id: str, content: Optional[str]) -> Comment:
    content = _clean_content(content)
    comment = _get_comment(store, comment_id)
    require_comment_author(user, comment, ProjectAction.edit_comment)

    comment = store.update_one(
        Comment, comment_id, {"content": content, "is_edited": True, "edited_at": utc_now()}
    )
    logger.info(f"Comment updated: {comment_id} by user {user.id}")
    return comment


def delete_comment(store: Store, user: User, comment_id: str) -> int:
    """
    Delete a comment and its direct replies in one statement.

    Returns:
        Number of comments removed
    """
    comment = _get_comment(store, comment_id)
    require_comment_author(user, comment, ProjectAction.delete_comment)

    deleted = store.delete_many(
        Comment, or_(Comment.id == comment_id, Comment.parent_comment_id == comment_id)
    )
    logger.info(f"Comment deleted: {comment_id} by user {user.id} ({deleted - 1} direct replies removed)")
    return deleted
