import logging
from typing import List

from sqlalchemy import or_

from errors import NotFound, ValidationError
from models import User, UserRole
from store import Store

logger = logging.getLogger(__name__)


def list_members(store: Store) -> List[User]:
    """Users holding the plain member role, sorted by name."""
    return store.find_many(
        User,
        or_(User.role == UserRole.member, User.role.is_(None)),
        sort=[User.name.asc()],
    )


def delete_member(store: Store, actor: User, user_id: str) -> None:
    """
    Delete a user account on behalf of a global owner.

    Raises:
        NotFound: if the user does not exist
        ValidationError: if the actor tries to delete themselves
    """
    user = store.find_by_id(User, user_id)
    if user is None:
        raise NotFound("User not found")

    if user.id == actor.id:
        logger.warning(f"User {actor.id} attempted to delete their own account")
        raise ValidationError("You cannot delete your own account")

    store.delete_one(User, user_id)
    logger.info(f"User deleted: {user_id} by owner {actor.id}")
