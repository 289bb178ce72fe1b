import logging

from fastapi import APIRouter, Depends

from auth.dependencies import require_global_owner
from models import User
from schemas import MemberListResponse, MessageResponse
from services import users as user_service
from store import Store, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/members", response_model=MemberListResponse)
def list_members(
    current_user: User = Depends(require_global_owner),
    store: Store = Depends(get_store),
):
    """List all users with the member role (owner only)."""
    logger.debug(f"Owner {current_user.id} listing members")
    members = user_service.list_members(store)
    return {"success": True, "count": len(members), "data": members}


@router.delete("/members/{user_id}", response_model=MessageResponse)
def delete_member(
    user_id: str,
    current_user: User = Depends(require_global_owner),
    store: Store = Depends(get_store),
):
    """Delete a user account (owner only, never your own)."""
    user_service.delete_member(store, current_user, user_id)
    return {"success": True, "message": "User deleted successfully"}
