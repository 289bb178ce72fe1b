"""
FastAPI dependencies for authentication and global-role checks.

This module provides dependency functions that can be used in route handlers to:
- Extract and validate the current user from a bearer credential
- Enforce the global "owner" role for user administration and project creation
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from auth.security import CredentialService, get_credential_service
from config import get_settings
from errors import AuthError, Forbidden
from models import User, UserRole
from store import Store, get_store

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme; missing headers are reported as AuthError, not 403
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: Store = Depends(get_store),
    credential_service: CredentialService = Depends(get_credential_service),
) -> User:
    """
    Resolve the authenticated user from the Authorization header.

    The user is re-loaded from the store on every request so deleted accounts
    lose access immediately.

    Raises:
        AuthError: 401 if the header is missing, the token is invalid, or the
            user no longer exists

    Example:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None or not credentials.credentials:
        logger.info("No authentication credentials provided")
        raise AuthError("Authorization token missing")

    claims = credential_service.verify_credential(credentials.credentials)

    user = store.find_by_id(User, claims["user_id"])
    if user is None:
        logger.info(f"User not found for id: {claims['user_id']}")
        raise AuthError("User not found")

    logger.debug(f"User authenticated via JWT: {user.id}")
    return user


def is_global_owner(user: User) -> bool:
    return user.role == UserRole.owner


async def require_global_owner(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency for endpoints restricted to users with the global "owner" role.

    Raises:
        Forbidden: 403 if the user is a plain member
    """
    if not is_global_owner(current_user):
        logger.info(f"Access denied: user {current_user.id} lacks global owner role")
        raise Forbidden("Not authorized to access this route. Owner role required.")
    return current_user


async def require_project_creator(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency gating project creation (global capability canCreateProject).

    When PROJECT_CREATION_REQUIRES_OWNER is disabled any authenticated user
    may create projects.
    """
    if get_settings().PROJECT_CREATION_REQUIRES_OWNER and not is_global_owner(current_user):
        logger.info(f"User {current_user.id} denied project creation: global owner role required")
        raise Forbidden("Only owners can create projects")
    return current_user
