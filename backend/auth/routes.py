"""
Authentication API endpoints.

This module provides REST API endpoints for:
- User registration (signup)
- Login
- Current user info
"""

import logging

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_current_user
from auth.security import CredentialService, get_credential_service, hash_password, verify_password
from errors import AuthError, Conflict
from models import User, UserRole
from schemas import AuthResponse, LoginRequest, SignupRequest, UserInfoResponse
from store import Store, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_payload(user: User, credential_service: CredentialService) -> dict:
    token = credential_service.issue_credential(user.id, user.email)
    return {"user": user, "token": token}


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    store: Store = Depends(get_store),
    credential_service: CredentialService = Depends(get_credential_service),
):
    """
    Register a new user account and return a credential for it.

    Emails are unique case-insensitively and stored lowercase. New accounts
    always get the global "member" role.

    Raises:
        Conflict: 409 if email already registered
    """
    email = request.email.lower()
    logger.info(f"Registration attempt for email: {email}")

    if store.find_one(User, User.email == email) is not None:
        logger.info(f"Registration failed: email already exists: {email}")
        raise Conflict("Email already registered")

    user = store.insert(
        User(
            name=request.name.strip(),
            email=email,
            password_hash=hash_password(request.password),
            role=UserRole.member,
        )
    )

    logger.info(f"User registered successfully: {user.email} (ID: {user.id})")
    return _auth_payload(user, credential_service)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    store: Store = Depends(get_store),
    credential_service: CredentialService = Depends(get_credential_service),
):
    """
    Login with email and password.

    Raises:
        AuthError: 401 if the email is unknown or the password is wrong
    """
    email = request.email.lower()
    logger.info(f"Login attempt for email: {email}")

    user = store.find_one(User, User.email == email)
    if user is None:
        logger.info(f"Login failed: user not found: {email}")
        raise AuthError("Invalid credentials")

    if not verify_password(request.password, user.password_hash):
        logger.info(f"Login failed: invalid password: {email}")
        raise AuthError("Invalid credentials")

    logger.info(f"User logged in successfully: {user.email} (ID: {user.id})")
    return _auth_payload(user, credential_service)


@router.get("/user-info", response_model=UserInfoResponse)
async def get_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user information (never includes the password hash)."""
    logger.debug(f"Fetching user info for: {current_user.id}")
    return {"user": current_user}
