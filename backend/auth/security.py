"""
Security utilities for password hashing and credential (JWT) management.

This module provides cryptographic functions for:
- Password hashing using Argon2id (memory-hard, GPU-resistant)
- Issuing and verifying signed access tokens carrying user id + email
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings, get_settings
from errors import AuthError

logger = logging.getLogger(__name__)

# Password hashing configuration using Argon2id
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password string

    Example:
        >>> hashed = hash_password("my_secure_password")
        >>> verify_password("my_secure_password", hashed)
        True
    """
    logger.debug("Hashing password")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Returns:
        True if password matches, False otherwise
    """
    logger.debug("Verifying password")
    is_valid = pwd_context.verify(plain_password, hashed_password)
    logger.debug(f"Password verification result: {is_valid}")
    return is_valid


class CredentialService:
    """
    Issues and verifies signed access tokens.

    Built once from Settings; the secret, algorithm and lifetime are fixed for
    the life of the instance.
    """

    def __init__(self, settings: Settings):
        self._secret = settings.JWT_SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self._expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def issue_credential(self, user_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create an access token for a user.

        Example:
            >>> token = credentials.issue_credential("65f1c0ffee...", "ada@example.com")
        """
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=self._expire_minutes))
        payload: Dict[str, Any] = {"sub": str(user_id), "email": email, "type": "access", "exp": expire}
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        logger.debug(f"Access token issued for user {user_id}, expires at: {expire}")
        return token

    def verify_credential(self, token: str) -> Dict[str, str]:
        """
        Verify and decode an access token.

        Returns:
            {"user_id": ..., "email": ...}

        Raises:
            AuthError: if the token is malformed, expired, of the wrong type
                or missing its subject
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            logger.info(f"JWT verification failed: {str(e)}")
            raise AuthError("Invalid or expired token")

        if payload.get("type") != "access":
            logger.info(f"Invalid token type: {payload.get('type')}")
            raise AuthError("Invalid or expired token")

        user_id = payload.get("sub")
        if not user_id:
            logger.info("Token payload missing 'sub' claim")
            raise AuthError("Invalid token payload")

        return {"user_id": str(user_id), "email": payload.get("email")}


@lru_cache
def get_credential_service() -> CredentialService:
    return CredentialService(get_settings())
