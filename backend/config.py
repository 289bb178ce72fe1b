"""
Application configuration loaded from environment variables.

A single Settings instance is built once (see get_settings) and handed to the
database engine factory and the credential service at construction time.
Nothing reads os.environ after startup.
"""

import logging
import secrets
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ["HS256", "HS384", "HS512"]
DEFAULT_TOKEN_EXPIRE_MINUTES = 1440


class Settings(BaseSettings):
    """Runtime settings for the task board backend."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=True)

    # Database
    DATABASE_URL: str = "sqlite:///./taskboard.db"
    AUTO_CREATE_TABLES: bool = True

    # JWT
    JWT_SECRET_KEY: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = DEFAULT_TOKEN_EXPIRE_MINUTES

    # Application
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Only users with the global "owner" role may create projects
    PROJECT_CREATION_REQUIRES_OWNER: bool = True

    # Optional owner account ensured at startup
    BOOTSTRAP_OWNER_EMAIL: Optional[str] = None
    BOOTSTRAP_OWNER_PASSWORD: Optional[str] = None
    BOOTSTRAP_OWNER_NAME: str = "Owner"

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def _check_algorithm(cls, value: str) -> str:
        if value not in SUPPORTED_ALGORITHMS:
            logger.warning(
                f"Unsupported JWT_ALGORITHM={value}. Using HS256. "
                f"Supported: {', '.join(SUPPORTED_ALGORITHMS)}"
            )
            return "HS256"
        return value

    @field_validator("ACCESS_TOKEN_EXPIRE_MINUTES")
    @classmethod
    def _check_expiry(cls, value: int) -> int:
        # 1 minute to 30 days
        if value < 1 or value > 43200:
            logger.warning(
                f"ACCESS_TOKEN_EXPIRE_MINUTES={value} is outside safe range (1-43200). "
                f"Using default of {DEFAULT_TOKEN_EXPIRE_MINUTES} minutes."
            )
            return DEFAULT_TOKEN_EXPIRE_MINUTES
        return value

    @property
    def is_production_like(self) -> bool:
        return self.ENVIRONMENT.lower() in ("production", "staging")

    @property
    def cors_origins_list(self) -> List[str]:
        """Return the configured CORS origins as a sanitized list."""
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Build the settings once and fill in a development JWT secret if none is set.

    Raises:
        ValueError: if JWT_SECRET_KEY is missing in a production-like environment
    """
    settings = Settings()
    if not settings.JWT_SECRET_KEY:
        if settings.is_production_like:
            raise ValueError(
                "JWT_SECRET_KEY environment variable is required in production. "
                "Generate a secure key with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        settings.JWT_SECRET_KEY = "dev-insecure-key-" + secrets.token_urlsafe(32)
        logger.warning(
            "JWT_SECRET_KEY not set! Using temporary development key. "
            "This is INSECURE for production. Set JWT_SECRET_KEY environment variable."
        )
    return settings
