import secrets

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import get_settings


def _build_engine(database_url: str):
    """Create the SQLAlchemy engine for the configured DATABASE_URL."""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


engine = _build_engine(get_settings().DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def new_object_id() -> str:
    """Opaque 24-char hex identifier used as primary key for every table."""
    return secrets.token_hex(12)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
