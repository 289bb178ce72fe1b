from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging
import uvicorn

from config import get_settings
from database import Base, SessionLocal, engine
from errors import AppError
import models
from auth.routes import router as auth_router
from auth.security import hash_password
from routers.comments import router as comments_router
from routers.projects import router as projects_router
from routers.tasks import router as tasks_router
from routers.users import router as users_router

settings = get_settings()

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Task Board API",
    description="Projects, members, tasks on a board, and threaded task comments",
    version="1.0.0"
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(projects_router)
app.include_router(tasks_router)
app.include_router(comments_router)
app.include_router(users_router)


# ============== Error Handling ==============

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    logger.debug(f"Request validation failed on {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Server error"},
    )


# ============== Startup ==============

@app.on_event("startup")
async def prepare_database():
    """
    Create tables (when AUTO_CREATE_TABLES is on) and ensure the bootstrap
    owner account exists when BOOTSTRAP_OWNER_EMAIL/PASSWORD are set.

    The owner account is the only way to obtain the global "owner" role, which
    project creation and user administration require.
    """
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)

    if not (settings.BOOTSTRAP_OWNER_EMAIL and settings.BOOTSTRAP_OWNER_PASSWORD):
        logger.info("No bootstrap owner configured (BOOTSTRAP_OWNER_EMAIL / BOOTSTRAP_OWNER_PASSWORD)")
        return

    email = settings.BOOTSTRAP_OWNER_EMAIL.strip().lower()
    password = settings.BOOTSTRAP_OWNER_PASSWORD

    if settings.is_production_like and len(password.strip()) < 8:
        logger.error("BOOTSTRAP_OWNER_PASSWORD must be at least 8 characters in production/staging; skipping")
        return

    db = SessionLocal()
    try:
        owner = db.query(models.User).filter(models.User.email == email).first()
        if owner:
            if owner.role != models.UserRole.owner:
                owner.role = models.UserRole.owner
                db.commit()
                logger.info(f"Promoted existing user {owner.id} to owner")
            else:
                logger.info(f"Owner user already exists (email: {email})")
            return

        owner = models.User(
            name=settings.BOOTSTRAP_OWNER_NAME,
            email=email,
            password_hash=hash_password(password),
            role=models.UserRole.owner,
        )
        db.add(owner)
        db.commit()
        logger.info(f"Owner user created (email: {email})")
    except SQLAlchemyError as e:
        logger.error(f"Failed to ensure owner user exists: {e}")
        db.rollback()
        # Don't fail startup; the API still serves existing accounts
    finally:
        db.close()


@app.get("/health")
def health_check():
    return {"status": "healthy"}


def run():
    logger.info(f"Task Board API starting on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
