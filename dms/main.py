"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import engine, get_db, init_db, SessionLocal, DATABASE_URL
from .api import (
    auth_router,
    users_router,
    categories_router,
    folders_router,
    documents_router,
    versions_router,
    comments_router,
    files_router,
    audit_router,
)
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .core.seeder import seed_initial_admin
from .exceptions import DmsException
from .middleware.exception_handler import dms_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .services import audit_service
from .storage import StorageConfig, build_storage

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _validate_database_connection() -> None:
    """Test that the database is reachable. Exits with clear message on failure."""
    masked = _mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except SQLAlchemyError as e:
        if DATABASE_URL.startswith("sqlite"):
            hint = "Check that the directory exists and is writable."
        else:
            hint = "Verify the server is running and DATABASE_URL credentials are correct."
        logger.critical(
            f"Database connection failed.\n"
            f"  DATABASE_URL: {masked}\n"
            f"  {hint}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e


_validate_database_connection()
init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the DMS API."""
    # --- Security validation ---
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        for problem in settings.insecure_settings():
            logger.warning(f"SECURITY: {problem}")

    # --- Blob storage ---
    app.state.storage = build_storage(StorageConfig.from_settings(settings))
    logger.info(f"Blob storage backend: {settings.storage_backend.value}")

    # --- Seed initial admin (first startup only) ---
    db = SessionLocal()
    try:
        if seed_initial_admin(db, settings):
            logger.info("First startup: created initial admin account")
    except (DmsException, SQLAlchemyError) as e:
        logger.warning(f"Admin seed failed (non-fatal): {e}")
        db.rollback()
    finally:
        db.close()

    # --- Purge old audit logs ---
    if settings.audit_retention_days > 0:
        db = SessionLocal()
        try:
            purged = audit_service.purge_old_entries(db, days=settings.audit_retention_days)
            if purged > 0:
                logger.info(f"Purged {purged} audit log entries older than {settings.audit_retention_days} days")
        finally:
            db.close()

    yield  # App runs here


# Create FastAPI app
app = FastAPI(
    title="DMS API",
    description=(
        "REST API for a multi-tenant document management system: categories, "
        "personal and shared folders, versioned documents, threaded comments "
        "and secure downloads.\n\n"
        "**Authentication:** every endpoint under `/api` except login requires a "
        "session token, sent as `Authorization: Bearer <token>` or in the "
        "`dms_session` cookie set by `POST /api/auth/login`."
    ),
    version=APP_VERSION,
    lifespan=lifespan,
)

# Middleware stack (outermost first — CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

# Register exception handlers
app.add_exception_handler(DmsException, dms_exception_handler)

db_type = "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite"
logger.info(
    "DMS API started | env=%s | db=%s | storage=%s | cors=%s",
    settings.environment.value,
    db_type,
    settings.storage_backend.value,
    ",".join(settings.get_cors_origins()),
)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(categories_router)
app.include_router(folders_router)
app.include_router(documents_router)
app.include_router(versions_router)
app.include_router(comments_router)
app.include_router(files_router)
app.include_router(audit_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "DMS API",
        "version": APP_VERSION,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint returning database status, uptime, and document count.

    Never raises — returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    document_count = 0
    try:
        db.execute(text("SELECT 1"))
        row = db.execute(text("SELECT COUNT(*) FROM documents")).scalar()
        document_count = row or 0
    except SQLAlchemyError:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": APP_VERSION,
        "document_count": document_count,
    }
