"""
Research Library Server - Main FastAPI Application

This module contains the main FastAPI application for the research library.
It serves the REST API used by the library frontend: browsing and downloading
research papers, and the signed-in management of papers, strands, users and
the activity log.
"""

import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

import config
from exceptions import LibraryError, RateLimitError
from library import LibraryServices, BuildServices
from managers.database_manager import DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD


def ConfigureLogging():
    """Log to the console and to a daily file under logs/"""
    # Create logs directory if it doesn't exist
    logs_dir = Path("logs")
    logs_dir.mkdir(exist_ok=True)

    # Create log filename with timestamp
    log_filename = logs_dir / f"research-library-{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            # Console handler
            logging.StreamHandler(),
            # File handler with rotation (max 10MB per file, keep 10 backup files)
            RotatingFileHandler(
                log_filename,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )


logger = logging.getLogger(__name__)


# ==================== Lifespan Events ====================

def Startup(library: LibraryServices) -> None:
    """
    Prepare the database, file storage and housekeeping before serving

    Args:
        library: Managers of the application being started
    """
    logger.info("Research Library Server starting up...")

    admin_created = library.db_manager.InitializeDatabase()
    if admin_created:
        logger.warning("=" * 60)
        logger.warning("DEFAULT ADMIN USER CREATED")
        logger.warning(f"Username: {DEFAULT_ADMIN_USERNAME}")
        logger.warning(f"Password: {DEFAULT_ADMIN_PASSWORD}")
        logger.warning("CHANGE THIS PASSWORD IMMEDIATELY!")
        logger.warning("=" * 60)
    logger.info("Database initialized successfully")

    library.storage.InitializeStorage()
    logger.info("File storage initialized successfully")

    library.session_manager.idle_minutes = library.db_manager.GetIntSetting("session_idle_minutes")

    purged_logs = library.activity_log.PurgeExpired()
    purged_sessions = library.session_manager.CleanupExpiredSessions()
    logger.info(f"Purged {purged_logs} expired activity logs and {purged_sessions} expired sessions")

    if config.SESSION_SECRET_IS_EPHEMERAL:
        logger.warning("LIBRARY_SESSION_SECRET is not set; sessions will not survive a restart")

    logger.info("Server startup complete")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler for startup and shutdown
    """
    Startup(app.state.library)

    yield

    logger.info("Research Library Server shutting down...")
    logger.info("Shutdown complete")


# ==================== Exception Handlers ====================

async def library_error_handler(request: Request, exc: LibraryError):
    """Turn domain errors into {"message": ...} responses with their status code"""
    content = {"message": exc.message}
    headers = None
    if isinstance(exc, RateLimitError):
        content["retryAfter"] = exc.retry_after
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400), reported with the first problem"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": "Server Error"})


# ==================== FastAPI Application ====================

def CreateApp(library: LibraryServices = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        library: Pre-built managers (tests pass ones over temporary paths);
                 defaults to managers over the configured database and storage

    Returns:
        FastAPI: Application with all routers mounted under /api
    """
    app = FastAPI(
        title="Research Library Server",
        description="Research paper repository with an admin dashboard",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.library = library or BuildServices()

    # ==================== CORS Middleware ====================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LibraryError, library_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ==================== Include Routers ====================

    from routes import auth, users, strands, papers, activity_logs, stats, settings, status as status_routes

    for module in (status_routes, auth, users, strands, papers, activity_logs, stats, settings):
        app.include_router(module.router, prefix="/api")

    return app


# ==================== Main Entry Point ====================

if __name__ == "__main__":
    """
    Run the server using uvicorn
    """
    ConfigureLogging()
    logger.info("Starting Research Library Server...")

    uvicorn.run(
        CreateApp(),
        host=config.HOST,
        port=config.PORT,
        reload=False,
        log_level="info"
    )
