"""FastAPI main application."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.crm.api.admin import router as admin_router
from apps.crm.api.customers import router as customers_router
from apps.crm.api.followups import router as followups_router
from apps.crm.api.health import router as health_router
from apps.crm.api.upload import router as upload_router
from apps.crm.config import Settings, get_settings
from apps.crm.core.errors import AppError, InternalError, translate_db_error
from apps.crm.database import create_db_engine, create_session_factory
from apps.crm.services.storage import LocalStorage, storage_from_settings

VERSION = "1.0.0"

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ]
)

logger = structlog.get_logger()


def _error_response(status_code: int, message: str, details: Optional[list] = None) -> JSONResponse:
    content: dict = {"success": False, "error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _field_path(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=exc.message)
        return _error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": _field_path(tuple(err.get("loc", ()))),
                "message": str(err.get("msg", "")).removeprefix("Value error, "),
            }
            for err in exc.errors()
        ]
        return _error_response(400, "Request validation failed", details)

    @app.exception_handler(SQLAlchemyError)
    async def _database_error(request: Request, exc: SQLAlchemyError):
        logger.error("Database error", path=request.url.path, error=str(exc))
        error = translate_db_error(exc)
        return _error_response(error.status_code, error.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path, error=str(exc))
        error = InternalError()
        return _error_response(error.status_code, error.message)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The engine, session factory and storage backend are created once here
    and shared through ``app.state``.

    Args:
        settings: Settings to use; read from the environment when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    engine = create_db_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info(
            "Starting Follow-up CRM API",
            version=VERSION,
            storage_backend=settings.storage_backend,
        )
        yield
        engine.dispose()
        logger.info("Shutting down Follow-up CRM API")

    app = FastAPI(
        title="Follow-up CRM API",
        description="Customers, follow-up records, attachments and next-step reminders",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.storage = storage_from_settings(settings)
    app.state.started_at = datetime.utcnow()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Include routers
    app.include_router(health_router, tags=["Health"])
    app.include_router(customers_router, tags=["Customers"])
    app.include_router(followups_router, tags=["Follow-ups"])
    app.include_router(upload_router, tags=["Upload"])
    app.include_router(admin_router, prefix="/admin", tags=["Admin"])

    if isinstance(app.state.storage, LocalStorage):
        upload_root = Path(settings.upload_dir)
        upload_root.mkdir(parents=True, exist_ok=True)
        app.mount("/files", StaticFiles(directory=upload_root), name="files")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Follow-up CRM API",
            "version": VERSION,
            "docs": "/docs",
        }

    return app


app = create_app()
