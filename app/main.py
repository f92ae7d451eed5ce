"""Tutor File Sharing API - Main Application Module.

This module initializes the FastAPI application with configuration,
middleware, routing, and lifecycle management for the file sharing service.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import ConfigValidator, StorageBackendEnum, get_config_summary, settings
from app.core.logging_config import configure_logging
from app.core.rate_limit import limiter
from app.database import AsyncSessionLocal, engine
from app.schemas.base import ErrorResponse
from models import Base

logger = logging.getLogger(__name__)


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; style-src 'self' 'unsafe-inline'; "
    "script-src 'self'; img-src 'self' data: https:;"
)

# The interactive docs pull their assets from a CDN.
CSP_EXEMPT_PATHS = ("/docs", "/redoc", "/openapi.json")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifecycle events."""
    configure_logging()
    logger.info("Starting %s (%s)", settings.app_name, settings.environment.value)
    if settings.is_production:
        ConfigValidator.validate_required_settings()
    logger.debug("Configuration summary: %s", get_config_summary())

    # Development and tests create tables directly; deployments use `alembic upgrade head`.
    if settings.is_development or settings.is_testing:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")
    else:
        logger.info("Schema managed by Alembic migrations")

    if not settings.has_admin_credentials:
        logger.warning("ADMIN_KEY_HASH is not set; admin login is disabled")

    yield

    logger.info("Shutting down %s", settings.app_name)
    await engine.dispose()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    error_code: str,
    details=None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        message=message,
        error_code=error_code,
        details=details,
        timestamp=datetime.now(timezone.utc),
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status_code, content=body.model_dump(mode="json"), headers=headers
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Tutor file sharing with admin uploads and reviewed student submissions",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.limiter = limiter

    setup_middleware(app)
    setup_exception_handlers(app)
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware.

    The last middleware added runs first, so request IDs and security headers
    also reach responses produced by the rate limiter.
    """
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        if not request.url.path.startswith(CSP_EXEMPT_PATHS):
            response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        return response

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Structured detail comes from BaseAppException subclasses
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        return _error_response(
            request,
            exc.status_code,
            message,
            error_code,
            details,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            if "input" in error:
                error_dict["input"] = str(error["input"])
            errors.append(error_dict)

        return _error_response(request, 400, "Validation error", "INVALID_INPUT", errors)

    # SlowAPIMiddleware replaces coroutine handlers with its own default, so this stays sync.
    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(
            "Rate limit exceeded for %s on %s",
            request.client.host if request.client else "unknown",
            request.url.path,
        )
        if request.url.path.startswith("/api/auth"):
            message = "Too many authentication attempts. Please try again later."
        else:
            message = "Too many requests. Please try again later."
        return _error_response(
            request,
            429,
            message,
            "RATE_LIMITED",
            {"limit": str(exc.detail)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        details = None if settings.is_production else {"error": str(exc)}
        return _error_response(request, 500, "Internal server error", "INTERNAL_ERROR", details)


def setup_routers(app: FastAPI):
    """Configure application routers."""
    from app.domains.auth.controller import router as auth_router
    from app.domains.file.controller import router as file_router
    from app.domains.submission.controller import router as submission_router

    @limiter.exempt
    async def health_check():
        """Service and database health."""
        db_status = "healthy"
        try:
            async with AsyncSessionLocal() as db:
                await db.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database health check failed: %s", e)
            db_status = "unhealthy"

        body = {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "version": settings.version,
            "environment": settings.environment.value,
            "timestamp": _utc_timestamp(),
            "services": {
                "database": db_status,
                "storage": settings.storage_backend.value,
            },
        }
        return JSONResponse(status_code=200 if db_status == "healthy" else 503, content=body)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["health"])
    app.add_api_route("/api/health", health_check, methods=["GET"], tags=["health"])

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "description": "Tutor file sharing API",
            "docs_url": "/docs" if settings.is_development else None,
        }

    app.include_router(auth_router)
    app.include_router(file_router)
    app.include_router(submission_router)

    if settings.storage_backend == StorageBackendEnum.local:
        from app.domains.media.controller import router as media_router

        app.include_router(media_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
