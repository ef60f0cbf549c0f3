"""
Capture Plan API Server

Entry point for the FastAPI application.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router as api_router
from app.core.config import Settings, get_settings
from app.core.database import Database
from app.core.logging import configure_logging
from app.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware
from app.core.redis import RedisRevocationList, create_redis

log = structlog.get_logger()


def describe_validation_error(exc: RequestValidationError) -> str:
    """Collapse pydantic errors into the single message clients display."""
    missing = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            return "Invalid JSON body"
        # An empty string counts as a missing field
        if error.get("type") == "missing" or (
            error.get("type") == "string_too_short" and error.get("input") == ""
        ):
            names = [str(part) for part in error.get("loc", ()) if part != "body"]
            if names:
                missing.append(".".join(names))
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    if any(error.get("type") == "missing" for error in exc.errors()):
        return "Request body is required"

    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"Invalid field '{field}': {message}" if field else message


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    revocations=None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The store and revocation list are built here from settings unless they
    are passed in, and are shared through ``app.state``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    if database is None and settings.database_url:
        database = Database(settings.database_url, echo=settings.database_echo)
    if revocations is None:
        revocations = RedisRevocationList(create_redis(settings.redis_url))

    app = FastAPI(
        title="Capture Plan",
        description="Multi-tenant capture-plan outlines and team membership.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.database = database
    app.state.revocations = revocations

    # Middleware (the last one added is the outermost)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.cookie_secure)
    app.add_middleware(
        CSRFMiddleware,
        session_cookie=settings.session_cookie,
        csrf_cookie=settings.csrf_cookie,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "X-CSRF-Token"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": describe_validation_error(exc)})

    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check: the store, when configured, must answer."""
        if app.state.database is not None:
            try:
                await app.state.database.ping()
            except Exception as exc:
                log.warning("readiness.database_unavailable", error=str(exc))
                return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info(
            "captureplan.starting",
            database_configured=app.state.database is not None,
        )
        if app.state.database is not None and settings.create_schema:
            await app.state.database.init_schema()

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("captureplan.shutting_down")
        if app.state.database is not None:
            await app.state.database.dispose()
        await app.state.revocations.close()

    return app


app = create_app()
