from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.core.errors import ConnectionFailure, InvalidOperation, NotFound, QueryAmbiguity, RepositoryError
from src.core.logging import configure_logging, correlation_id_var, session_id_var
from src.core.security import decode_session_token
from src.core.settings import get_app_settings
from src.db.audit import register_audit_filters
from src.db.run_migrations import main as run_alembic
from src.db.seed import seed_all
from src.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

# Routers
from src.api.routes.auth import router as auth_router
from src.api.routes.priorities import router as priorities_router
from src.api.routes.todos import router as todos_router

settings = get_app_settings()

# Configure structured logging once at import
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Every insert/update of an audited entity goes through the audit filters
register_audit_filters()

openapi_tags = [
    {"name": "Health", "description": "Liveness checks."},
    {"name": "Auth", "description": "Credentials login and session endpoints."},
    {"name": "Priorities", "description": "Todo priorities."},
    {"name": "Todos", "description": "Audited todo items."},
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

# CORS - avoid wildcard with credentials
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Enrich request context with correlation_id and session_id for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    sid = decode_session_token(cookie) if cookie else None
    token_corr = correlation_id_var.set(corr)
    token_sid = session_id_var.set(sid)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token_corr)
        session_id_var.reset(token_sid)

    response.headers["X-Correlation-ID"] = corr
    return response


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    ts = datetime.now(tz=timezone.utc)
    corr = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=corr,
        path=request.url.path,
        method=request.method,
        timestamp=ts,
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=exc.errors(),
    )


# Repository error kinds and the status each maps to
_REPOSITORY_ERRORS: dict[type[RepositoryError], tuple[int, str]] = {
    NotFound: (404, "not_found"),
    InvalidOperation: (400, "invalid_operation"),
    QueryAmbiguity: (409, "query_ambiguity"),
    ConnectionFailure: (503, "connection_failure"),
}


@app.exception_handler(RepositoryError)
async def repository_exception_handler(request: Request, exc: RepositoryError):
    """
    Map repository errors onto HTTP status codes.
    """
    status_code, error_type = _REPOSITORY_ERRORS.get(type(exc), (500, "repository_error"))
    if status_code >= 500:
        logger.error("Repository failure: %s", exc.message)
    return _build_error_response(
        request=request,
        status_code=status_code,
        error_type=error_type,
        message=exc.message,
        details=exc.details or None,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


@app.on_event("startup")
def on_startup() -> None:
    """
    Run migrations and optional seeding on service startup.

    This ensures the database schema is up to date. Seeding is opt-in via settings.
    """
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            logger.info("Running Alembic migrations: upgrade head")
            run_alembic(["upgrade", "head"])
            logger.info("Migrations completed.")
        except Exception as exc:
            logger.exception("Migration step failed: %s", exc)
            # Do not crash the app in case of transient DB issues; rely on retries or later readiness checks.

    if settings.AUTO_SEED:
        try:
            logger.info("Running database seeding...")
            seed_all()
            logger.info("Seeding completed.")
        except Exception as exc:
            logger.exception("Seeding step failed: %s", exc)


# Build API v1 router and include sub-routers
api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy")


api_v1.include_router(auth_router)
api_v1.include_router(priorities_router)
api_v1.include_router(todos_router)

app.include_router(api_v1)
