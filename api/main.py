"""
api/main.py -- FastAPI application entry point for Store Manager.

Run with:  uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins

Lifespan handles startup (data manager, repositories, services, bootstrap
admin) and shutdown (dispose the engine) symmetrically. Everything a route
needs is reached through app.state, never through module globals, so tests
can swap in their own data manager by replacing the lifespan.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.stores import router as stores_router
from api.routes.v1.users import router as users_router
from auth.roles import Role
from auth.service import AuthenticationService
from core.config import Settings, get_settings
from core.errors import AuthorizationError, DuplicateStoreError, DuplicateUserError, ValidationError
from repository.stores import StoreRepository
from repository.users import UserRepository
from services.stores import StoreService
from storage.contract import DataManager
from storage.sql import SqlDataManager

VERSION = "1.0.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.DEBUG if _settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("storemgr.api")

# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def wire_services(app: FastAPI, data_manager: DataManager) -> None:
    """Build repositories and services over data_manager and attach them to app.state."""
    app.state.data_manager = data_manager
    app.state.auth_service = AuthenticationService(UserRepository(data_manager))
    app.state.store_service = StoreService(StoreRepository(data_manager))


def bootstrap_admin(auth_service: AuthenticationService, settings: Settings) -> bool:
    """Create the configured admin account if no users exist yet.

    Returns True if an account was created. The bootstrap is skipped when
    ADMIN_EMAIL is unset or any user already exists, so restarting with the
    same environment never resets a changed admin password.
    """
    if not settings.admin_email:
        return False
    if auth_service.get_all_users():
        return False
    auth_service.register_user(settings.admin_email, settings.admin_password, settings.admin_name, Role.ADMIN)
    return True


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage the data manager and services across the full server lifetime."""
    logger.info("Store Manager API starting up")
    data_manager = SqlDataManager(_settings.database_url)
    wire_services(app, data_manager)
    if bootstrap_admin(app.state.auth_service, _settings):
        logger.info("Bootstrap admin account created")
    logger.info("Services initialized")

    yield

    data_manager.close()
    logger.info("Store Manager API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Store Manager API",
    description="Store and user management with HTTP Basic authentication.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# TrustedHost -> CORS.
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

# ---------------------------------------------------------------------------
# Request logging middleware
#
# Logs method, path, status and latency. Headers are never logged: every
# request carries the caller's password in its Authorization header.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(stores_router, prefix="/api/v1", tags=["Stores"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


@app.exception_handler(ValidationError)
async def service_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Return 400 naming the missing field."""
    return _error(400, "validation_error", str(exc), detail=exc.field)


@app.exception_handler(DuplicateUserError)
async def duplicate_user_handler(request: Request, exc: DuplicateUserError) -> JSONResponse:
    return _error(409, "conflict", str(exc))


@app.exception_handler(DuplicateStoreError)
async def duplicate_store_handler(request: Request, exc: DuplicateStoreError) -> JSONResponse:
    return _error(409, "conflict", str(exc))


@app.exception_handler(AuthorizationError)
async def authorization_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    return _error(403, "forbidden", str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return _error(422, "validation_error", "Request validation failed.", detail=str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with a {"code", "message"} dict detail,
    which is unpacked into the standard envelope rather than stringified.
    exc.headers is forwarded so 401 responses keep their WWW-Authenticate
    challenge.
    """
    if isinstance(exc.detail, dict):
        response = _error(
            exc.status_code,
            exc.detail.get("code", f"http_{exc.status_code}"),
            exc.detail.get("message", ""),
            detail=exc.detail.get("detail"),
        )
    else:
        response = _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors, including storage faults.

    The raw exception is logged, never written to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No authentication.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=VERSION)
