"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Every protected request carries "Authorization: Basic base64(email:password)".
There is no session or token: credentials are verified on each request by
AuthenticationService.authenticate_basic().

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.
require_roles() builds a dependency that also raises HTTP 403 for the wrong role.

All 401s are identical whether the header was malformed, the email unknown,
or the password wrong.

Layer rule: no imports from services/ or client/.
  auth/dependencies.py may import from fastapi (for Depends/HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from typing import Callable

from fastapi import HTTPException, Request

from auth.roles import Role, has_role
from auth.service import AuthenticationService
from core.models import User

_WWW_AUTHENTICATE = {"WWW-Authenticate": 'Basic realm="store-manager"'}


def try_get_current_user(request: Request) -> User | None:
    """Authenticate the request's Basic-Auth header. Never raises."""
    auth_service: AuthenticationService = request.app.state.auth_service
    return auth_service.authenticate_basic(request.headers.get("Authorization"))


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
            headers=_WWW_AUTHENTICATE,
        )
    return user


def require_roles(*roles: Role) -> Callable[[Request], User]:
    """Return a dependency that requires one of roles.

    Use as a FastAPI dependency:
        @router.delete("/stores/{store_id}")
        def route(user: User = Depends(require_roles(Role.ADMIN))): ...
    """
    allowed = ", ".join(r.value for r in roles)

    def dependency(request: Request) -> User:
        user = get_current_user(request)
        if not has_role(user, *roles):
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": f"Requires one of: {allowed}."},
            )
        return user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_staff = require_roles(Role.ADMIN, Role.MANAGER)
