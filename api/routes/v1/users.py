"""
api/routes/v1/users.py -- User account REST endpoints.

Routes (in registration order to avoid FastAPI path capture conflicts):
  GET    /api/v1/users/me          -- current user (any authenticated user)
  GET    /api/v1/users             -- list users (ADMIN, MANAGER)
  POST   /api/v1/users             -- register user (ADMIN)
  GET    /api/v1/users/{email}     -- user detail (ADMIN, MANAGER, or self)
  PUT    /api/v1/users/{email}     -- update password/name (ADMIN or self)
  DELETE /api/v1/users/{email}     -- delete user (ADMIN)

Responses are UserResponse models, so password hashes never leave the API.
ValidationError and DuplicateUserError raised by the service are mapped to
400 and 409 by the exception handlers in api/main.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import UserCreate, UserResponse, UserUpdate
from auth.dependencies import get_current_user, require_admin, require_staff
from auth.roles import Role, has_role
from auth.service import AuthenticationService
from core.models import User

router = APIRouter()


def _service(request: Request) -> AuthenticationService:
    return request.app.state.auth_service


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": "User not found."})


def _forbidden() -> HTTPException:
    return HTTPException(
        status_code=403,
        detail={"code": "forbidden", "message": "You may only access your own account."},
    )


@router.get("/users/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the account behind the request's credentials."""
    return UserResponse.from_user(current_user)


@router.get("/users", response_model=list[UserResponse])
def list_users(request: Request, current_user: User = Depends(require_staff)) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in _service(request).get_all_users()]


@router.post("/users", response_model=UserResponse, status_code=201)
def register_user(
    request: Request,
    body: UserCreate,
    current_user: User = Depends(require_admin),
) -> UserResponse:
    """Register a new account. Admin only.

    An unrecognized role is stored as USER rather than rejected.
    """
    created = _service(request).register_user(
        body.email,
        body.password,
        body.name,
        body.role,
    )
    return UserResponse.from_user(created)


@router.get("/users/{email}", response_model=UserResponse)
def get_user(request: Request, email: str, current_user: User = Depends(get_current_user)) -> UserResponse:
    if email != current_user.email and not has_role(current_user, Role.ADMIN, Role.MANAGER):
        raise _forbidden()
    user = _service(request).get_user_by_email(email)
    if user is None:
        raise _not_found()
    return UserResponse.from_user(user)


@router.put("/users/{email}", response_model=UserResponse)
def update_user(
    request: Request,
    email: str,
    body: UserUpdate,
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    """Change password and/or name. Omitted or blank fields keep their values."""
    if email != current_user.email and not has_role(current_user, Role.ADMIN):
        raise _forbidden()
    updated = _service(request).update_user(email, body.password, body.name)
    if updated is None:
        raise _not_found()
    return UserResponse.from_user(updated)


@router.delete("/users/{email}", status_code=204)
def delete_user(request: Request, email: str, current_user: User = Depends(require_admin)) -> Response:
    if not _service(request).delete_user(email):
        raise _not_found()
    return Response(status_code=204)
