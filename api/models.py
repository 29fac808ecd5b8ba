"""
API request and response models for Store Manager REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py, which
own the internal domain representation. Route handlers map between the two.

UserResponse has no password field. Whatever the service returns, a stored
hash never leaves the API.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.models import Store, User

# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Request body for POST /api/v1/users.

    Blank values are passed through so the service reports which field is
    missing. role is free text of any length: unknown values become USER.
    password is stored exactly as sent, surrounding whitespace included, so
    it matches what the client later puts in its Basic-Auth header.
    """

    email: str = Field(max_length=255)
    password: str = Field(max_length=255)
    name: str = Field(max_length=255)
    role: Optional[str] = None

    @field_validator("email", "name", "role")
    @classmethod
    def strip_whitespace(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class UserUpdate(BaseModel):
    """Request body for PUT /api/v1/users/{email}. Omitted fields are unchanged."""

    password: Optional[str] = Field(default=None, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)


class UserResponse(BaseModel):
    """A user as exposed over HTTP -- never includes the password."""

    model_config = ConfigDict(frozen=True)

    email: str
    name: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(email=user.email, name=user.name, role=user.role.value)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class StoreCreate(BaseModel):
    """Request body for POST /api/v1/stores."""

    model_config = ConfigDict(str_strip_whitespace=True)

    store_id: str = Field(max_length=64)
    name: str = Field(max_length=255)
    address: str = Field(max_length=512)
    description: Optional[str] = Field(default=None, max_length=2000)


class StoreUpdate(BaseModel):
    """Request body for PUT /api/v1/stores/{store_id}. At least one field is required."""

    model_config = ConfigDict(str_strip_whitespace=True)

    description: Optional[str] = Field(default=None, max_length=2000)
    address: Optional[str] = Field(default=None, max_length=512)


class StoreResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    address: str
    description: str

    @classmethod
    def from_store(cls, store: Store) -> "StoreResponse":
        return cls(id=store.id, name=store.name, address=store.address, description=store.description)
