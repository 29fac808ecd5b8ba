"""
auth/roles.py -- Role enumeration, total role parser, and role checks.

Policy:
  Role strings arrive from API bodies, CLI flags and legacy rows. parse_role()
  never raises: anything that is not a case-insensitive match for a member
  maps to Role.USER. Malformed input therefore degrades privilege instead of
  blocking the request, and can never grant more than USER.

  The fallback is an explicit branch, not a caught KeyError, so it shows up
  in coverage and review.

Layer rule: imports only core.errors.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from core.errors import AuthorizationError

if TYPE_CHECKING:
    from core.models import User

logger = logging.getLogger("storemgr.auth")


class Role(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


def parse_role(value: Optional[Union[Role, str]]) -> Role:
    """Return the Role named by value, falling back to Role.USER.

    Surrounding whitespace and case are ignored, so " admin", "Admin" and
    "ADMIN" all resolve to Role.ADMIN.
    """
    if isinstance(value, Role):
        return value
    if value is None:
        return Role.USER
    normalized = value.strip().upper()
    if normalized in Role.__members__:
        return Role[normalized]
    # Unknown role -- least privilege.
    logger.debug("Unrecognized role %r, assigning %s", value, Role.USER.value)
    return Role.USER


def has_role(user: User, *roles: Role) -> bool:
    """Return True if the user's role is one of roles."""
    return user.role in roles


def ensure_role(user: User, *roles: Role) -> None:
    """Raise AuthorizationError unless the user's role is one of roles."""
    if not has_role(user, *roles):
        allowed = ", ".join(r.value for r in roles)
        raise AuthorizationError(f"Requires one of: {allowed}.")
