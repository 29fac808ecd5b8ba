"""
core/models.py -- Domain dataclasses for Store Manager.

Pattern: Data class (pure data container, zero logic). The storage layer maps
rows to these; services and routes do the work.

Layer rule: no imports from api/, storage/, repository/, services/ or client/.
auth.roles is allowed because Role is part of the User's shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from auth.roles import Role


@dataclass
class User:
    """An account that can authenticate against the API.

    email is the natural key and is compared case-sensitively.

    password is the stored value: a bcrypt hash for every record written by
    AuthenticationService, or legacy plaintext for records migrated from
    before hashing was introduced. It is None only for records that were
    imported without a credential -- those can never authenticate.
    """

    email: str
    name: str
    role: Role = Role.USER
    password: Optional[str] = None


@dataclass
class Store:
    """A physical store location.

    id is the caller-chosen natural key (e.g. "S001"), not a DB sequence.
    """

    id: str
    name: str
    address: str
    description: str = ""
