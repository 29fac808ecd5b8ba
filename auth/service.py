"""
auth/service.py -- Authentication and user account management.

AuthenticationService is the only code path that writes user credentials.
Every password it stores has passed through hash_password(); it never hands
a caller-supplied plaintext to the repository.

Security design decisions:
  Basic auth: authenticate_basic() folds every failure (wrong scheme, bad
       base64, missing colon, unknown email, no stored password, mismatch)
       into a single None. Callers cannot tell which check failed, so error
       responses cannot be used to enumerate accounts.

  Timing: an unknown email still runs bcrypt against DUMMY_HASH, so response
       time does not reveal whether the email exists either.

  Legacy plaintext: rows written before hashing was introduced hold the raw
       password. is_hashed() tells the two apart by shape. Plaintext rows
       are compared with hmac.compare_digest and never reach
       verify_password().

  Registration race: the exists-check and the save run under self._lock, so
       two concurrent registrations of one email on this instance cannot both
       succeed. The storage primary key is the backstop across processes.

No method logs passwords or Authorization header values.

Layer rule: no imports from api/, services/ or client/.
"""

from __future__ import annotations

import base64
import hmac
import logging
import threading
from dataclasses import replace
from typing import Optional, Union

from auth.passwords import DUMMY_HASH, hash_password, is_hashed, verify_password
from auth.roles import Role, parse_role
from core.errors import DuplicateUserError
from core.models import User
from core.validation import is_blank, require
from repository.users import UserRepository

logger = logging.getLogger("storemgr.auth")

_BASIC_PREFIX = "Basic "


class AuthenticationService:
    """Authenticate Basic-Auth credentials and manage user accounts.

    Usage:
        service = AuthenticationService(UserRepository(SqlDataManager()))
        service.register_user("a@x.com", "secret", "Ann", "MANAGER")
        user = service.authenticate_basic("Basic YUB4LmNvbTpzZWNyZXQ=")
    """

    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def authenticate_basic(self, auth_header: Optional[str]) -> Optional[User]:
        """Return the User named by a Basic-Auth header, or None.

        auth_header must be "Basic " + base64(email ":" password). Only the
        first colon separates email from password, so passwords may contain
        colons. Never raises for malformed input.
        """
        credentials = _decode_basic(auth_header)
        if credentials is None:
            return None
        email, password = credentials

        user = self._users.find_by_email(email)
        if user is None or not user.password:
            # Equalize timing -- do NOT return before running bcrypt.
            verify_password(password, DUMMY_HASH)
            return None

        if is_hashed(user.password):
            matches = verify_password(password, user.password)
        else:
            matches = hmac.compare_digest(user.password.encode("utf-8"), password.encode("utf-8"))
        return user if matches else None

    # ------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------

    def register_user(
        self,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str],
        role: Optional[Union[Role, str]] = Role.USER,
    ) -> User:
        """Create an account and return the persisted record.

        role may be a Role, a role string, or None (USER). Unknown role
        strings become USER; a blank role string is rejected.

        Raises:
            ValidationError: email, password, name, or a given role string is blank.
            DuplicateUserError: an account with this email already exists.
        """
        require(email, "email")
        require(password, "password")
        require(name, "name")
        if isinstance(role, str):
            require(role, "role")
        assigned_role = parse_role(role)

        with self._lock:
            if self._users.exists_by_email(email):
                raise DuplicateUserError(email)
            user = User(email=email, name=name, role=assigned_role, password=hash_password(password))
            saved = self._users.save(user)

        logger.info("Registered user %s with role %s", email, assigned_role.value)
        return saved

    def user_exists(self, email: Optional[str]) -> bool:
        if is_blank(email):
            return False
        return self._users.exists_by_email(email)

    def get_all_users(self) -> list[User]:
        return self._users.find_all()

    def get_user_by_email(self, email: Optional[str]) -> Optional[User]:
        if is_blank(email):
            return None
        return self._users.find_by_email(email)

    def update_user(
        self,
        email: Optional[str],
        password: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Optional[User]:
        """Selectively update password and/or name. Role is never changed.

        Blank or None fields keep their stored value. A new password is
        hashed before it is stored. Returns None if the user does not exist.
        """
        if is_blank(email):
            return None
        user = self._users.find_by_email(email)
        if user is None:
            return None

        changes: dict = {}
        if not is_blank(password):
            changes["password"] = hash_password(password)
        if not is_blank(name):
            changes["name"] = name
        if not changes:
            return user

        updated = self._users.save(replace(user, **changes))
        logger.info("Updated user %s (%s)", email, ", ".join(sorted(changes)))
        return updated

    def delete_user(self, email: Optional[str]) -> bool:
        """Delete an account. Returns True only if a record was removed."""
        if is_blank(email):
            return False
        deleted = self._users.delete_by_email(email)
        if deleted:
            logger.info("Deleted user %s", email)
        return deleted


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _decode_basic(auth_header: Optional[str]) -> Optional[tuple[str, str]]:
    """Split a Basic-Auth header into (email, password), or None if malformed."""
    if not auth_header or not auth_header.startswith(_BASIC_PREFIX):
        return None
    encoded = auth_header[len(_BASIC_PREFIX):].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except ValueError:
        # binascii.Error, UnicodeDecodeError and non-ASCII input are all ValueError.
        return None
    email, sep, password = decoded.partition(":")
    if not sep:
        return None
    return email, password


def encode_basic(email: str, password: str) -> str:
    """Build the Basic-Auth header value for email and password."""
    token = base64.b64encode(f"{email}:{password}".encode("utf-8")).decode("ascii")
    return f"{_BASIC_PREFIX}{token}"
