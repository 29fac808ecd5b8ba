"""
core/errors.py -- Exception taxonomy for the service layer.

Services raise these; the API layer maps each class to one HTTP status in
api/main.py. "Not found" is never an exception here -- lookups return None
and deletions return False.

Authentication failures are not exceptions either: a bad Basic-Auth header,
an unknown email and a wrong password all come back from
AuthenticationService.authenticate_basic() as None, so callers cannot tell
them apart.
"""

from __future__ import annotations


class StoreManagerError(Exception):
    """Base class for all service-layer errors."""


class ValidationError(StoreManagerError):
    """A required field is missing or blank.

    Carries the field name so clients can correct the request.
    """

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Field '{field}' is required.")


class DuplicateUserError(StoreManagerError):
    """Registration against an email that already has an account."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"User with email {email} already exists.")


class DuplicateStoreError(StoreManagerError):
    """Provisioning a store id that is already taken."""

    def __init__(self, store_id: str) -> None:
        self.store_id = store_id
        super().__init__(f"Store with id {store_id} already exists.")


class AuthorizationError(StoreManagerError):
    """The authenticated user's role does not permit the operation."""
