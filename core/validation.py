"""
core/validation.py -- Blank-field checks shared by repositories and services.

"Blank" means None, empty, or whitespace only. Repositories use is_blank() to
short-circuit lookups; services use require() to reject requests.
"""

from __future__ import annotations

from typing import Optional

from core.errors import ValidationError


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def require(value: Optional[str], field: str) -> str:
    """Return value unchanged, or raise ValidationError(field) if it is blank."""
    if is_blank(value):
        raise ValidationError(field)
    return value
