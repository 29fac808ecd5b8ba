"""
auth/passwords.py -- Password hashing, hash detection, and verification.

Security design decisions:
  Passwords: bcrypt, used directly (no passlib wrapper). Bcrypt is the right
       choice for low-entropy secrets because its cost factor makes
       brute-force expensive. The cost factor comes from
       Settings.bcrypt_rounds.

  72-byte limit: bcrypt only reads the first 72 bytes of its input, and
       bcrypt 5.x raises ValueError beyond that. _encode() feeds bcrypt the
       base64 SHA-256 digest of the whole password (44 bytes), so every
       character counts and hash_password() never fails on long input.

  Verification: bcrypt.checkpw() compares digests in constant time. Never
       replace it with == on hash strings.

  Hash detection: is_hashed() recognizes the modular-crypt shape
       ($2b$12$ + 53 chars) so AuthenticationService can tell bcrypt records
       from legacy plaintext records without a schema flag.

Layer rule: imports only core.config.
"""

from __future__ import annotations

import base64
import hashlib
import re

import bcrypt

from core.config import get_settings

_settings = get_settings()

# $2a$ / $2b$ / $2y$, two-digit cost, 22-char salt + 31-char digest.
_BCRYPT_RE = re.compile(r"^\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}$")


def _encode(plain: str) -> bytes:
    # base64 keeps NUL bytes out of the bcrypt input.
    return base64.b64encode(hashlib.sha256(plain.encode("utf-8")).digest())


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises ValueError for an empty password; callers validate presence first.
    """
    if not plain:
        raise ValueError("Cannot hash an empty password.")
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(plain), salt).decode("utf-8")


def is_hashed(stored: str | None) -> bool:
    """Return True if stored looks like output of hash_password()."""
    return bool(stored) and _BCRYPT_RE.match(stored) is not None


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash (bad salt or cost) -- treat as a mismatch.
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. AuthenticationService verifies against it when
# the email is unknown so response time does not reveal which emails exist.
DUMMY_HASH: str = hash_password("storemgr_timing_dummy")
