"""
auth/tokens.py -- Password hashing, credential verification, and JWT issuance.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with JWT_SECRET and carry
       exactly id, username, and exp. Expiry is TOKEN_EXPIRE_SECONDS (one hour)
       from issuance. Tokens are not persisted and cannot be revoked; they
       simply expire. Decoding returns None on any failure.

  Passwords: bcrypt directly (no passlib wrapper). Salted, one-way, and
       checked with bcrypt.checkpw, which compares in constant time. The
       _DUMMY_HASH constant enables timing equalization in
       verify_credentials() so response time does not reveal whether a
       username exists.

  JWT_SECRET: sourced from core.config.get_settings(). A missing or short
       secret fails Settings validation, so this module never signs with a
       weak key.

Logging: never log passwords, hashes, their lengths, or tokens.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.errors import VerificationError, VerificationFailure
from auth.models import Identity
from core.config import get_settings

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("authgate.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# bcrypt reads at most 72 bytes of input; bcrypt>=5 raises instead of truncating.
_BCRYPT_MAX_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def _encode(plain: str) -> bytes:
    """UTF-8 encode and cut to 72 bytes, matching hashes written by truncating bcrypt clients."""
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Only the first 72 bytes of the UTF-8 encoding take part in the hash.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("authgate_timing_dummy")


# ---------------------------------------------------------------------------
# Credential verification
# ---------------------------------------------------------------------------


def verify_credentials(store: UserStore, username: str, password: str) -> Identity:
    """Check a username/password pair against the stored hash.

    Raises VerificationError tagged with:
      MISSING_PASSWORD     -- empty password; the store is never queried.
      INVALID_CREDENTIALS  -- unknown username OR wrong password (same message).
      INTEGRITY_ERROR      -- the user exists but has no stored hash.

    Store failures propagate as StoreConnectivityError.

    bcrypt always runs for a non-empty password, against _DUMMY_HASH when the
    username is unknown, so both failure paths cost the same.
    """
    if not password:
        raise VerificationError(VerificationFailure.MISSING_PASSWORD)

    user = store.get_by_username(username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        logger.info("Login failed for %r: unknown username", username)
        raise VerificationError(VerificationFailure.INVALID_CREDENTIALS)

    if not user.password_hash:
        logger.error("User %r (id=%s) has no stored password hash", username, user.id)
        raise VerificationError(VerificationFailure.INTEGRITY_ERROR)

    if not verify_password(password, user.password_hash):
        logger.info("Login failed for %r: password mismatch", username)
        raise VerificationError(VerificationFailure.INVALID_CREDENTIALS)

    return Identity(id=user.id, username=user.username)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def issue_token(identity: Identity) -> str:
    """Encode a signed JWT for a verified identity.

    Claims are exactly id, username, and exp. Given the same identity,
    secret, and clock the output is identical -- nothing random is mixed in.
    """
    expire = datetime.now(timezone.utc) + timedelta(seconds=_settings.token_expire_seconds)
    payload = {
        "id": identity.id,
        "username": identity.username,
        "exp": expire,
    }
    return jwt.encode(payload, _settings.jwt_secret, algorithm=_ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(token, _settings.jwt_secret, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if "id" not in payload or "username" not in payload:
        return None
    return payload
