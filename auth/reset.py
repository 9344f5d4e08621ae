"""
auth/reset.py -- Admin-code-gated password reset.

Two independent operations share one gate:
  1. The username must exist (checked first, before the code is looked at).
  2. The supplied code must equal ADMIN_CODE exactly.

check_reset_eligibility() is an information step only. reset_password()
re-runs both checks itself; nothing is carried over from an earlier check,
and there is no atomicity between the two calls.

SECURITY: ADMIN_CODE is a single static shared secret. Anyone holding it can
reset ANY account's password without proving ownership of that account.
Per-account reset tokens or out-of-band verification would close that gap;
this module reproduces the shared-code behavior as-is.
"""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING

from auth.models import ResetOutcome
from auth.tokens import hash_password
from core.config import get_settings

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("authgate.auth")

USER_NOT_FOUND = "Username doesn't exist"
WRONG_ADMIN_CODE = "Wrong admin code"
CHECK_PASSED = "User found, admin code verified."
NEW_PASSWORD_REQUIRED = "New password is required"
PASSWORD_UPDATED = "Password updated successfully!"


def _admin_code_matches(supplied: str) -> bool:
    expected = get_settings().admin_code
    if not expected or not supplied:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def _gate(store: UserStore, username: str, admin_code: str) -> ResetOutcome | None:
    """Run the existence-then-code gate. Returns a failed outcome or None if both pass."""
    if store.get_by_username(username) is None:
        return ResetOutcome(success=False, message=USER_NOT_FOUND, exists=False, authorized=False)
    if not _admin_code_matches(admin_code):
        logger.info("Password reset for %r rejected: wrong admin code", username)
        return ResetOutcome(success=False, message=WRONG_ADMIN_CODE, exists=True, authorized=False)
    return None


def check_reset_eligibility(store: UserStore, username: str, admin_code: str) -> ResetOutcome:
    """Report whether a reset for this username would be allowed."""
    failed = _gate(store, username, admin_code)
    if failed is not None:
        return failed
    return ResetOutcome(success=True, message=CHECK_PASSED, exists=True, authorized=True)


def reset_password(store: UserStore, username: str, admin_code: str, new_password: str) -> ResetOutcome:
    """Overwrite the stored hash for username if the gate passes.

    The gate is evaluated again here -- a prior successful check is not
    trusted. An empty new password is refused after the gate, so the
    existence and code messages keep their precedence.
    """
    failed = _gate(store, username, admin_code)
    if failed is not None:
        return failed
    if not new_password:
        return ResetOutcome(success=False, message=NEW_PASSWORD_REQUIRED, exists=True, authorized=True)

    if not store.update_password_hash(username, hash_password(new_password)):
        # Deleted between the gate and the write.
        return ResetOutcome(success=False, message=USER_NOT_FOUND, exists=False, authorized=False)
    logger.info("Password reset for %r", username)
    return ResetOutcome(success=True, message=PASSWORD_UPDATED, exists=True, authorized=True)
