"""
auth/errors.py -- Error taxonomy for credential verification.

VerificationFailure tags WHY a login failed. The caller-facing message is
deliberately the same for "no such user" and "wrong password" so the login
endpoint cannot be used to enumerate usernames. INTEGRITY_ERROR (user exists
but has no stored hash) is the one distinguishable case: it is a data defect
for operators to fix, not a caller mistake.

StoreConnectivityError lives in core.database next to the engine that raises
it and is re-exported here so route code imports all auth errors from one place.
"""

from __future__ import annotations

from enum import Enum

from core.database import StoreConnectivityError

__all__ = ["StoreConnectivityError", "VerificationError", "VerificationFailure"]


class VerificationFailure(Enum):
    INVALID_CREDENTIALS = (400, "Invalid credentials")
    MISSING_PASSWORD = (400, "Password is required")
    INTEGRITY_ERROR = (500, "User account error")

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message


class VerificationError(Exception):
    """Raised by verify_credentials() when a login attempt does not succeed."""

    def __init__(self, failure: VerificationFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure

    @property
    def status_code(self) -> int:
        return self.failure.status_code

    @property
    def message(self) -> str:
        return self.failure.message
