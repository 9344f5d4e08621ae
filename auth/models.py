"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic beyond derived fields).
Stores and routes do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A stored credential record.

    Users are provisioned outside this service; the only field AuthGate ever
    writes is password_hash (via the reset flow). password_hash of None is a
    data-integrity defect, not a valid state -- login reports it as a 500.
    """

    username: str
    id: int | None = None
    password_hash: str | None = None


@dataclass(frozen=True)
class Identity:
    """A verified identity -- what the token issuer signs."""

    id: int
    username: str


@dataclass(frozen=True)
class ResetOutcome:
    """Result of a password-reset check or reset.

    exists reports the username lookup; authorized reports the admin-code
    comparison and is only ever True when exists is. success is set
    explicitly: it can be False with both gates passed (e.g. an empty new
    password on reset).
    """

    success: bool
    message: str
    exists: bool
    authorized: bool
