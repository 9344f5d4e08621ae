"""
api/routes/password_reset.py -- Admin-code-gated password reset endpoints.

Routes:
  POST /forgot-password/check  -- does the user exist, and is the admin code right?
  POST /forgot-password/reset  -- same checks, then overwrite the password hash

Both return 200 {"success", "message"} for every business outcome. Only a
store failure produces a non-2xx (500 via the StoreConnectivityError handler).

The two routes are independent: /reset never relies on a prior /check.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from api.models import ResetCheckRequest, ResetRequest, ResetResponse
from auth.reset import check_reset_eligibility, reset_password
from auth.store import UserStore

router = APIRouter(prefix="/forgot-password")


@router.post("/check", response_model=ResetResponse)
def check(request: Request, body: ResetCheckRequest) -> ResetResponse:
    user_store: UserStore = request.app.state.user_store
    return ResetResponse.from_outcome(check_reset_eligibility(user_store, body.username, body.admin_code))


@router.post("/reset", response_model=ResetResponse)
def reset(request: Request, body: ResetRequest) -> ResetResponse:
    """Reset a user's password. Hashing runs in the threadpool (sync def)."""
    user_store: UserStore = request.app.state.user_store
    outcome = reset_password(user_store, body.username, body.admin_code, body.new_password)
    return ResetResponse.from_outcome(outcome)
