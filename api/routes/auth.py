"""
api/routes/auth.py -- Password login endpoint.

Routes:
  POST /login  -- verify username/password; return a signed JWT

Errors are not handled here. verify_credentials() raises VerificationError
and the store raises StoreConnectivityError; the exception handlers in
api/main.py turn both into {"message": ...} responses.

Security:
  verify_credentials() provides timing equalization -- use it, never inline
  get_by_username() + verify_password().
  Cache-Control: no-store on the token response.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse
from auth.store import UserStore
from auth.tokens import issue_token, verify_credentials

# Auth policy:
# - POST /login: public -- the login endpoint must be unauthenticated
router = APIRouter()


# Sync def: bcrypt is CPU-bound, so FastAPI runs this in its threadpool
# instead of blocking the event loop.
@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return a one-hour JWT."""
    user_store: UserStore = request.app.state.user_store
    identity = verify_credentials(user_store, body.username, body.password)
    resp = JSONResponse(status_code=200, content=LoginResponse(token=issue_token(identity)).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp
