"""
api/main.py -- FastAPI application entry point for AuthGate.

Run with:  python main.py
           uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- adds CORS headers for allowed browser origins
  2. log_requests   -- one access-log line per request (never bodies)

Lifespan handles startup (pool probe, pool recreation on failure, optional
schema creation) and shutdown (dispose the pool) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models import HealthResponse, MessageResponse, ResetResponse
from api.routes.auth import router as auth_router
from api.routes.password_reset import router as reset_router
from auth.errors import StoreConnectivityError, VerificationError
from auth.store import UserStore
from core.config import get_settings
from core.database import Database

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("authgate.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage the store connection pool across the full server lifetime.

    A failed startup probe recreates the pool once and carries on serving:
    connectivity is treated as eventually-recovering, and requests that hit a
    dead store fail individually with 500 rather than being retried.
    """
    logger.info("AuthGate API starting up")
    db = Database(_settings)
    if not db.probe():
        db.reconnect()
    app.state.user_store = UserStore(db)
    if _settings.create_schema:
        try:
            app.state.user_store.ensure_schema()
        except StoreConnectivityError:
            logger.exception("Could not create users table")

    yield

    app.state.user_store.close()
    logger.info("AuthGate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="AuthGate API",
    description="Username/password login with signed session tokens and admin-gated password reset.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Logs method, path, status, latency, and client host. Request bodies carry
# passwords and admin codes and are never logged.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(reset_router, tags=["Password Reset"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same {"message": ...} envelope. Diagnostics go to
# the log only; the response body never carries exception text.
# ---------------------------------------------------------------------------


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=MessageResponse(message=message).model_dump())


@app.exception_handler(VerificationError)
async def verification_error_handler(request: Request, exc: VerificationError) -> JSONResponse:
    """400 for missing password / bad credentials, 500 for a record with no hash."""
    resp = _message(exc.status_code, exc.message)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@app.exception_handler(StoreConnectivityError)
async def store_error_handler(request: Request, exc: StoreConnectivityError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return _message(500, "Internal server error")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or wrong field types. Field values are not echoed back.

    The /forgot-password routes answer 200 for anything but a store failure,
    so a body they cannot parse at all is reported as a failed outcome.
    """
    if request.url.path.startswith("/forgot-password/"):
        content = ResetResponse(success=False, message="Invalid request body.").model_dump()
        return JSONResponse(status_code=200, content=content)
    return _message(400, "Invalid request body.")


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _message(500, "Internal server error")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version, and whether the store answers SELECT 1."""
    database = "ok" if request.app.state.user_store.ping() else "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
