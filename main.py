#!/usr/bin/env python3
"""
AuthGate -- username/password login and admin-gated password reset.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 127.0.0.1 --reload

Environment variables (see core/config.py for the full list):
  DATABASE_URL  Store connection string, e.g. postgresql+psycopg://user:pw@host/db
  JWT_SECRET    Token signing secret, at least 32 characters. Required unless DEBUG=true.
  ADMIN_CODE    Shared secret that authorizes password resets. Unset disables resets.
  PORT          Listening port (default 5000).
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    # Settings are validated here, before uvicorn starts, so a bad JWT_SECRET
    # stops the process instead of serving in a broken state.
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the AuthGate API server.")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Listening port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = parser.parse_args()

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
