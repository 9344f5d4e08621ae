"""
core/database.py -- Supervised SQLAlchemy engine handle for the user store.

Pattern: Resource handle with explicit replace. Database owns the one Engine
(and therefore the one connection pool) the process uses. The pool is the only
shared mutable resource in the service; everything above it is stateless.

Pool policy (server databases, e.g. PostgreSQL):
  pool_size        -- bounded, no overflow connections
  pool_recycle     -- connections idle longer than the idle timeout are replaced
  pool_timeout     -- how long a request waits to check out a connection
  connect_timeout  -- how long the driver waits to establish a new connection
  pool_pre_ping    -- stale connections are detected on checkout, not mid-query

hide_parameters keeps bound values (password hashes) out of exception text,
which ends up in the logs.

SQLite URLs (local dev and tests) get check_same_thread=False and WAL mode
instead; SQLite pool classes do not accept the sizing arguments.

Recovery: there are no per-request retries. The API lifespan probes the pool
once at startup and calls reconnect() on failure, which disposes the engine and
builds a fresh one. Replacement holds _lock, and so does every read of
.engine, so no caller ever observes a disposed engine mid-swap.

Layer rule: core/ may not import from api/ or auth/.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.config import Settings

logger = logging.getLogger("authgate.db")


class StoreConnectivityError(Exception):
    """A store query or connection failed. Surfaces to callers as HTTP 500."""


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


class Database:
    """Owns the process-wide engine and knows how to replace it.

    Usage:
        db = Database(get_settings())
        if not db.probe():
            db.reconnect()
        with db.connect() as conn:
            conn.execute(...)
        db.close()
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._lock = threading.Lock()
        self._engine: Engine = self._create_engine()

    def _create_engine(self) -> Engine:
        url = self._settings.database_url
        if url.startswith("sqlite"):
            engine = create_engine(url, connect_args={"check_same_thread": False}, hide_parameters=True)
            event.listen(engine, "connect", _set_wal_mode)
            return engine

        connect_args: dict = {"connect_timeout": self._settings.db_connect_timeout_seconds}
        if self._settings.db_sslmode:
            connect_args["sslmode"] = self._settings.db_sslmode
        return create_engine(
            url,
            pool_size=self._settings.db_pool_size,
            max_overflow=0,
            pool_timeout=self._settings.db_connect_timeout_seconds,
            pool_recycle=self._settings.db_idle_timeout_seconds,
            pool_pre_ping=True,
            hide_parameters=True,
            connect_args=connect_args,
        )

    @property
    def engine(self) -> Engine:
        with self._lock:
            return self._engine

    def probe(self) -> bool:
        """Check out one connection and run SELECT 1. Never raises."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False
        logger.info("Database connection successful")
        return True

    def reconnect(self) -> Engine:
        """Dispose the current pool and replace it with a freshly built one.

        Connections already checked out from the old pool finish their work;
        dispose() only closes idle ones.
        """
        with self._lock:
            old = self._engine
            self._engine = self._create_engine()
        old.dispose()
        logger.warning("Database pool recreated")
        return self.engine

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Yield a pooled connection; driver failures become StoreConnectivityError.

        IntegrityError passes through unchanged -- it signals a constraint
        violation (e.g. duplicate username), not a connectivity problem.
        """
        try:
            with self.engine.connect() as conn:
                yield conn
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            raise StoreConnectivityError(str(exc)) from exc

    def close(self) -> None:
        self.engine.dispose()
