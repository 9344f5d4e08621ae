"""
auth/store.py -- SQLAlchemy Core persistence layer for user credentials.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper.
Route and domain code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Schema:
  users(id, name UNIQUE, password_hash). The username column is called
  "name" to match existing deployments; the mapper exposes it as
  User.username. Username uniqueness is enforced by the database, not here.
  AuthGate does not own migrations -- ensure_schema() exists for local dev
  (CREATE_SCHEMA=true) and tests.

Concurrency:
  No locking in this module. Read/write atomicity is delegated to the
  database; the Database handle supplies pooled connections.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table, Text

from auth.models import User
from core.database import Database

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("password_hash", Text),  # NULL only on broken records
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore(Database(get_settings()))
        store.create_user(User(username="alice", password_hash=hash_password("secret")))
        user = store.get_by_username("alice")
        store.close()

    Every method may raise core.database.StoreConnectivityError.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def ensure_schema(self) -> None:
        """Create the users table if it does not exist. Idempotent."""
        with self.db.connect() as conn:
            _metadata.create_all(conn)
            conn.commit()

    def ping(self) -> bool:
        return self.db.probe()

    def get_by_username(self, username: str) -> User | None:
        """Exact-match lookup. Returns None when no record has this name."""
        with self.db.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.name == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        """
        with self.db.connect() as conn:
            result = conn.execute(_users.insert().values(name=user.username, password_hash=user.password_hash))
            conn.commit()
        return result.inserted_primary_key[0]

    def update_password_hash(self, username: str, password_hash: str) -> bool:
        """Overwrite the stored hash in place.

        Returns True if a row was updated, False if the user vanished between
        the caller's lookup and this write.
        """
        with self.db.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.name == username).values(password_hash=password_hash))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.db.close()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.name,
        password_hash=row.password_hash,
    )
