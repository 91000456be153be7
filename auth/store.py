"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as ads/store.py).
UserStore is the repository; _row_to_user is the mapper.
Services and routes never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  The UNIQUE constraint on users.login is the authoritative guard against
  duplicate registrations. AuthService checks for an existing login first,
  but two concurrent requests can both pass that check; the loser's INSERT
  raises IntegrityError, which AuthService maps to AlreadyExistsError.

Errors: every method lets SQLAlchemyError propagate. Wrapping into
StoreError is the service's job.

Layer rule: no imports from api/ or ads/.
"""

from __future__ import annotations

from sqlalchemy import Column, MetaData, String, Table, Text, select, text
from sqlalchemy.engine import Engine

from auth.models import User
from core.config import DEFAULT_DB_URL
from core.db import from_iso, make_engine, to_iso

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),  # UUID4, assigned by AuthService
    Column("login", String(50), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),  # bcrypt digest
    Column("created_at", String(32), nullable=False),  # ISO 8601 UTC, fixed width
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///:memory:")
        store.create_user(user)
        user = store.get_by_login("alice")
        store.close()
    """

    def __init__(self, db_url: str = DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def create_user(self, user: User) -> None:
        """Insert a new user.

        Raises sqlalchemy.exc.IntegrityError if the login (or id) already exists.
        """
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=user.id,
                    login=user.login,
                    password_hash=user.password_hash,
                    created_at=to_iso(user.created_at),
                )
            )
            conn.commit()

    def get_by_login(self, login: str) -> User | None:
        """Look up a user by exact login (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(select(_users).where(_users.c.login == login)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(select(_users).where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        login=row.login,
        password_hash=row.password_hash,
        created_at=from_iso(row.created_at),
    )
