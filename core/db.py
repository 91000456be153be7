"""
core/db.py -- Engine construction shared by auth/store.py and ads/store.py.

SQLAlchemy Core keeps the stores database-agnostic: swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Timestamps are stored as fixed-width ISO 8601 UTC strings. isoformat() drops
the fractional part when microsecond == 0, which would break lexical ordering,
so to_iso() always renders microseconds.

Layer rule: no imports from api/, auth/, or ads/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import create_engine, event, make_url
from sqlalchemy.engine import Engine
from sqlalchemy.pool import SingletonThreadPool


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. In-memory databases ignore the pragma.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _is_sqlite_memory(db_url: str) -> bool:
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite":
        return False
    return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def make_engine(db_url: str) -> Engine:
    """Create an engine for db_url with the SQLite tweaks applied when relevant."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        # FastAPI runs sync handlers in a thread pool, so the same pooled
        # connection may be used from more than one thread.
        connect_args["check_same_thread"] = False
    engine_kwargs: dict = {}
    if _is_sqlite_memory(db_url):
        # One connection per thread keeps an in-memory database alive for
        # as long as the engine is.
        engine_kwargs["poolclass"] = SingletonThreadPool
    engine = create_engine(db_url, connect_args=connect_args, **engine_kwargs)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
