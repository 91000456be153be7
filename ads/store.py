"""
ads/store.py -- SQLAlchemy Core persistence layer for ads.

Uses SQLAlchemy Core (not ORM) so the dataclasses in ads/models.py remain the
authoritative domain representation.

Pattern: Repository + Data Mapper. AdStore is the repository; _row_to_ad is
the mapper. Feed statements come from ads/query.py so list_ads() and
count_ads() share one predicate list.

Security: all queries use bound parameters. No f-strings in SQL.

Errors: every method lets SQLAlchemyError propagate. AdService wraps it.

Usage:
    store = AdStore()                                  # SQLite default
    store = AdStore("postgresql+psycopg://user:pw@host/db")
    store.create_ad(ad)
    ads = store.list_ads(0, 10, "price", "asc", 0, 0)
    total = store.count_ads(0, 0)
    store.close()
"""

from __future__ import annotations

from sqlalchemy import Column, Float, MetaData, String, Table, Text, select, text
from sqlalchemy.engine import Engine

from ads.models import Ad
from ads.query import build_ad_query, count_statement, page_statement, price_predicates
from core.config import DEFAULT_DB_URL
from core.db import from_iso, make_engine, to_iso

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_ads = Table(
    "ads",
    metadata,
    Column("id", String(36), primary_key=True),  # UUID4, assigned by AdService
    Column("user_id", String(36), nullable=False, index=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("image_url", Text, nullable=False, server_default=""),
    Column("price", Float, nullable=False, index=True),
    Column("created_at", String(32), nullable=False, index=True),  # ISO 8601 UTC, fixed width
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AdStore:
    def __init__(self, db_url: str = DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def create_ad(self, ad: Ad) -> None:
        """Insert a new ad."""
        with self.engine.connect() as conn:
            conn.execute(
                _ads.insert().values(
                    id=ad.id,
                    user_id=ad.user_id,
                    title=ad.title,
                    description=ad.description,
                    image_url=ad.image_url,
                    price=ad.price,
                    created_at=to_iso(ad.created_at),
                )
            )
            conn.commit()

    def get_ad_by_id(self, ad_id: str) -> Ad | None:
        """Fetch a single ad by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(select(_ads).where(_ads.c.id == ad_id)).fetchone()
        return _row_to_ad(row) if row is not None else None

    def list_ads(
        self,
        offset: int,
        limit: int,
        sort_by: str | None,
        sort_order: str | None,
        min_price: float,
        max_price: float,
    ) -> list[Ad]:
        """Return one page of the feed, filtered then sorted then paginated."""
        query = build_ad_query(offset, limit, sort_by, sort_order, min_price, max_price)
        with self.engine.connect() as conn:
            rows = conn.execute(page_statement(_ads, query)).fetchall()
        return [_row_to_ad(r) for r in rows]

    def count_ads(self, min_price: float, max_price: float) -> int:
        """Return how many ads match the price filter, ignoring sort and pagination."""
        with self.engine.connect() as conn:
            return conn.execute(count_statement(_ads, price_predicates(min_price, max_price))).scalar_one()

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_ad(row) -> Ad:
    return Ad(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description or "",
        image_url=row.image_url or "",
        price=float(row.price),
        created_at=from_iso(row.created_at),
    )
