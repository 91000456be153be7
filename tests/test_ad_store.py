"""Unit tests for ads/store.py -- persistence and feed queries on in-memory SQLite.

Covers:
- create_ad() / get_ad_by_id() round-trip, including timestamps
- list_ads() sort by created_at and price in both directions
- list_ads() / count_ads() price filters, including the inverted range
- pagination with offset/limit and a stable tie-break on equal prices
"""

from datetime import datetime, timedelta, timezone

import pytest

from ads.models import Ad
from ads.store import AdStore

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _ad(n: int, price: float, user_id: str = "user-1") -> Ad:
    return Ad(
        id=f"ad-{n:02d}",
        user_id=user_id,
        title=f"Ad {n}",
        description=f"Description {n}",
        image_url=f"https://img.example/{n}.png",
        price=price,
        created_at=BASE_TIME + timedelta(minutes=n),
    )


@pytest.fixture
def store():
    """In-memory AdStore with five ads.

    ad-01..ad-05 are created one minute apart with prices 30, 10, 50, 20, 40.
    """
    s = AdStore("sqlite:///:memory:")
    for n, price in enumerate([30, 10, 50, 20, 40], start=1):
        s.create_ad(_ad(n, price))
    yield s
    s.close()


def _ids(ads):
    return [a.id for a in ads]


def test_get_ad_round_trip(store):
    ad = store.get_ad_by_id("ad-03")
    assert ad == _ad(3, 50.0)
    assert ad.created_at.tzinfo is not None


def test_get_ad_unknown(store):
    assert store.get_ad_by_id("missing") is None


def test_default_sort_is_newest_first(store):
    assert _ids(store.list_ads(0, 10, "", "", 0, 0)) == ["ad-05", "ad-04", "ad-03", "ad-02", "ad-01"]


def test_sort_created_at_ascending(store):
    assert _ids(store.list_ads(0, 10, "created_at", "asc", 0, 0)) == ["ad-01", "ad-02", "ad-03", "ad-04", "ad-05"]


def test_sort_price_ascending(store):
    assert [a.price for a in store.list_ads(0, 10, "price", "asc", 0, 0)] == [10, 20, 30, 40, 50]


def test_sort_price_descending(store):
    assert [a.price for a in store.list_ads(0, 10, "price", "desc", 0, 0)] == [50, 40, 30, 20, 10]


def test_min_and_max_filter(store):
    ads = store.list_ads(0, 10, "price", "asc", 20, 40)
    assert [a.price for a in ads] == [20, 30, 40]
    assert store.count_ads(20, 40) == 3


def test_inverted_range_returns_everything_above_min(store):
    ads = store.list_ads(0, 10, "price", "asc", 35, 20)
    assert [a.price for a in ads] == [40, 50]
    assert store.count_ads(35, 20) == len(ads)


def test_count_ignores_pagination(store):
    assert len(store.list_ads(0, 2, "", "", 0, 0)) == 2
    assert store.count_ads(0, 0) == 5


def test_pagination_offset(store):
    first = store.list_ads(0, 2, "price", "asc", 0, 0)
    second = store.list_ads(2, 2, "price", "asc", 0, 0)
    third = store.list_ads(4, 2, "price", "asc", 0, 0)
    assert [a.price for a in first + second + third] == [10, 20, 30, 40, 50]


def test_equal_prices_paginate_without_overlap():
    s = AdStore("sqlite:///:memory:")
    for n in range(1, 8):
        s.create_ad(_ad(n, 9.99))
    pages = [s.list_ads(offset, 3, "price", "asc", 0, 0) for offset in (0, 3, 6)]
    seen = [a.id for page in pages for a in page]
    assert sorted(seen) == [f"ad-{n:02d}" for n in range(1, 8)]
    s.close()


def test_ping(store):
    assert store.ping() is True
