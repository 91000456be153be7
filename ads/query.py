"""
ads/query.py -- Ad feed query builder (filter + sort + pagination).

Turns listing parameters into SQLAlchemy Core statements. The page query
and the count query are built from the same predicate list, so total_count
always describes exactly the rows the pages are drawn from.

Predicates are plain data -- (column, operator, value) triples -- and are
rendered through a fixed operator table against whitelisted columns. Values
only ever reach the database as bound parameters; nothing caller-supplied is
formatted into SQL text. sort_by is mapped onto a whitelisted column name
before it touches the statement.

Price filter rules:
  min_price > 0                          -> price >= min_price
  max_price > 0 and max_price >= min_price -> price <= max_price
When max_price < min_price the upper bound is dropped without an error and
the feed returns everything priced at or above min_price. See
tests/test_ad_query.py::test_inverted_range_drops_max_filter.

Sort rules:
  sort_by "price" -> price; anything else (including "") -> created_at
  sort_order "asc" in any case -> ascending; anything else -> descending
id is appended as a tie-breaker in the same direction so that a page
boundary falling inside a run of equal prices is stable between requests.

Usage:
    query = build_ad_query(offset=0, limit=10, sort_by="price", sort_order="asc",
                           min_price=5, max_price=0)
    rows = conn.execute(page_statement(ads_table, query)).fetchall()
    total = conn.execute(count_statement(ads_table, query.predicates)).scalar_one()
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sqlalchemy import Select, Table, func, select
from sqlalchemy.sql.elements import ColumnElement

# ---------------------------------------------------------------------------
# Whitelists
# ---------------------------------------------------------------------------

_OPERATORS: dict[str, Callable] = {
    ">=": operator.ge,
    "<=": operator.le,
}

_FILTER_COLUMNS = frozenset({"price"})

SORT_COLUMNS = frozenset({"created_at", "price"})
DEFAULT_SORT_COLUMN = "created_at"


# ---------------------------------------------------------------------------
# Query description
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Predicate:
    column: str
    operator: str
    value: float


@dataclass(frozen=True)
class AdQuery:
    """Everything needed to render one page of the feed."""

    predicates: tuple[Predicate, ...]
    sort_column: str
    ascending: bool
    offset: int
    limit: int


def price_predicates(min_price: float, max_price: float) -> tuple[Predicate, ...]:
    predicates: list[Predicate] = []
    if min_price > 0:
        predicates.append(Predicate("price", ">=", min_price))
    if max_price > 0 and max_price >= min_price:
        predicates.append(Predicate("price", "<=", max_price))
    return tuple(predicates)


def resolve_sort(sort_by: str | None, sort_order: str | None) -> tuple[str, bool]:
    """Return (column, ascending) for the requested sort."""
    column = sort_by if sort_by in SORT_COLUMNS else DEFAULT_SORT_COLUMN
    ascending = (sort_order or "").lower() == "asc"
    return column, ascending


def build_ad_query(
    offset: int,
    limit: int,
    sort_by: str | None,
    sort_order: str | None,
    min_price: float,
    max_price: float,
) -> AdQuery:
    column, ascending = resolve_sort(sort_by, sort_order)
    return AdQuery(
        predicates=price_predicates(min_price, max_price),
        sort_column=column,
        ascending=ascending,
        offset=offset,
        limit=limit,
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def where_clauses(table: Table, predicates: Sequence[Predicate]) -> list[ColumnElement]:
    """Render predicates as bound-parameter comparisons, ANDed by the caller's where()."""
    clauses = []
    for predicate in predicates:
        if predicate.column not in _FILTER_COLUMNS:
            raise ValueError(f"Unsupported filter column: {predicate.column!r}")
        compare = _OPERATORS.get(predicate.operator)
        if compare is None:
            raise ValueError(f"Unsupported filter operator: {predicate.operator!r}")
        clauses.append(compare(table.c[predicate.column], predicate.value))
    return clauses


def page_statement(table: Table, query: AdQuery) -> Select:
    if query.sort_column not in SORT_COLUMNS:
        raise ValueError(f"Unsupported sort column: {query.sort_column!r}")
    sort_col = table.c[query.sort_column]
    if query.ascending:
        order = (sort_col.asc(), table.c.id.asc())
    else:
        order = (sort_col.desc(), table.c.id.desc())
    return (
        select(table)
        .where(*where_clauses(table, query.predicates))
        .order_by(*order)
        .offset(query.offset)
        .limit(query.limit)
    )


def count_statement(table: Table, predicates: Sequence[Predicate]) -> Select:
    return select(func.count()).select_from(table).where(*where_clauses(table, predicates))
