"""
ads/models.py -- Domain dataclasses for classified ads.

These are pure data containers. Validation lives in ads/service.py, query
composition in ads/query.py.
"""

from dataclasses import dataclass, replace
from datetime import datetime

MAX_LIMIT = 100
DEFAULT_LIMIT = 10
# Largest OFFSET a 64-bit SQL integer can hold.
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class Ad:
    """A posted ad. Immutable once created.

    user_id references the account that posted the ad; the ad does not own
    the user record.
    """

    id: str
    user_id: str
    title: str
    description: str
    image_url: str  # free-form, not validated
    price: float
    created_at: datetime  # UTC


@dataclass(frozen=True)
class ListAdsParameters:
    """Query descriptor for one page of the ad feed.

    sort_by:    "created_at" | "price"; anything else means created_at
    sort_order: "asc" (case-insensitive); anything else means descending
    min_price / max_price: 0 means "no bound"
    """

    page: int = 1
    limit: int = DEFAULT_LIMIT
    sort_by: str = ""
    sort_order: str = ""
    min_price: float = 0.0
    max_price: float = 0.0

    def normalized(self) -> "ListAdsParameters":
        """Return a copy with page clamped to >= 1 and limit reset to the default when out of range."""
        page = self.page if self.page >= 1 else 1
        limit = self.limit if 1 <= self.limit <= MAX_LIMIT else DEFAULT_LIMIT
        return replace(self, page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
