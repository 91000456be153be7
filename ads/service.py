"""
ads/service.py -- Ad creation and the ad feed.

AdService validates new ads and normalizes feed parameters before handing
them to the store. Every SQLAlchemyError coming back from the store is
re-raised as StoreError with the original exception chained; nothing is
retried here.
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from ads.models import MAX_OFFSET, Ad, ListAdsParameters
from core.db import utc_now
from core.errors import StoreError, ValidationError

if TYPE_CHECKING:
    from ads.store import AdStore

logger = logging.getLogger("adboard.ads")

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000


def validate_ad(title: str, description: str, price: float) -> None:
    """Raise ValidationError for an empty/overlong title, a non-positive or non-finite price, or an overlong description."""
    if not title:
        raise ValidationError("Title must not be empty.")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters.")
    if not (math.isfinite(price) and price > 0):
        raise ValidationError("Price must be a finite number greater than 0.")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters.")


class AdService:
    def __init__(self, ads: AdStore) -> None:
        self._ads = ads

    def create_ad(self, user_id: str, title: str, description: str, image_url: str, price: float) -> Ad:
        """Validate, persist, and return a new ad posted by user_id."""
        validate_ad(title, description, price)
        ad = Ad(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            description=description,
            image_url=image_url,
            price=float(price),
            created_at=utc_now(),
        )
        try:
            self._ads.create_ad(ad)
        except SQLAlchemyError as exc:
            raise StoreError("Could not create ad.") from exc
        logger.info("User %s created ad %s", user_id, ad.id)
        return ad

    def get_ad(self, ad_id: str) -> Ad | None:
        try:
            return self._ads.get_ad_by_id(ad_id)
        except SQLAlchemyError as exc:
            raise StoreError("Could not load ad.") from exc

    def list_ads(self, params: ListAdsParameters) -> tuple[list[Ad], int]:
        """Return (page of ads, total matching ads) for params.

        page < 1 becomes 1 and a limit outside 1..100 becomes 10. total_count
        counts every ad passing the price filter, not just the returned page.
        A page whose offset does not fit in a SQL integer is empty.
        """
        params = params.normalized()
        ads: list[Ad] = []
        if params.offset <= MAX_OFFSET:
            try:
                ads = self._ads.list_ads(
                    params.offset,
                    params.limit,
                    params.sort_by,
                    params.sort_order,
                    params.min_price,
                    params.max_price,
                )
            except SQLAlchemyError as exc:
                raise StoreError("Could not list ads.") from exc
        try:
            total = self._ads.count_ads(params.min_price, params.max_price)
        except SQLAlchemyError as exc:
            raise StoreError("Could not count ads.") from exc
        return ads, total
