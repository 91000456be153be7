"""
api/routes/v1/ads.py -- Ad posting and the public ad feed.

Routes:
  POST /api/v1/ads           -- post an ad (requires bearer token)
  GET  /api/v1/ads           -- paginated, filterable, sortable feed (public)
  GET  /api/v1/ads/{ad_id}   -- single ad (public)

The feed is public but token-aware: when a valid bearer token is present,
each ad carries is_owner=True if the caller posted it. An invalid or missing
token simply means an anonymous view, never a 401.

Query parameters on GET /ads are parsed leniently. A value that is not a
number (page=abc, min_price=) falls back to its default instead of failing
the request; range normalization (page >= 1, limit 1..100) is then applied
by AdService.

Query parameters:
  page        1-based page number (default 1)
  limit       page size, 1..100 (default 10)
  sort_by     created_at | price (default created_at)
  sort_order  asc | desc (default desc)
  min_price   lower price bound, 0 = none
  max_price   upper price bound, 0 = none; ignored when below min_price
"""

from __future__ import annotations

import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ads.models import DEFAULT_LIMIT, ListAdsParameters
from ads.service import AdService
from api.models import AdCreate, AdListResponse, AdResponse
from auth.dependencies import get_current_user_id, try_get_current_user_id

router = APIRouter()


def _parse_int(raw: Optional[str], default: int) -> int:
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


def _parse_price(raw: Optional[str]) -> float:
    try:
        value = float(raw) if raw is not None else 0.0
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


# ---------------------------------------------------------------------------
# POST /ads -- post a new ad
# ---------------------------------------------------------------------------


@router.post("/ads", response_model=AdResponse, status_code=201)
def create_ad(
    request: Request,
    body: AdCreate,
    user_id: str = Depends(get_current_user_id),
) -> AdResponse:
    """Post an ad as the authenticated user. The creator always owns the result."""
    ad_service: AdService = request.app.state.ad_service
    ad = ad_service.create_ad(user_id, body.title, body.description, body.image_url, body.price)
    return AdResponse.from_ad(ad, current_user_id=user_id)


# ---------------------------------------------------------------------------
# GET /ads -- the feed
# ---------------------------------------------------------------------------


@router.get("/ads", response_model=AdListResponse)
def list_ads(
    request: Request,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    min_price: Optional[str] = None,
    max_price: Optional[str] = None,
) -> AdListResponse:
    """Return one page of ads plus the total number of ads matching the filter."""
    ad_service: AdService = request.app.state.ad_service
    params = ListAdsParameters(
        page=_parse_int(page, 1),
        limit=_parse_int(limit, DEFAULT_LIMIT),
        sort_by=sort_by or "",
        sort_order=sort_order or "",
        min_price=_parse_price(min_price),
        max_price=_parse_price(max_price),
    ).normalized()

    ads, total = ad_service.list_ads(params)
    current_user_id = try_get_current_user_id(request)
    return AdListResponse(
        ads=[AdResponse.from_ad(ad, current_user_id) for ad in ads],
        total_count=total,
        page=params.page,
        limit=params.limit,
    )


# ---------------------------------------------------------------------------
# GET /ads/{ad_id} -- single ad
# ---------------------------------------------------------------------------


@router.get("/ads/{ad_id}", response_model=AdResponse)
def get_ad(request: Request, ad_id: str) -> AdResponse:
    """Return one ad by id, or 404."""
    ad_service: AdService = request.app.state.ad_service
    ad = ad_service.get_ad(ad_id)
    if ad is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Ad not found."},
        )
    return AdResponse.from_ad(ad, try_get_current_user_id(request))
