"""
API request and response models for adboard REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
ads/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models do only shape checks (types, presence). Business rules --
login charset, password composition, price > 0 -- live in the services, so
the CLI and the API enforce exactly the same rules and report them with the
same ValidationError messages.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ads.models import Ad
from auth.models import User

# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    login: str
    password: str


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    login: str
    password: str


class LoginResponse(BaseModel):
    """Response body for a successful login. expires_in is in seconds."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    """Public view of an account. The password hash is never serialized."""

    model_config = ConfigDict(frozen=True)

    id: str
    login: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, login=user.login, created_at=user.created_at)


# ---------------------------------------------------------------------------
# Ads
# ---------------------------------------------------------------------------


class AdCreate(BaseModel):
    """Request body for POST /api/v1/ads."""

    title: str
    description: str = ""
    image_url: str = ""
    price: float


class AdResponse(BaseModel):
    """One ad. is_owner is True when the authenticated caller posted it."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str
    description: str
    image_url: str
    price: float
    created_at: datetime
    is_owner: bool = False

    @classmethod
    def from_ad(cls, ad: Ad, current_user_id: Optional[str] = None) -> "AdResponse":
        return cls(
            id=ad.id,
            user_id=ad.user_id,
            title=ad.title,
            description=ad.description,
            image_url=ad.image_url,
            price=ad.price,
            created_at=ad.created_at,
            is_owner=current_user_id is not None and ad.user_id == current_user_id,
        )


class AdListResponse(BaseModel):
    """Response body for GET /api/v1/ads. total_count covers all pages."""

    model_config = ConfigDict(frozen=True)

    ads: list[AdResponse] = Field(default_factory=list)
    total_count: int
    page: int
    limit: int


# ---------------------------------------------------------------------------
# Envelope and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    components: dict[str, str]
