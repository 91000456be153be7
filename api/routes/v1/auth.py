"""
api/routes/v1/auth.py -- Registration and login REST endpoints.

Routes:
  POST /api/v1/auth/register   -- create an account; 201 with the public user view
  POST /api/v1/auth/login      -- exchange login + password for an access token
  GET  /api/v1/auth/me         -- current user info (requires bearer token)

Errors raised by AuthService (ValidationError, AlreadyExistsError,
InvalidCredentialsError, StoreError) propagate to the ServiceError handler
in api/main.py, which picks the status code. Handlers here only map between
transport models and the service.

Security:
  POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT).
  Cache-Control: no-store on login responses so tokens never land in caches.
  Unknown login and wrong password produce the same 401 body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from auth.dependencies import get_current_user_id
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:       requires bearer token (get_current_user_id)
router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> UserResponse:
    """Create an account. Validation failures are 400, a taken login is 409."""
    auth_service: AuthService = request.app.state.auth_service
    user = auth_service.register(body.login, body.password)
    return UserResponse.from_user(user)


@limiter.limit(login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with login and password; return a bearer token."""
    auth_service: AuthService = request.app.state.auth_service
    token = auth_service.authenticate(body.login, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=auth_service.token_ttl_seconds,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=UserResponse)
def me(request: Request, user_id: str = Depends(get_current_user_id)) -> UserResponse:
    """Return the account the bearer token belongs to."""
    auth_service: AuthService = request.app.state.auth_service
    user = auth_service.get_user(user_id)
    if user is None:
        # Signed token for an id that is not in the store (e.g. database reset).
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return UserResponse.from_user(user)
