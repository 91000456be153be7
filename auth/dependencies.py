"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer-token authentication.

The only accepted credential is an access token issued by POST /auth/login,
sent as:
    Authorization: Bearer <token>
The scheme is matched case-insensitively and the header must split into
exactly two space-separated parts.

try_get_current_user_id() is the soft variant (returns None on failure) used
by the public ad feed to work out is_owner.
get_current_user_id() wraps it and raises HTTP 401 if unauthenticated.

Tokens are verified by recomputing their signature -- there is no session
lookup. A token stays valid until it expires even if issued long ago.

Layer rule: no imports from ads/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.service import AuthService
from core.errors import InvalidTokenError


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    parts = header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        return None
    return parts[1]


def try_get_current_user_id(request: Request) -> str | None:
    """Return the user id from a valid bearer token, or None.

    Never raises -- callers that need a hard 401 should use get_current_user_id().
    """
    token = _bearer_token(request)
    if token is None:
        return None
    auth_service: AuthService = request.app.state.auth_service
    try:
        return auth_service.verify_token(token)
    except InvalidTokenError:
        return None


def get_current_user_id(request: Request) -> str:
    """Require authentication. Raises HTTP 401 if the request carries no valid token.

    Use as a FastAPI dependency:
        @router.post("/protected")
        def route(user_id: str = Depends(get_current_user_id)): ...
    """
    user_id = try_get_current_user_id(request)
    if user_id is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id
