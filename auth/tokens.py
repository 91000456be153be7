"""
auth/tokens.py -- Stateless HMAC-signed access tokens.

Token format:
    urlsafe_b64( "<user_id>.<expires_at>.<signature>" )
where
    expires_at = Unix timestamp in whole seconds
    signature  = urlsafe_b64( HMAC-SHA256(secret_key, "<user_id>.<expires_at>") )

Validity is decided by recomputing the signature; nothing is stored server
side, so a token cannot be revoked before it expires.

parse_token() raises the same InvalidTokenError for every failure (bad
encoding, wrong shape, bad expiry, expired, bad signature). Telling them apart
would hand an attacker an oracle.

The signature comparison uses hmac.compare_digest so the time taken does not
depend on how many leading characters match.

Neither function reads configuration: the secret key and TTL are passed in by
AuthService, which gets them from its constructor.

Layer rule: no imports from api/ or ads/.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import re
import time

from core.errors import InvalidTokenError

_EXPIRY_RE = re.compile(r"-?[0-9]+")


def _key_bytes(secret_key: str | bytes) -> bytes:
    if isinstance(secret_key, bytes):
        return secret_key
    return secret_key.encode("utf-8")


def _sign(message: str, secret_key: str | bytes) -> str:
    digest = hmac.new(_key_bytes(secret_key), message.encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii")


def _now(now: float | None) -> int:
    return int(time.time() if now is None else now)


def issue_token(user_id: str, secret_key: str | bytes, ttl_seconds: int, *, now: float | None = None) -> str:
    """Return a signed token for user_id that expires ttl_seconds from now.

    Args:
        user_id:     Opaque, non-empty user identifier.
        secret_key:  HMAC key (str is UTF-8 encoded).
        ttl_seconds: Lifetime in seconds.
        now:         Unix time override; defaults to time.time().
    """
    if not user_id:
        raise ValueError("user_id must not be empty")
    expires_at = _now(now) + int(ttl_seconds)
    message = f"{user_id}.{expires_at}"
    token = f"{message}.{_sign(message, secret_key)}"
    return base64.urlsafe_b64encode(token.encode("utf-8")).decode("ascii")


def parse_token(token: str, secret_key: str | bytes, *, now: float | None = None) -> str:
    """Verify a token and return the user id it carries.

    Raises InvalidTokenError if the token is malformed, expired, or was not
    signed with secret_key.
    """
    try:
        raw = base64.b64decode(token.encode("ascii"), altchars=b"-_", validate=True)
        decoded = raw.decode("utf-8")
    except (UnicodeError, binascii.Error, ValueError) as exc:
        raise InvalidTokenError() from exc

    # rsplit: neither the expiry nor the base64 signature contains a dot, so
    # splitting from the right keeps user ids with dots intact.
    parts = decoded.rsplit(".", 2)
    if len(parts) != 3:
        raise InvalidTokenError()
    user_id, expiry_field, received_signature = parts
    if not user_id or not _EXPIRY_RE.fullmatch(expiry_field):
        raise InvalidTokenError()

    expires_at = int(expiry_field)
    if _now(now) > expires_at:
        raise InvalidTokenError()

    expected_signature = _sign(f"{user_id}.{expires_at}", secret_key)
    if not hmac.compare_digest(received_signature.encode("utf-8"), expected_signature.encode("ascii")):
        raise InvalidTokenError()

    return user_id
