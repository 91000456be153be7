"""
auth/passwords.py -- bcrypt password hashing.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection feeds bcrypt a password longer than 72 bytes, which bcrypt 4.x+
rejects. Direct usage has no compatibility shim.

bcrypt only ever reads the first 72 bytes of its input, and recent releases
raise ValueError instead of truncating silently. AuthService accepts passwords
up to 100 characters, so _prepare() truncates explicitly; the resulting digest
is identical to what older bcrypt versions produced for the same input.

BCRYPT_ROUNDS is the work factor (2**12 iterations). It is read at call time
so tests can lower it with monkeypatch.
"""

from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 12

_BCRYPT_MAX_BYTES = 72


def _prepare(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt digest. Every call draws a fresh salt."""
    return bcrypt.hashpw(_prepare(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt digest.

    A malformed digest (wrong prefix, truncated salt) verifies as False
    rather than raising.
    """
    try:
        return bcrypt.checkpw(_prepare(plain), hashed.encode("utf-8"))
    except ValueError:
        return False
