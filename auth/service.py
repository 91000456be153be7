"""
auth/service.py -- Registration and login.

AuthService owns the account rules and stitches together the user store,
the bcrypt hasher (auth/passwords.py) and the token codec (auth/tokens.py).
The secret key and token TTL are constructor arguments; the service never
reads configuration on its own.

Login enumeration:
  authenticate() raises the same InvalidCredentialsError for an unknown
  login and for a wrong password. It also always runs bcrypt: for an unknown
  login it verifies against _DUMMY_HASH so response time does not reveal
  whether the login exists.

Store failures:
  Any SQLAlchemyError from the store is re-raised as StoreError with the
  original exception chained. The one exception is IntegrityError on insert,
  which means a concurrent registration won the race for the same login and
  is reported as AlreadyExistsError.

Layer rule: no imports from api/ or ads/.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import User
from auth.passwords import hash_password, verify_password
from auth.tokens import issue_token, parse_token
from core.db import utc_now
from core.errors import (
    AlreadyExistsError,
    InvalidCredentialsError,
    StoreError,
    ValidationError,
)

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("adboard.auth")

# ---------------------------------------------------------------------------
# Account rules
# ---------------------------------------------------------------------------

LOGIN_MIN_LENGTH = 3
LOGIN_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 100

_LOGIN_RE = re.compile(r"[A-Za-z0-9_-]+")

SPECIAL_CHARACTERS = frozenset("!@#$%^&*()_+-=[]{}|;':\",.<>/?`~")

# Computed lazily on first use so importing this module stays cheap.
_DUMMY_HASH: str | None = None


def _dummy_hash() -> str:
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = hash_password("adboard_timing_dummy")
    return _DUMMY_HASH


def validate_login(login: str) -> None:
    """Raise ValidationError if login breaks the length or character rules."""
    if not LOGIN_MIN_LENGTH <= len(login) <= LOGIN_MAX_LENGTH:
        raise ValidationError(f"Login must be between {LOGIN_MIN_LENGTH} and {LOGIN_MAX_LENGTH} characters.")
    if not _LOGIN_RE.fullmatch(login):
        raise ValidationError("Login may contain only letters, digits, underscores and hyphens.")


def validate_password(password: str) -> None:
    """Raise ValidationError if password breaks the length or composition rules.

    Composition: at least one ASCII uppercase letter, one ASCII lowercase
    letter, one digit, and one character from SPECIAL_CHARACTERS.
    """
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters."
        )
    has_upper = any("A" <= ch <= "Z" for ch in password)
    has_lower = any("a" <= ch <= "z" for ch in password)
    has_digit = any("0" <= ch <= "9" for ch in password)
    has_special = any(ch in SPECIAL_CHARACTERS for ch in password)
    if not (has_upper and has_lower and has_digit and has_special):
        raise ValidationError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one digit and one special character."
        )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AuthService:
    def __init__(self, users: UserStore, secret_key: str | bytes, token_ttl_seconds: int) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if token_ttl_seconds <= 0:
            raise ValueError("token_ttl_seconds must be positive")
        self._users = users
        self._secret_key = secret_key
        self.token_ttl_seconds = token_ttl_seconds

    def register(self, login: str, password: str) -> User:
        """Create an account and return it.

        Raises:
            ValidationError:    login or password breaks a rule (first violation wins).
            AlreadyExistsError: the login is taken.
            StoreError:         the user store failed.
        """
        validate_login(login)
        validate_password(password)

        try:
            existing = self._users.get_by_login(login)
        except SQLAlchemyError as exc:
            raise StoreError("Could not check for an existing user.") from exc
        if existing is not None:
            raise AlreadyExistsError()

        user = User(
            id=str(uuid.uuid4()),
            login=login,
            password_hash=hash_password(password),
            created_at=utc_now(),
        )
        try:
            self._users.create_user(user)
        except IntegrityError as exc:
            raise AlreadyExistsError() from exc
        except SQLAlchemyError as exc:
            raise StoreError("Could not create user.") from exc

        logger.info("Registered user %s (%s)", user.login, user.id)
        return user

    def authenticate(self, login: str, password: str) -> str:
        """Check credentials and return a freshly issued access token.

        Raises:
            InvalidCredentialsError: unknown login or wrong password (indistinguishable).
            StoreError:              the user store failed.
        """
        try:
            user = self._users.get_by_login(login)
        except SQLAlchemyError as exc:
            raise StoreError("Could not load user.") from exc

        if user is None:
            verify_password(password, _dummy_hash())
            logger.info("Failed login for %r", login)
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.info("Failed login for %r", login)
            raise InvalidCredentialsError()

        return issue_token(user.id, self._secret_key, self.token_ttl_seconds)

    def verify_token(self, token: str) -> str:
        """Return the user id carried by a valid token. Raises InvalidTokenError otherwise."""
        return parse_token(token, self._secret_key)

    def get_user(self, user_id: str) -> User | None:
        try:
            return self._users.get_by_id(user_id)
        except SQLAlchemyError as exc:
            raise StoreError("Could not load user.") from exc
