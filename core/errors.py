"""
core/errors.py -- Closed set of failure kinds raised by the auth and ad services.

Every service operation either returns its value or raises one of the
ServiceError subclasses below. The HTTP layer registers a single exception
handler for ServiceError and picks the status code from the subclass, so
adding a kind means adding it here and to api/main.py's status table.

InvalidCredentialsError and InvalidTokenError carry no detail:
callers must not be able to tell an unknown login from a wrong password, or
an expired token from a forged one.

StoreError keeps the underlying SQLAlchemy exception as __cause__ (raise ...
from exc). It is logged server-side and never serialized into a response.

Layer rule: no imports from api/, auth/, or ads/.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for every classified service failure."""

    code = "service_error"
    message = "Service error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class ValidationError(ServiceError):
    """Caller-supplied input violates a rule. The message names the rule."""

    code = "validation_error"
    message = "Validation failed."


class AlreadyExistsError(ServiceError):
    code = "already_exists"
    message = "A user with that login already exists."


class InvalidCredentialsError(ServiceError):
    code = "invalid_credentials"
    message = "Invalid login or password."

    def __init__(self) -> None:
        super().__init__()


class InvalidTokenError(ServiceError):
    code = "invalid_token"
    message = "Invalid or expired token."

    def __init__(self) -> None:
        super().__init__()


class StoreError(ServiceError):
    code = "store_error"
    message = "Storage operation failed."
