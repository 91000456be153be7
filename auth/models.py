"""
auth/models.py -- Domain dataclass for authenticated identities.

Pattern: Data class (pure data container, zero logic). Mirrors ads/models.py
-- dataclasses own domain shape; services and stores do the work.

Layer rule: no imports from api/ or ads/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """A registered account.

    Created once by AuthService.register() and never mutated afterwards.
    password_hash is a bcrypt digest; the plaintext is never kept anywhere.
    id is an opaque UUID4 string assigned by the service, not the database.
    """

    id: str
    login: str
    password_hash: str
    created_at: datetime  # UTC
