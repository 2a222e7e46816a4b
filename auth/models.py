"""
auth/models.py -- Domain dataclass for the account entity.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in farm/models.py -- dataclasses own domain shape; stores and services do
the work.

Layer rule: no imports from api/ or farm/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    hashed_password is an argon2 hash and must never be serialized into a
    response -- use public_fields() for anything that leaves the service.

    verification_token / reset_token hold the most recently issued one-time
    codes. Both are None when no code is outstanding; a successful verify or
    reset clears the matching field.
    """

    email: str
    username: str
    firstname: str
    lastname: str
    hashed_password: str
    id: int | None = None
    verified: bool = False
    verification_token: str | None = None
    reset_token: str | None = None
    created_at: str | None = None

    def public_fields(self) -> dict:
        return {"email": self.email, "username": self.username}
