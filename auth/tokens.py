"""
auth/tokens.py -- JWT, password hashing, and one-time code utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       sub (the user id, as a string), email, and expiry. Verification
       returns None on any failure -- the dependency layer turns that into
       a 401.

  Passwords: argon2-cffi PasswordHasher used directly (argon2id, library
       default parameters). Argon2 is memory-hard, so GPU/ASIC brute force
       of a leaked hash is expensive. _DUMMY_HASH enables timing
       equalization in authenticate_user() so response time does not reveal
       whether an email is registered.

  One-time codes: secrets.token_hex(3) -- 3 random bytes rendered as six
       lowercase hex characters. Codes are stored per user, so two accounts
       holding the same code never collide.

  SECRET_KEY: sourced from core.config.get_settings(). The Settings class
       validates the key at startup.

Layer rule: no imports from api/ or farm/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import JWTError, jwt

from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

_hasher = PasswordHasher()

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return an argon2id hash (PHC string format) of the plaintext password."""
    return _hasher.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the argon2 hash.

    A malformed or foreign hash is treated as a mismatch, never as an error.
    """
    try:
        return _hasher.verify(hashed, plain)
    except (VerificationError, InvalidHashError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("fieldbook_timing_dummy")


# ---------------------------------------------------------------------------
# One-time codes
# ---------------------------------------------------------------------------


def generate_one_time_code() -> str:
    """Return a fresh verification/reset code: 6 lowercase hex characters."""
    return secrets.token_hex(3)


def codes_match(submitted: str | None, stored: str | None) -> bool:
    """Exact, constant-time comparison of a submitted code against the stored one.

    No outstanding code (stored is None) never matches, not even an empty
    submission.
    """
    if not submitted or not stored:
        return False
    return hmac.compare_digest(submitted.encode("utf-8"), stored.encode("utf-8"))


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, email: str, expire_seconds: int = 0) -> str:
    """Encode a signed session token for a verified user.

    Args:
        user_id:        Numeric user ID stored in the DB (carried as "sub").
        email:          Account email, carried as the "email" claim.
        expire_seconds: Session duration in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    expire = datetime.now(timezone.utc) + timedelta(seconds=duration)
    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": expire,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure.

    A token without an exp claim is rejected even when the signature is valid.
    """
    try:
        payload = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=[_ALGORITHM],
            options={"require_exp": True},
        )
    except JWTError:
        return None
    if "email" not in payload or not str(payload.get("sub", "")).isdigit():
        return None
    return payload


# ---------------------------------------------------------------------------
# Credential check (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Check an email/password pair with timing equalization.

    Always runs argon2 whether or not the account exists:
    - Unknown email: argon2 runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: argon2 runs against the real hash (same cost)

    Returns the User on success, None on bad credentials. Store failures
    propagate to the caller.
    """
    user = store.get_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return early before running argon2
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
