"""
tests/test_tokens.py -- Unit tests for auth/tokens.py.

Covers:
  - argon2 hashing: hash is opaque, verifies the right password only
  - verify_password treats malformed hashes as a mismatch
  - one-time codes: six lowercase hex chars, exact-match comparison
  - JWT: sub/email claims round-trip; tampered, foreign-key, expired and
    exp-less tokens decode to None
  - authenticate_user: unknown email and wrong password both return None
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from jose import jwt

from auth.models import User
from auth.tokens import (
    authenticate_user,
    codes_match,
    create_access_token,
    decode_access_token,
    generate_one_time_code,
    hash_password,
    verify_password,
)
from core.config import get_settings


class TestPasswordHashing:
    def test_hash_is_argon2_and_not_plaintext(self) -> None:
        hashed = hash_password("s3cret-pass")
        assert hashed.startswith("$argon2")
        assert "s3cret-pass" not in hashed

    def test_verify_accepts_correct_password(self) -> None:
        assert verify_password("s3cret-pass", hash_password("s3cret-pass")) is True

    def test_verify_rejects_wrong_password(self) -> None:
        assert verify_password("wrong", hash_password("s3cret-pass")) is False

    def test_verify_rejects_malformed_hash(self) -> None:
        assert verify_password("anything", "not-a-hash") is False

    def test_same_password_hashes_differently(self) -> None:
        """Each hash carries its own random salt."""
        assert hash_password("repeat") != hash_password("repeat")


class TestOneTimeCodes:
    def test_code_is_six_lowercase_hex_chars(self) -> None:
        for _ in range(20):
            assert re.fullmatch(r"[0-9a-f]{6}", generate_one_time_code())

    def test_codes_vary(self) -> None:
        assert len({generate_one_time_code() for _ in range(50)}) > 1

    def test_exact_match_only(self) -> None:
        assert codes_match("a1b2c3", "a1b2c3") is True
        assert codes_match("A1B2C3", "a1b2c3") is False
        assert codes_match("a1b2c", "a1b2c3") is False

    def test_no_stored_code_never_matches(self) -> None:
        assert codes_match("", None) is False
        assert codes_match("a1b2c3", None) is False


class TestAccessTokens:
    def test_claims_round_trip(self) -> None:
        token = create_access_token(42, "a@x.com")
        payload = decode_access_token(token)
        assert payload is not None
        assert payload["sub"] == "42"
        assert payload["email"] == "a@x.com"

    def test_tampered_token_rejected(self) -> None:
        """Swapping in another token's claims invalidates the signature."""
        header, _claims, signature = create_access_token(42, "a@x.com").split(".")
        other_claims = create_access_token(1, "admin@x.com").split(".")[1]
        assert decode_access_token(f"{header}.{other_claims}.{signature}") is None

    def test_token_signed_with_other_key_rejected(self) -> None:
        forged = jwt.encode({"sub": "42", "email": "a@x.com"}, "x" * 40, algorithm="HS256")
        assert decode_access_token(forged) is None

    def test_expired_token_rejected(self) -> None:
        expired = jwt.encode(
            {"sub": "42", "email": "a@x.com", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            get_settings().secret_key,
            algorithm="HS256",
        )
        assert decode_access_token(expired) is None

    def test_token_without_email_claim_rejected(self) -> None:
        token = jwt.encode(
            {"sub": "42", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            get_settings().secret_key,
            algorithm="HS256",
        )
        assert decode_access_token(token) is None

    def test_token_without_expiry_rejected(self) -> None:
        """Correctly signed but never-expiring tokens are not sessions we issued."""
        token = jwt.encode({"sub": "42", "email": "a@x.com"}, get_settings().secret_key, algorithm="HS256")
        assert decode_access_token(token) is None


class TestAuthenticateUser:
    def test_returns_user_for_correct_credentials(self, user_store) -> None:
        user_store.create_user(
            User(
                email="a@x.com",
                username="alice",
                firstname="Alice",
                lastname="Z",
                hashed_password=hash_password("pw-alice-1"),
            )
        )
        user = authenticate_user(user_store, "a@x.com", "pw-alice-1")
        assert user is not None
        assert user.username == "alice"

    def test_wrong_password_and_unknown_email_both_none(self, user_store) -> None:
        user_store.create_user(
            User(
                email="a@x.com",
                username="alice",
                firstname="Alice",
                lastname="Z",
                hashed_password=hash_password("pw-alice-1"),
            )
        )
        assert authenticate_user(user_store, "a@x.com", "nope") is None
        assert authenticate_user(user_store, "ghost@x.com", "pw-alice-1") is None
