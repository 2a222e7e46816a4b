"""
auth/service.py -- Account workflow: registration, login, verification, reset.

AuthService composes UserStore (persistence), auth.tokens (argon2, one-time
codes, JWT) and an EventEmitter (outgoing notifications). Route handlers
call exactly one method per request and serialize whatever comes back.

Error policy:
  Every operation wraps its body. Expected failures raise a ServiceError
  subclass with a coarse public message; anything unexpected is logged with
  its traceback and re-raised as the operation's generic error. The public
  message never says which internal step failed -- e.g. login answers
  "Login failed, try again." for a wrong password and for a database outage
  alike. The `reason` attribute keeps the two apart for tests and logs.

One-time codes:
  A code is compared exactly against the value stored on the account and is
  cleared once it has been used successfully, so it cannot be replayed.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from auth.tokens import (
    authenticate_user,
    codes_match,
    create_access_token,
    generate_one_time_code,
    hash_password,
)
from core.errors import (
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)
from core.events import SEND_RESET_TOKEN, SEND_VERIFICATION, WELCOME_EMAIL, EventEmitter
from core.models import Envelope

logger = logging.getLogger("fieldbook.auth")

_LOGIN_FAILED = "Login failed, try again."


class AuthService:
    def __init__(self, store: UserStore, emitter: EventEmitter) -> None:
        self.store = store
        self.emitter = emitter

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, email: str, username: str, firstname: str, lastname: str, password: str) -> Envelope:
        """Create an unverified account and send the welcome notification.

        Raises ConflictError when the email or username is already taken,
        InternalError for anything else.
        """
        try:
            user = User(
                email=email,
                username=username,
                firstname=firstname,
                lastname=lastname,
                hashed_password=hash_password(password),
                verified=False,
            )
            self.store.create_user(user)
        except IntegrityError as exc:
            logger.info("Registration rejected: duplicate email or username")
            raise ConflictError("Registration failed.", reason="duplicate") from exc
        except Exception as exc:
            logger.exception("Registration failed")
            raise InternalError("Registration failed.") from exc

        self.emitter.emit(WELCOME_EMAIL, {"to": email, "data": {"name": username}})
        return Envelope(
            message="User registered.",
            status="Success",
            status_code=201,
            data=user.public_fields(),
        )

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> Envelope | dict:
        """Authenticate and either issue a session token or ask for verification.

        Returns {"access_token": <jwt>} for a verified account. For an
        unverified one a fresh verification code is stored and sent, and a
        "Please verify your account" envelope is returned instead -- no
        session token is ever issued before verification.
        """
        try:
            user = authenticate_user(self.store, email, password)
            if user is None:
                raise UnauthorizedError(_LOGIN_FAILED, reason="invalid_credentials")

            if not user.verified:
                code = generate_one_time_code()
                self.store.update_by_email(user.email, verification_token=code)
                self.emitter.emit(
                    SEND_VERIFICATION,
                    {"to": user.email, "data": {"name": user.username, "token": code}},
                )
                return Envelope(message="Please verify your account")

            return {"access_token": create_access_token(user.id, user.email)}
        except UnauthorizedError:
            raise
        except Exception as exc:
            logger.exception("Login failed")
            raise UnauthorizedError(_LOGIN_FAILED, reason="internal") from exc

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def forgot_password(self, email: str) -> Envelope:
        """Issue a one-time reset code and send it to the account's email."""
        try:
            user = self.store.get_by_email(email)
            if user is None:
                raise NotFoundError("User could not be found.")

            code = generate_one_time_code()
            self.store.update_by_email(user.email, reset_token=code)
            self.emitter.emit(
                SEND_RESET_TOKEN,
                {"to": user.email, "data": {"name": user.username, "token": code}},
            )
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Forgot-password failed")
            raise InternalError("Retrieving password failed.") from exc

        return Envelope(message="Reset token has been sent to your email")

    def verify_reset_token(self, email: str, token: str) -> None:
        """Check a submitted reset code against the one stored for email.

        Must be called before reset_password(); it leaves the account
        untouched. Raises NotFoundError or BadRequestError.
        """
        try:
            user = self.store.get_by_email(email)
        except Exception as exc:
            logger.exception("Reset token lookup failed")
            raise InternalError("Password could not be reset.") from exc
        if user is None:
            raise NotFoundError("User could not be found.")
        if not codes_match(token, user.reset_token):
            raise BadRequestError("Invalid reset token", reason="token_mismatch")

    def reset_password(self, email: str, new_password: str) -> Envelope:
        """Overwrite the account's password hash and consume the reset code.

        Does not check the reset code itself -- callers run
        verify_reset_token() first.
        """
        try:
            updated = self.store.update_by_email(
                email,
                hashed_password=hash_password(new_password),
                reset_token=None,
            )
        except Exception as exc:
            logger.exception("Password reset failed")
            raise InternalError("Password could not be reset.") from exc
        if not updated:
            raise InternalError("Password could not be reset.", reason="no_account")

        return Envelope(message="Password Reset successfully.")

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    def verify_token(self, email: str, token: str) -> Envelope:
        """Mark the account verified if token equals its stored verification code."""
        try:
            user = self.store.get_by_email(email)
            if user is None:
                raise NotFoundError("User could not be found.")
            if not codes_match(token, user.verification_token):
                raise BadRequestError("Invalid OTP", reason="token_mismatch")

            self.store.update_by_email(email, verified=True, verification_token=None)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Token verification failed")
            raise InternalError("Token could not be verified.") from exc

        return Envelope(message="Valid Token")
