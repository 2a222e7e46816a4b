"""
api/routes/v1/auth.py -- Account REST endpoints.

Routes:
  POST /api/v1/auth/register         -- create an unverified account; 201
  POST /api/v1/auth/login            -- session token, or "please verify" envelope
  POST /api/v1/auth/verify           -- confirm the emailed verification code
  POST /api/v1/auth/forgot-password  -- email a one-time reset code
  POST /api/v1/auth/reset-password   -- check the reset code, then set a new password
  GET  /api/v1/auth/me               -- current account (requires auth)

Workflow failures are raised as core.errors.ServiceError and rendered by the
handler in api/main.py, so handlers here only deal with the success path.

Security:
  POST /login, /forgot-password and /reset-password are rate-limited per IP.
  Login responses carry Cache-Control: no-store -- they may hold a token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    EnvelopeResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LoginTokenResponse,
    MeResponse,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyTokenRequest,
)
from auth.dependencies import get_current_user
from auth.models import User
from auth.service import AuthService
from core.config import get_settings
from core.models import Envelope

# Auth policy:
# - POST /api/v1/auth/register:         public
# - POST /api/v1/auth/login:            public, rate-limited
# - POST /api/v1/auth/verify:           public -- possession of the code is the proof
# - POST /api/v1/auth/forgot-password:  public, rate-limited
# - POST /api/v1/auth/reset-password:   public, rate-limited -- reset code is the proof
# - GET  /api/v1/auth/me:               requires auth (get_current_user)
router = APIRouter()

_LOGIN_LIMIT = get_settings().login_rate_limit


def _respond(envelope: Envelope) -> JSONResponse:
    return JSONResponse(status_code=envelope.status_code, content=envelope.to_dict())


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=EnvelopeResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Register a new account. It stays unverified until /auth/verify succeeds."""
    auth: AuthService = request.app.state.auth_service
    return _respond(
        auth.register(
            email=body.email,
            username=body.username,
            firstname=body.firstname,
            lastname=body.lastname,
            password=body.password,
        )
    )


@limiter.limit(_LOGIN_LIMIT)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=LoginTokenResponse | EnvelopeResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password.

    A verified account gets {"access_token": ...}. An unverified one gets a
    "Please verify your account" envelope and a fresh code by email -- never
    a token.
    """
    auth: AuthService = request.app.state.auth_service
    result = auth.login(body.email, body.password)
    if isinstance(result, Envelope):
        resp = _respond(result)
    else:
        resp = JSONResponse(status_code=200, content=LoginTokenResponse(**result).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/verify", response_model=EnvelopeResponse)
def verify(request: Request, body: VerifyTokenRequest) -> JSONResponse:
    """Mark the account verified when the submitted code matches."""
    auth: AuthService = request.app.state.auth_service
    return _respond(auth.verify_token(body.email, body.token))


@limiter.limit(_LOGIN_LIMIT)
@router.post("/auth/forgot-password", response_model=EnvelopeResponse)
def forgot_password(request: Request, body: ForgotPasswordRequest) -> JSONResponse:
    auth: AuthService = request.app.state.auth_service
    return _respond(auth.forgot_password(body.email))


@limiter.limit(_LOGIN_LIMIT)
@router.post("/auth/reset-password", response_model=EnvelopeResponse)
def reset_password(request: Request, body: ResetPasswordRequest) -> JSONResponse:
    """Set a new password. The reset code from /auth/forgot-password is required.

    The code is checked here, before AuthService.reset_password() writes the
    new hash; a wrong code leaves the old password in place.
    """
    auth: AuthService = request.app.state.auth_service
    auth.verify_reset_token(body.email, body.token)
    return _respond(auth.reset_password(body.email, body.new_password))


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return the authenticated account's public profile."""
    return MeResponse(
        user_id=current_user.id,
        email=current_user.email,
        username=current_user.username,
        firstname=current_user.firstname,
        lastname=current_user.lastname,
        verified=current_user.verified,
    )
