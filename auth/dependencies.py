"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Session tokens arrive as `Authorization: Bearer <token>`. The token's sub
claim is resolved back to a stored account, so a token for an account that
no longer exists is rejected even if its signature is still valid.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/ or farm/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.tokens import decode_access_token


def try_get_current_user(request: Request) -> User | None:
    """Attempt to authenticate the request via its Bearer token.

    Returns the authenticated User on success, None on any failure.
    Never raises -- callers that need a hard 401 should use get_current_user().
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None

    payload = decode_access_token(auth_header[7:])
    if payload is None:
        return None

    user_store = request.app.state.user_store
    user = user_store.get_by_id(int(payload["sub"]))
    if user is None or not user.verified:
        return None
    return user


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
