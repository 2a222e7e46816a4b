"""
core/errors.py -- Error taxonomy shared by the auth and farm workflows.

Workflows raise these with a coarse, user-facing message and chain the
original cause (raise ... from exc). api/main.py turns any ServiceError into
the standard error envelope, so route handlers never build error responses
for workflow failures themselves.

`reason` is an internal tag that never reaches the client. It lets tests tell
apart failures that share one public message (e.g. a wrong password and a
database outage both surface as "Login failed, try again.").

Layer rule: core/ is the kernel. No imports from api/, auth/, or farm/.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for every failure a workflow reports to its caller."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason or self.code


class NotFoundError(ServiceError):
    status_code = 404
    code = "not_found"


class UnauthorizedError(ServiceError):
    status_code = 401
    code = "unauthorized"


class BadRequestError(ServiceError):
    status_code = 400
    code = "bad_request"


class ConflictError(ServiceError):
    """Unique constraint violation (duplicate email or username)."""

    status_code = 409
    code = "conflict"


class InternalError(ServiceError):
    status_code = 500
    code = "internal_error"
