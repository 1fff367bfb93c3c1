"""Error taxonomy shared by the access core and the services.

Learn: services never build HTTP responses. They raise one of these and
main.py turns it into JSON with the matching status code. That keeps the
policy code testable without FastAPI and guarantees every route answers
the same way for the same failure:

    AuthError     401  missing / invalid / expired token, bad credentials
    Forbidden     403  authenticated, but role or ownership policy says no
    NotFound      404  resource absent (only where existence may be revealed)
    InvalidInput  400  malformed payload
    Conflict      409  uniqueness violation (email, membership, assignment)
"""

from enum import Enum


class ProjectXError(Exception):
    """Base class for errors that map to a client-facing response."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthReason(str, Enum):
    MISSING = "missing"
    INVALID = "invalid"
    EXPIRED = "expired"
    CREDENTIALS = "credentials"


_AUTH_DETAILS = {
    AuthReason.MISSING: "Authentication required",
    AuthReason.INVALID: "Invalid token",
    AuthReason.EXPIRED: "Token has expired",
    AuthReason.CREDENTIALS: "Invalid credentials",
}


class AuthError(ProjectXError):
    """Identity could not be established."""

    status_code = 401

    def __init__(self, reason: AuthReason, detail: str | None = None):
        self.reason = reason
        super().__init__(detail or _AUTH_DETAILS[reason])


class Forbidden(ProjectXError):
    status_code = 403
    default_detail = "Insufficient permissions"


class NotFound(ProjectXError):
    status_code = 404
    default_detail = "Not found"


class InvalidInput(ProjectXError):
    status_code = 400
    default_detail = "Invalid input"

    def __init__(self, detail: str | None = None, errors: list | None = None):
        self.errors = errors or []
        super().__init__(detail)


class Conflict(ProjectXError):
    status_code = 409
    default_detail = "Conflict"
