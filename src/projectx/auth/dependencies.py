"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request.

    get_current_user        → Identity or 401 (the authentication gate)
    require_roles(*roles)   → Identity or 401/403 (gate + role policy)
    require_user_manager    → Identity or 401/403 (gate + user-management policy)

The gate is pure reference validation: it verifies the token's
signature and expiry and trusts the embedded role/email without
looking the user up again.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from projectx.access import policy
from projectx.auth.jwt import TokenCodec
from projectx.auth.roles import Identity, require_role
from projectx.errors import AuthError, AuthReason

BEARER_SCHEME = "bearer"


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an `Authorization: Bearer <token>` header."""
    if not authorization:
        raise AuthError(AuthReason.MISSING)

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token:
        raise AuthError(AuthReason.MISSING)
    return token


def authenticate(authorization: Optional[str], codec: TokenCodec) -> Identity:
    """Header → verified Identity. Raises AuthError on any failure."""
    return codec.verify(extract_bearer_token(authorization))


def get_token_codec(request: Request) -> TokenCodec:
    """The app-wide codec built by create_app()."""
    return request.app.state.token_codec


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
) -> Identity:
    """Extract current identity (required — 401 if no valid token)."""
    identity = authenticate(authorization, codec)
    request.state.identity = identity
    structlog.contextvars.bind_contextvars(user_id=identity.id)
    return identity


def require_roles(*roles: str):
    """Build a dependency that authenticates, then applies the role policy.

    Usage:
        identity: Identity = Depends(require_roles("manager", "teamlead"))
    """
    allowed = frozenset(roles)

    async def _check(identity: Identity = Depends(get_current_user)) -> Identity:
        require_role(identity, allowed)
        return identity

    return _check


async def require_user_manager(
    identity: Identity = Depends(get_current_user),
) -> Identity:
    """Gate for user administration (list, delete, admin dashboard)."""
    policy.ensure_can_manage_users(identity)
    return identity
