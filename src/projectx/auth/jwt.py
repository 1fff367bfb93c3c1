"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The access token carries the whole identity — userId, email, role —
so the auth gate never needs a database round-trip.

The signing secret is passed in when the codec is built (see
main.create_app), not read from a module constant. One codec per app.

Known limitation, kept deliberately: tokens can't be revoked. A user
whose role changes keeps the old role until the token's exp.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from projectx.auth.roles import Identity
from projectx.errors import AuthError, AuthReason

DEFAULT_EXPIRY = timedelta(hours=1)


class TokenCodec:
    """Issues and verifies signed, time-limited identity tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = DEFAULT_EXPIRY,
    ):
        if not secret:
            raise ValueError("TokenCodec requires a non-empty secret")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(self, identity: Identity, now: Optional[datetime] = None) -> str:
        """Create a signed access token for identity."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": identity.id,
            "email": identity.email,
            "role": identity.role,
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """Verify and decode a token.

        Returns the embedded Identity on success.
        Raises AuthError(EXPIRED) once exp has passed, AuthError(INVALID)
        for anything else wrong with the token.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthError(AuthReason.EXPIRED)
        except jwt.InvalidTokenError:
            raise AuthError(AuthReason.INVALID)

        return _identity_from_payload(payload)

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return int(self.expires_delta.total_seconds())


def _identity_from_payload(payload: dict) -> Identity:
    user_id = payload.get("userId")
    email = payload.get("email")
    role = payload.get("role")

    # bool is an int subclass; a token saying userId=true is malformed
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise AuthError(AuthReason.INVALID, "Invalid token payload")
    if not isinstance(email, str) or not isinstance(role, str):
        raise AuthError(AuthReason.INVALID, "Invalid token payload")

    return Identity(id=user_id, email=email, role=role)
