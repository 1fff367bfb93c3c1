"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor comes from PROJECTX_BCRYPT_ROUNDS (default 12,
~100ms per hash on modern hardware).

verify_password fails closed: anything that goes wrong while comparing
(malformed hash, empty hash, wrong type) is a non-match, never a match.
"""

from typing import Optional

import bcrypt

from projectx.config import settings


def _pw_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$".
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_pw_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Verify a password against its bcrypt hash in constant time."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_pw_bytes(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False
