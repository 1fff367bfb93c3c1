"""Identity and role policy.

Learn: roles are coarse capability tags that gate whole classes of
operations (create a project, list all users). They say nothing about
*which* project — that is the access resolver's job (projectx.access).

Role is a plain string on purpose: an unknown role coming from a token
is carried through unchanged and simply fails every role gate.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import structlog

from projectx.errors import Forbidden

logger = structlog.get_logger()


class Role(str, Enum):
    USER = "user"
    MANAGER = "manager"
    TEAMLEAD = "teamlead"
    ADMIN = "admin"


DEFAULT_ROLE = Role.USER.value

# Role sets used by the routes
PROJECT_CREATORS = frozenset({Role.MANAGER.value, Role.TEAMLEAD.value})
PARTICIPANT_MANAGERS = frozenset({Role.MANAGER.value, Role.TEAMLEAD.value})
ADMINS = frozenset({Role.ADMIN.value})


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as carried by the token."""

    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role in ADMINS


def _role_names(roles: Iterable) -> frozenset[str]:
    return frozenset(r.value if isinstance(r, Role) else str(r) for r in roles)


def has_role(identity: Identity, allowed_roles: Iterable) -> bool:
    return identity.role in _role_names(allowed_roles)


def require_role(identity: Identity, allowed_roles: Iterable) -> None:
    """Raise Forbidden unless identity.role is in allowed_roles.

    An empty allowed set means the operation is not role-gated.
    """
    allowed = _role_names(allowed_roles)
    if not allowed:
        return
    if not has_role(identity, allowed):
        logger.info(
            "access.role_denied",
            user_id=identity.id,
            role=identity.role,
            allowed=sorted(allowed),
        )
        raise Forbidden("Insufficient permissions")
