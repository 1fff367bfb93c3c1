"""Resource access policy — pure predicates.

Learn: every "may this identity do X to this resource?" question in the
system is answered here, and nowhere else. The functions take
already-fetched objects (anything with an `owner_id`) plus the
project's participant ids, so they can be tested with plain fixtures —
no HTTP, no database.

    operation                          predicate
    ---------------------------------  ------------------------------
    project read / full / info         owner or participant
    project update / delete            owner or admin
    participant add                    manager or teamlead (any project)
    task read/list/create/assign/edit  owner or participant of project
    task delete                        project owner only
    user list / delete                 admin

Task delete is deliberately narrower than task edit: participants can
work on tasks but can't remove them, and admins get no override.

Each `can_*` predicate has an `ensure_*` twin that raises Forbidden.
"""

from typing import Collection, Protocol

import structlog

from projectx.auth.roles import PARTICIPANT_MANAGERS, Identity, has_role
from projectx.errors import Forbidden

logger = structlog.get_logger()


class Owned(Protocol):
    id: int
    owner_id: int


def accessors(project: Owned, participant_ids: Collection[int]) -> set[int]:
    """The accessor set: owner plus participants."""
    return {project.owner_id, *participant_ids}


# ─── Predicates ─────────────────────────────────────────


def can_read_project(
    identity: Identity, project: Owned, participant_ids: Collection[int]
) -> bool:
    return identity.id in accessors(project, participant_ids)


def can_modify_project(identity: Identity, project: Owned) -> bool:
    return identity.id == project.owner_id or identity.is_admin


def can_add_participant(identity: Identity) -> bool:
    # Role-gated only: any manager/teamlead may add to any project.
    return has_role(identity, PARTICIPANT_MANAGERS)


def can_access_task(
    identity: Identity, project: Owned, participant_ids: Collection[int]
) -> bool:
    """Task read, list, create, assignee-add and update."""
    return can_read_project(identity, project, participant_ids)


def can_delete_task(identity: Identity, project: Owned) -> bool:
    return identity.id == project.owner_id


def can_manage_users(identity: Identity) -> bool:
    return identity.is_admin


# ─── Enforcing twins ────────────────────────────────────


def _deny(identity: Identity, action: str, detail: str, **context) -> Forbidden:
    logger.info("access.denied", action=action, user_id=identity.id, **context)
    return Forbidden(detail)


def ensure_can_read_project(
    identity: Identity, project: Owned, participant_ids: Collection[int]
) -> None:
    if not can_read_project(identity, project, participant_ids):
        raise _deny(
            identity, "project.read", "No access to this project",
            project_id=project.id,
        )


def ensure_can_modify_project(identity: Identity, project: Owned) -> None:
    if not can_modify_project(identity, project):
        raise _deny(
            identity, "project.modify", "Insufficient permissions",
            project_id=project.id,
        )


def ensure_can_add_participant(identity: Identity) -> None:
    if not can_add_participant(identity):
        raise _deny(identity, "project.add_participant", "Insufficient permissions")


def ensure_can_access_task(
    identity: Identity, project: Owned, participant_ids: Collection[int]
) -> None:
    if not can_access_task(identity, project, participant_ids):
        raise _deny(
            identity, "task.access", "No access to this task",
            project_id=project.id,
        )


def ensure_can_delete_task(identity: Identity, project: Owned) -> None:
    if not can_delete_task(identity, project):
        raise _deny(
            identity, "task.delete", "Only the project owner can delete tasks",
            project_id=project.id,
        )


def ensure_can_manage_users(identity: Identity) -> None:
    if not can_manage_users(identity):
        raise _deny(identity, "users.manage", "Insufficient permissions")
