"""Role policy and resource access predicates — plain objects, no store.

Learn: the predicates only need something with `id` and `owner_id`, so a
SimpleNamespace stands in for a Project row.
"""

from itertools import product
from types import SimpleNamespace

import pytest

from projectx.access import policy
from projectx.auth.dependencies import require_user_manager
from projectx.auth.roles import (
    ADMINS,
    PARTICIPANT_MANAGERS,
    PROJECT_CREATORS,
    Identity,
    Role,
    has_role,
    require_role,
)
from projectx.errors import Forbidden

OWNER, MEMBER, STRANGER = 1, 2, 3
ROLES = [r.value for r in Role] + ["astronaut"]


def who(user_id: int, role: str = "user") -> Identity:
    return Identity(id=user_id, email=f"u{user_id}@example.com", role=role)


@pytest.fixture()
def project():
    return SimpleNamespace(id=10, owner_id=OWNER)


PARTICIPANTS = {MEMBER}


# ═══════════════════════════════════════════════════════════
# Role policy
# ═══════════════════════════════════════════════════════════


def test_role_sets():
    assert PROJECT_CREATORS == {"manager", "teamlead"}
    assert PARTICIPANT_MANAGERS == {"manager", "teamlead"}
    assert ADMINS == {"admin"}


@pytest.mark.parametrize("role", ROLES)
def test_require_role(role):
    identity = who(5, role)
    if role in PROJECT_CREATORS:
        require_role(identity, PROJECT_CREATORS)
    else:
        with pytest.raises(Forbidden):
            require_role(identity, PROJECT_CREATORS)


def test_require_role_accepts_enum_members():
    require_role(who(5, "admin"), {Role.ADMIN})
    assert has_role(who(5, "manager"), [Role.MANAGER, Role.TEAMLEAD])
    assert not has_role(who(5, "user"), [Role.MANAGER])


def test_empty_allowed_set_is_not_gated():
    require_role(who(5, "astronaut"), set())


def test_is_admin():
    assert who(1, "admin").is_admin
    assert not who(1, "manager").is_admin


# ═══════════════════════════════════════════════════════════
# Project predicates
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize("role", ROLES)
def test_read_is_owner_or_participant(project, role):
    assert policy.can_read_project(who(OWNER, role), project, PARTICIPANTS)
    assert policy.can_read_project(who(MEMBER, role), project, PARTICIPANTS)
    assert not policy.can_read_project(who(STRANGER, role), project, PARTICIPANTS)


def test_admin_gets_no_read_override(project):
    assert not policy.can_read_project(who(STRANGER, "admin"), project, PARTICIPANTS)


def test_modify_is_owner_or_admin(project):
    assert policy.can_modify_project(who(OWNER, "user"), project)
    assert policy.can_modify_project(who(STRANGER, "admin"), project)
    assert not policy.can_modify_project(who(MEMBER, "manager"), project)
    assert not policy.can_modify_project(who(STRANGER, "teamlead"), project)


@pytest.mark.parametrize("role", ROLES)
def test_add_participant_is_role_only(role):
    assert policy.can_add_participant(who(STRANGER, role)) == (
        role in {"manager", "teamlead"}
    )


def test_accessors(project):
    assert policy.accessors(project, {MEMBER, 4}) == {OWNER, MEMBER, 4}
    assert policy.accessors(project, set()) == {OWNER}


# ═══════════════════════════════════════════════════════════
# Task predicates
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize("user_id,role", product([OWNER, MEMBER, STRANGER], ROLES))
def test_task_access_equals_project_read(project, user_id, role):
    identity = who(user_id, role)
    assert policy.can_access_task(identity, project, PARTICIPANTS) == (
        policy.can_read_project(identity, project, PARTICIPANTS)
    )


@pytest.mark.parametrize("user_id,role", product([OWNER, MEMBER, STRANGER], ROLES))
def test_task_delete_is_owner_only(project, user_id, role):
    assert policy.can_delete_task(who(user_id, role), project) == (user_id == OWNER)


def test_participant_can_edit_but_not_delete(project):
    member = who(MEMBER)
    assert policy.can_access_task(member, project, PARTICIPANTS)
    assert not policy.can_delete_task(member, project)


def test_manage_users():
    assert policy.can_manage_users(who(1, "admin"))
    assert not policy.can_manage_users(who(1, "manager"))


# ═══════════════════════════════════════════════════════════
# ensure_* twins
# ═══════════════════════════════════════════════════════════


def test_ensure_twins_raise_forbidden(project):
    stranger = who(STRANGER)
    with pytest.raises(Forbidden):
        policy.ensure_can_read_project(stranger, project, PARTICIPANTS)
    with pytest.raises(Forbidden):
        policy.ensure_can_modify_project(stranger, project)
    with pytest.raises(Forbidden):
        policy.ensure_can_add_participant(stranger)
    with pytest.raises(Forbidden):
        policy.ensure_can_access_task(stranger, project, PARTICIPANTS)
    with pytest.raises(Forbidden):
        policy.ensure_can_delete_task(who(MEMBER), project)
    with pytest.raises(Forbidden):
        policy.ensure_can_manage_users(stranger)


def test_ensure_twins_pass_silently(project):
    owner = who(OWNER, "manager")
    policy.ensure_can_read_project(owner, project, PARTICIPANTS)
    policy.ensure_can_modify_project(owner, project)
    policy.ensure_can_add_participant(owner)
    policy.ensure_can_access_task(owner, project, PARTICIPANTS)
    policy.ensure_can_delete_task(owner, project)


# ═══════════════════════════════════════════════════════════
# User administration gate
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ROLES)
async def test_require_user_manager(role):
    identity = who(1, role)
    if role in ADMINS:
        assert await require_user_manager(identity) is identity
    else:
        with pytest.raises(Forbidden):
            await require_user_manager(identity)


@pytest.mark.asyncio
async def test_user_routes_ask_the_policy(client, auth, people, monkeypatch):
    """Denial on /users comes from policy.ensure_can_manage_users."""
    seen = []

    def deny_everyone(identity):
        seen.append(identity.id)
        raise Forbidden("nope")

    monkeypatch.setattr(policy, "ensure_can_manage_users", deny_everyone)
    admin = auth(people["admin"])
    assert (await client.get("/api/v1/users", headers=admin)).status_code == 403
    assert (await client.get("/api/v1/dashboard/users", headers=admin)).status_code == 403
    assert seen == [people["admin"].id, people["admin"].id]
