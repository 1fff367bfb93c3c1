"""Mutation guard — the last-moment re-check before a write.

Learn: these tests load a resource through the resolver (so it sits in
the session's identity map with the old owner/membership), then change
ownership behind the session's back with a Core UPDATE that does not
synchronize the session. The guard must notice, because it re-reads
with populate_existing instead of trusting the cached object.
"""

import pytest
from sqlalchemy import delete, select, update

from projectx.access.guard import MutationGuard
from projectx.access.resolver import AccessResolver
from projectx.auth.roles import Identity
from projectx.db.models import Project, ProjectParticipant, Task
from projectx.errors import Forbidden, NotFound
from projectx.services.project_service import ProjectService
from projectx.services.task_service import TaskService


def identity_of(user) -> Identity:
    return Identity(id=user.id, email=user.email, role=user.role)


async def _transfer_ownership(db, project_id: int, new_owner_id: int) -> None:
    await db.execute(
        update(Project)
        .where(Project.id == project_id)
        .values(owner_id=new_owner_id)
        .execution_options(synchronize_session=False)
    )


@pytest.mark.asyncio
async def test_guard_sees_ownership_change(db_session, people, project):
    owner = identity_of(people["owner"])
    resolver = AccessResolver(db_session)
    guard = MutationGuard(db_session)

    cached = await resolver.modifiable_project(owner, project["id"])
    await _transfer_ownership(db_session, project["id"], people["lead"].id)
    assert cached.owner_id == people["owner"].id  # stale

    with pytest.raises(Forbidden):
        await guard.confirm_project_modification(owner, project["id"])
    assert cached.owner_id == people["lead"].id  # refreshed by the guard


@pytest.mark.asyncio
async def test_guard_sees_removed_membership(db_session, people, task):
    member = identity_of(people["member"])
    resolver = AccessResolver(db_session)
    guard = MutationGuard(db_session)

    await resolver.accessible_task(member, task["id"])
    await db_session.execute(
        delete(ProjectParticipant).where(
            ProjectParticipant.user_id == people["member"].id
        )
    )

    with pytest.raises(Forbidden):
        await guard.confirm_task_access(member, task["id"])


@pytest.mark.asyncio
async def test_guard_task_deletion(db_session, people, task):
    guard = MutationGuard(db_session)
    with pytest.raises(Forbidden):
        await guard.confirm_task_deletion(identity_of(people["member"]), task["id"])

    confirmed = await guard.confirm_task_deletion(identity_of(people["owner"]), task["id"])
    assert confirmed.id == task["id"]


@pytest.mark.asyncio
async def test_guard_reports_vanished_rows(db_session, people, task):
    guard = MutationGuard(db_session)
    owner = identity_of(people["owner"])

    await db_session.execute(delete(Task).where(Task.id == task["id"]))
    with pytest.raises(NotFound):
        await guard.confirm_task_access(owner, task["id"])
    with pytest.raises(NotFound):
        await guard.confirm_project_modification(owner, 9999)


@pytest.mark.asyncio
async def test_admin_passes_guard_after_transfer(db_session, people, project):
    """Admins may modify any project, whoever owns it now."""
    admin = identity_of(people["admin"])
    await _transfer_ownership(db_session, project["id"], people["lead"].id)
    confirmed = await MutationGuard(db_session).confirm_project_modification(
        admin, project["id"]
    )
    assert confirmed.owner_id == people["lead"].id


# ═══════════════════════════════════════════════════════════
# Services use the guard on every write path
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_project_refused_when_owner_changes_midway(
    db_session, people, project, monkeypatch
):
    svc = ProjectService(db_session)
    owner = identity_of(people["owner"])
    real_check = svc.access.modifiable_project

    async def check_then_transfer(identity, project_id):
        result = await real_check(identity, project_id)
        await _transfer_ownership(db_session, project_id, people["lead"].id)
        return result

    monkeypatch.setattr(svc.access, "modifiable_project", check_then_transfer)

    with pytest.raises(Forbidden):
        await svc.update_project(owner, project["id"], name="Too late")
    await db_session.rollback()

    row = (
        await db_session.execute(select(Project.name).where(Project.id == project["id"]))
    ).scalar_one()
    assert row == "Apollo"


@pytest.mark.asyncio
async def test_delete_task_refused_when_owner_changes_midway(
    db_session, people, task, monkeypatch
):
    svc = TaskService(db_session)
    owner = identity_of(people["owner"])
    real_check = svc.access.deletable_task

    async def check_then_transfer(identity, task_id):
        found, project = await real_check(identity, task_id)
        await _transfer_ownership(db_session, project.id, people["lead"].id)
        return found, project

    monkeypatch.setattr(svc.access, "deletable_task", check_then_transfer)

    with pytest.raises(Forbidden):
        await svc.delete_task(owner, task["id"])
    await db_session.rollback()

    still = await db_session.execute(select(Task.id).where(Task.id == task["id"]))
    assert still.scalar_one() == task["id"]
