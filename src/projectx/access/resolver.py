"""Access resolver — fetch the resource, apply the policy, in a fixed order.

Learn: the pure predicates in policy.py need a project and its
participant ids. This class fetches both from the store (fresh, per
request — nothing is cached) and applies the right predicate for each
operation. It also pins down the one thing the predicates can't: what
happens when the resource doesn't exist.

Two conventions, chosen per operation:

- Reads and task writes answer "absent" and "not yours" identically
  (403), so callers can't probe which ids exist.
- Project update/delete and task delete report 404 first, then 403.
  Existence is revealed there on purpose: those callers are expected to
  be owners who need a truthful "already gone".
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.access import policy
from projectx.auth.roles import Identity
from projectx.db.models import Project, ProjectParticipant, Task, User
from projectx.errors import Forbidden, NotFound


class AccessResolver:
    """Store-backed access decisions for projects and tasks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookups ─────────────────────────────────────────

    async def get_project(self, project_id: int) -> Optional[Project]:
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        return result.scalars().first()

    async def get_task(self, task_id: int) -> Optional[Task]:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        return result.scalars().first()

    async def participant_ids(self, project_id: int) -> set[int]:
        result = await self.db.execute(
            select(ProjectParticipant.user_id).where(
                ProjectParticipant.project_id == project_id
            )
        )
        return set(result.scalars().all())

    # ─── Projects ────────────────────────────────────────

    async def readable_project(self, identity: Identity, project_id: int) -> Project:
        """Project for read/full/info. Absent and denied are both 403."""
        project = await self.get_project(project_id)
        if project is None:
            raise Forbidden("No access to this project")
        policy.ensure_can_read_project(
            identity, project, await self.participant_ids(project.id)
        )
        return project

    async def modifiable_project(self, identity: Identity, project_id: int) -> Project:
        """Project for update/delete. 404 before 403."""
        project = await self.get_project(project_id)
        if project is None:
            raise NotFound("Project not found")
        policy.ensure_can_modify_project(identity, project)
        return project

    async def project_for_participants(
        self, identity: Identity, project_id: int
    ) -> Project:
        """Project for participant add. Role check first, then existence."""
        policy.ensure_can_add_participant(identity)
        project = await self.get_project(project_id)
        if project is None:
            raise NotFound("Project not found")
        return project

    # ─── Tasks ───────────────────────────────────────────

    async def project_for_new_task(self, identity: Identity, project_id: int) -> Project:
        """Parent project for task create. Absent and denied are both 403."""
        project = await self.get_project(project_id)
        if project is None:
            raise Forbidden("No permission to add tasks to this project")
        if not policy.can_access_task(
            identity, project, await self.participant_ids(project.id)
        ):
            raise Forbidden("No permission to add tasks to this project")
        return project

    async def accessible_task(
        self, identity: Identity, task_id: int
    ) -> tuple[Task, Project]:
        """Task for read/update/assign. Absent and denied are both 403."""
        task = await self.get_task(task_id)
        project = await self.get_project(task.project_id) if task else None
        if task is None or project is None:
            raise Forbidden("No access to this task")
        policy.ensure_can_access_task(
            identity, project, await self.participant_ids(project.id)
        )
        return task, project

    async def deletable_task(
        self, identity: Identity, task_id: int
    ) -> tuple[Task, Project]:
        """Task for delete. 404 before 403; project owner only."""
        task = await self.get_task(task_id)
        project = await self.get_project(task.project_id) if task else None
        if task is None or project is None:
            raise NotFound("Task not found")
        policy.ensure_can_delete_task(identity, project)
        return task, project

    # ─── Users ───────────────────────────────────────────

    async def user_exists(self, user_id: int) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None
