"""Mutation guard — re-check authorization right before the write.

Learn: a request checks access early (AccessResolver), then validates,
builds the change, maybe does more reads. If the project's owner or
membership changes in that window, the early decision is stale. So
every update/delete path calls the guard *inside the write transaction*,
immediately before mutating:

1. Re-read the row with SELECT ... FOR UPDATE, so a concurrent writer
   can't change ownership until we commit.
2. populate_existing=True, so an object already in the session's
   identity map is overwritten with the current row instead of being
   trusted as-is.
3. Re-apply the same predicate from policy.py.

On SQLite FOR UPDATE is a no-op; the re-read and re-check still happen.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.access import policy
from projectx.auth.roles import Identity
from projectx.db.models import Project, ProjectParticipant, Task
from projectx.errors import NotFound


class MutationGuard:
    """Re-confirms ownership/membership inside the mutating transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _lock_project(self, project_id: int) -> Optional[Project]:
        result = await self.db.execute(
            select(Project)
            .where(Project.id == project_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def _lock_task(self, task_id: int) -> Optional[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.id == task_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def _current_participants(self, project_id: int) -> set[int]:
        result = await self.db.execute(
            select(ProjectParticipant.user_id).where(
                ProjectParticipant.project_id == project_id
            )
        )
        return set(result.scalars().all())

    async def _lock_task_and_project(self, task_id: int) -> tuple[Task, Project]:
        task = await self._lock_task(task_id)
        project = await self._lock_project(task.project_id) if task else None
        if task is None or project is None:
            raise NotFound("Task not found")
        return task, project

    # ─── Projects ────────────────────────────────────────

    async def confirm_project_modification(
        self, identity: Identity, project_id: int
    ) -> Project:
        project = await self._lock_project(project_id)
        if project is None:
            raise NotFound("Project not found")
        policy.ensure_can_modify_project(identity, project)
        return project

    # ─── Tasks ───────────────────────────────────────────

    async def confirm_task_access(self, identity: Identity, task_id: int) -> Task:
        """Before task update or assignee insert."""
        task, project = await self._lock_task_and_project(task_id)
        policy.ensure_can_access_task(
            identity, project, await self._current_participants(project.id)
        )
        return task

    async def confirm_task_deletion(self, identity: Identity, task_id: int) -> Task:
        task, project = await self._lock_task_and_project(task_id)
        policy.ensure_can_delete_task(identity, project)
        return task
