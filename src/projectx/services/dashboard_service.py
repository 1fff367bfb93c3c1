"""Dashboard service — per-user summaries.

Learn: the dashboards are read-only views built from the same access
filters as the list endpoints. "Assigned tasks" are restricted to
projects the user can still access: an assignment left over from a
membership that was removed doesn't keep the task visible.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.access.filters import (
    accessible_project_ids,
    accessible_projects,
    accessible_tasks,
)
from projectx.db.models import Task, TaskAssignee, User
from projectx.schemas.dashboard import PersonalDashboard, UserDashboard
from projectx.schemas.project import ProjectRead
from projectx.schemas.task import TaskRead
from projectx.schemas.user import UserRead


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _projects(self, user_id: int) -> list[ProjectRead]:
        result = await self.db.execute(accessible_projects(user_id))
        return [ProjectRead.model_validate(p) for p in result.scalars().all()]

    async def _project_tasks(self, user_id: int) -> list[TaskRead]:
        result = await self.db.execute(accessible_tasks(user_id))
        return [TaskRead.model_validate(t) for t in result.scalars().all()]

    async def _assigned_tasks(self, user_id: int) -> list[TaskRead]:
        result = await self.db.execute(
            select(Task)
            .join(TaskAssignee, TaskAssignee.task_id == Task.id)
            .where(
                TaskAssignee.user_id == user_id,
                Task.project_id.in_(accessible_project_ids(user_id)),
            )
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        return [TaskRead.model_validate(t) for t in result.scalars().all()]

    async def personal(self, user_id: int) -> PersonalDashboard:
        return PersonalDashboard(
            projects=await self._projects(user_id),
            assigned_tasks=await self._assigned_tasks(user_id),
        )

    async def all_users(self) -> list[UserDashboard]:
        """Admin view: every user with their projects and tasks."""
        result = await self.db.execute(select(User).order_by(User.id))
        rows = []
        for user in result.scalars().all():
            rows.append(
                UserDashboard(
                    **UserRead.model_validate(user).model_dump(),
                    projects=await self._projects(user.id),
                    project_tasks=await self._project_tasks(user.id),
                    assigned_tasks=await self._assigned_tasks(user.id),
                )
            )
        return rows
