"""Task service — tasks and their assignees.

Learn: tasks have no access rules of their own. Everything is decided by
the parent project's accessor set (owner ∪ participants), with one
exception: only the project *owner* may delete a task. Participants can
create, edit and assign, but not delete.

Assignees for a batch of tasks are fetched with one IN (...) query
rather than one query per task.
"""

from collections import defaultdict
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.access.filters import accessible_tasks
from projectx.access.guard import MutationGuard
from projectx.access.resolver import AccessResolver
from projectx.auth.roles import Identity
from projectx.db.models import Task, TaskAssignee, User
from projectx.errors import Conflict, NotFound
from projectx.schemas.task import TaskDetail, TaskRead
from projectx.schemas.user import UserSummary

logger = structlog.get_logger()


async def load_assignees(db: AsyncSession, task_ids: list[int]) -> dict[int, list[User]]:
    """task_id → assigned users, in one query."""
    if not task_ids:
        return {}
    result = await db.execute(
        select(TaskAssignee.task_id, User)
        .join(User, User.id == TaskAssignee.user_id)
        .where(TaskAssignee.task_id.in_(task_ids))
        .order_by(TaskAssignee.task_id, User.id)
    )
    grouped: dict[int, list[User]] = defaultdict(list)
    for task_id, user in result.all():
        grouped[task_id].append(user)
    return dict(grouped)


def task_detail(task: Task, assignees: list[User]) -> TaskDetail:
    return TaskDetail(
        **TaskRead.model_validate(task).model_dump(),
        assignees=[UserSummary.model_validate(u) for u in assignees],
    )


class TaskService:
    """Business logic for task CRUD and assignment."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.access = AccessResolver(db)
        self.guard = MutationGuard(db)

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self, identity: Identity) -> list[TaskDetail]:
        """All tasks in projects the caller can access, newest first."""
        result = await self.db.execute(accessible_tasks(identity.id))
        tasks = list(result.scalars().all())
        assignees = await load_assignees(self.db, [t.id for t in tasks])
        return [task_detail(t, assignees.get(t.id, [])) for t in tasks]

    async def get_task(self, identity: Identity, task_id: int) -> TaskDetail:
        task, _ = await self.access.accessible_task(identity, task_id)
        assignees = await load_assignees(self.db, [task.id])
        return task_detail(task, assignees.get(task.id, []))

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        identity: Identity,
        project_id: int,
        title: str,
        description: str = "",
        status: str = "todo",
    ) -> Task:
        """Create a task in a project the caller can access.

        The payload has already been validated (schemas.task.TaskCreate).
        """
        project = await self.access.project_for_new_task(identity, project_id)

        task = Task(
            project_id=project.id,
            title=title,
            description=description,
            status=status,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        logger.info("task.created", task_id=task.id, project_id=project.id)
        return task

    # ─── Assign ──────────────────────────────────────────

    async def add_assignee(
        self, identity: Identity, task_id: int, user_id: int
    ) -> TaskAssignee:
        """Assign user_id to the task. 409 if already assigned."""
        await self.access.accessible_task(identity, task_id)
        if not await self.access.user_exists(user_id):
            raise NotFound("User not found")

        task = await self.guard.confirm_task_access(identity, task_id)

        existing = await self.db.execute(
            select(TaskAssignee.id).where(
                TaskAssignee.task_id == task.id,
                TaskAssignee.user_id == user_id,
            )
        )
        if existing.first() is not None:
            raise Conflict("User is already assigned")

        assignment = TaskAssignee(task_id=task.id, user_id=user_id)
        self.db.add(assignment)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("User is already assigned")

        await self.db.commit()
        logger.info("task.assignee_added", task_id=task.id, assignee_id=user_id)
        return assignment

    # ─── Update / Delete ─────────────────────────────────

    async def update_task(
        self,
        identity: Identity,
        task_id: int,
        title: str,
        description: str = "",
        status: Optional[str] = None,
    ) -> Task:
        await self.access.accessible_task(identity, task_id)

        task = await self.guard.confirm_task_access(identity, task_id)
        task.title = title
        task.description = description
        if status is not None:
            task.status = status
        await self.db.commit()
        await self.db.refresh(task)
        logger.info("task.updated", task_id=task.id, status=task.status)
        return task

    async def delete_task(self, identity: Identity, task_id: int) -> None:
        await self.access.deletable_task(identity, task_id)

        task = await self.guard.confirm_task_deletion(identity, task_id)
        await self.db.delete(task)
        await self.db.commit()
        logger.info("task.deleted", task_id=task_id)
