"""Project service — projects, their full views, and participants.

Learn: every method takes the caller's Identity and asks the access
layer before doing anything:

    list            → filters.accessible_projects (the filter is the policy)
    get/full/info   → AccessResolver.readable_project
    update/delete   → AccessResolver.modifiable_project, then
                      MutationGuard.confirm_project_modification right
                      before the write, in the same transaction
    add participant → AccessResolver.project_for_participants

Project creation is role-gated in the route (manager/teamlead); the
creator becomes the owner.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from projectx.access.filters import accessible_projects
from projectx.access.guard import MutationGuard
from projectx.access.resolver import AccessResolver
from projectx.auth.roles import Identity
from projectx.db.models import Project, ProjectParticipant, Task, User
from projectx.errors import Conflict, NotFound
from projectx.schemas.project import ProjectFull, ProjectRead
from projectx.schemas.task import TaskInProject, TaskRead
from projectx.schemas.user import UserRead
from projectx.services.task_service import load_assignees

logger = structlog.get_logger()


class ProjectService:
    """Business logic for projects and membership."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.access = AccessResolver(db)
        self.guard = MutationGuard(db)

    # ─── Read ────────────────────────────────────────────

    async def list_projects(self, identity: Identity) -> list[Project]:
        result = await self.db.execute(accessible_projects(identity.id))
        return list(result.scalars().all())

    async def get_project(self, identity: Identity, project_id: int) -> Project:
        return await self.access.readable_project(identity, project_id)

    async def get_project_full(self, identity: Identity, project_id: int) -> ProjectFull:
        """Project + tasks (with assignee ids) + participants."""
        project = await self.access.readable_project(identity, project_id)

        tasks_result = await self.db.execute(
            select(Task).where(Task.project_id == project.id).order_by(Task.id)
        )
        tasks = list(tasks_result.scalars().all())
        assignees = await load_assignees(self.db, [t.id for t in tasks])

        participants_result = await self.db.execute(
            select(User)
            .join(ProjectParticipant, ProjectParticipant.user_id == User.id)
            .where(ProjectParticipant.project_id == project.id)
            .order_by(User.id)
        )

        return ProjectFull(
            project=ProjectRead.model_validate(project),
            tasks=[
                TaskInProject(
                    **TaskRead.model_validate(t).model_dump(),
                    assigned_to=[u.id for u in assignees.get(t.id, [])],
                )
                for t in tasks
            ],
            participants=[
                UserRead.model_validate(u) for u in participants_result.scalars().all()
            ],
        )

    # ─── Create ──────────────────────────────────────────

    async def create_project(
        self, identity: Identity, name: str, description: str = ""
    ) -> Project:
        project = Project(name=name, description=description, owner_id=identity.id)
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        logger.info("project.created", project_id=project.id, owner_id=identity.id)
        return project

    # ─── Update / Delete ─────────────────────────────────

    async def update_project(
        self, identity: Identity, project_id: int, name: str, description: str = ""
    ) -> Project:
        await self.access.modifiable_project(identity, project_id)

        project = await self.guard.confirm_project_modification(identity, project_id)
        project.name = name
        project.description = description
        await self.db.commit()
        await self.db.refresh(project)
        logger.info("project.updated", project_id=project.id)
        return project

    async def delete_project(self, identity: Identity, project_id: int) -> None:
        await self.access.modifiable_project(identity, project_id)

        project = await self.guard.confirm_project_modification(identity, project_id)
        await self.db.delete(project)
        await self.db.commit()
        logger.info("project.deleted", project_id=project_id)

    # ─── Participants ────────────────────────────────────

    async def add_participant(
        self, identity: Identity, project_id: int, user_id: int
    ) -> ProjectParticipant:
        """Add user_id to the project's participants. 409 if already there.

        Learn: the duplicate check and the insert share one transaction,
        and the (project_id, user_id) unique constraint catches the case
        where a concurrent identical request slipped in between them.
        """
        project = await self.access.project_for_participants(identity, project_id)
        if not await self.access.user_exists(user_id):
            raise NotFound("User not found")

        existing = await self.db.execute(
            select(ProjectParticipant.id).where(
                ProjectParticipant.project_id == project.id,
                ProjectParticipant.user_id == user_id,
            )
        )
        if existing.first() is not None:
            raise Conflict("User is already a participant")

        membership = ProjectParticipant(project_id=project.id, user_id=user_id)
        self.db.add(membership)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("User is already a participant")

        await self.db.commit()
        logger.info(
            "project.participant_added", project_id=project.id, participant_id=user_id
        )
        return membership
